"""Crosswalk entry point: read every metadata file, reconcile, write back."""

import os
from dataclasses import dataclass, field
from typing import List, Optional, Union

from rsmd._crosswalk.canonicalizer import CrosswalkOptions, canonicalize, touch_if_changed
from rsmd._crosswalk.diagnostics import Diagnostics
from rsmd._crosswalk.formats.readme import find_readme
from rsmd._crosswalk.fs import FileAccess, LocalFileAccess
from rsmd._crosswalk.record import MetadataRecord
from rsmd._crosswalk.registry import FormatRegistry, create_default_registry
from rsmd._enrichment import Enricher
from rsmd.logging_config import logger

__all__ = ["CrosswalkOptions", "CrosswalkResult", "crosswalk", "run_crosswalk"]


@dataclass
class CrosswalkResult:
    """
    Outcome of a crosswalk run.

    Attributes:
        record: The canonical metadata that was written
        diagnostics: Every warning and error found, in order
        written: Relative paths of the files that were rewritten
    """

    record: MetadataRecord
    diagnostics: Diagnostics
    written: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics.errors


def run_crosswalk(
    fs: FileAccess,
    options: CrosswalkOptions,
    enricher: Optional[Enricher] = None,
    registry: Optional[FormatRegistry] = None,
) -> CrosswalkResult:
    """
    Run one crosswalk over an explicit working tree.

    Extraction completes for every format before anything is written, so a
    malformed file aborts the run with the tree untouched.

    Raises:
        ParseError: If any present metadata file is malformed
        FileProcessingError: If a file cannot be written
    """
    registry = registry or create_default_registry()

    partials = registry.extract_all(fs)
    logger.info(f"Extracted metadata from formats: {', '.join(registry.list_formats())}")

    owns_enricher = enricher is None
    if enricher is None:
        enricher = Enricher(offline=options.offline)
    try:
        enrichment = enricher.enrich(partials, fs)
    finally:
        if owns_enricher:
            enricher.close()

    canonical = canonicalize(partials, enrichment, options, readme_hint=find_readme(fs))
    touch_if_changed(registry, fs, partials, canonical)

    changes = registry.render_all(fs, canonical.record, canonical.skipped_fields)
    for path, content in changes.items():
        fs.write_bytes(path, content)
        logger.info(f"Updated {path}")
    if not changes:
        logger.info("All metadata files are up to date")

    return CrosswalkResult(record=canonical.record, diagnostics=canonical.diagnostics, written=list(changes))


def crosswalk(
    working_dir: Union[str, os.PathLike] = ".",
    category: Optional[str] = None,
    keywords: Optional[List[str]] = None,
    build: Union[bool, str] = False,
    update: bool = False,
    offline: bool = False,
    fs: Optional[FileAccess] = None,
    enricher: Optional[Enricher] = None,
) -> CrosswalkResult:
    """
    Make all metadata files of a project agree with each other.

    Args:
        working_dir: Project root (ignored when ``fs`` is given)
        category: Research software category for CodeMeta
        keywords: Replace the keyword set with these keywords
        build: False keeps build instructions, True copies the README
            reference, a string sets them literally
        update: Propagate the manifest version even if CodeMeta disagrees
        offline: Skip ROR, ORCID and PyPI lookups
        fs: File access to use instead of the local directory
        enricher: Enricher to use instead of a fresh one

    Returns:
        CrosswalkResult with the canonical record, diagnostics and written paths

    Example:
        result = crosswalk(".", category="astronomy", keywords=["astronomy", "fits"])
        for diagnostic in result.diagnostics:
            print(diagnostic)
    """
    options = CrosswalkOptions(category=category, keywords=keywords, build=build, update=update, offline=offline)
    if fs is None:
        fs = LocalFileAccess(working_dir)
        logger.debug(f"Crosswalk working directory: {fs.root}")
    return run_crosswalk(fs, options, enricher=enricher)
