"""Canonicalizer: merge per-file partial records into one authoritative record.

Every field has one owning format. The owner's value wins when present,
otherwise the first present fallback. Followers that disagree are reported
and later overwritten, except for conflicts that cannot be adjudicated
(manifest vs CodeMeta version), which are reported as errors and left alone.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Set, Union

from license_expression import ExpressionError, get_spdx_licensing

from rsmd._enrichment import EnrichmentResult
from rsmd.logging_config import logger

from .diagnostics import Diagnostics
from .formats.readme import readme_reference
from .fs import FileAccess, OverlayFileAccess
from .record import MetadataRecord, PartialRecord, Person, SoftwareCategory, unique
from .registry import FormatRegistry

# SPDX licensing instance for validation
_spdx_licensing = get_spdx_licensing()

# field -> formats consulted, owner first
SCALAR_SOURCES: Dict[str, tuple] = {
    "name": ("manifest", "codemeta", "zenodo"),
    "description": ("manifest", "codemeta", "zenodo"),
    "version": ("manifest", "codemeta", "zenodo"),
    "license_id": ("license", "manifest", "codemeta", "zenodo", "headers"),
    "repository_url": ("manifest", "codemeta"),
    "first_release_date": ("codemeta",),
    "build_instructions": ("codemeta",),
    "readme": ("codemeta",),
    "date_modified": ("codemeta",),
}

AUTHOR_SOURCES = ("manifest", "codemeta", "zenodo")
KEYWORD_SOURCES = ("codemeta", "manifest", "zenodo")

# Fields whose absence from every source is worth reporting
EXPECTED_FIELDS = ("name", "description", "version", "license_id", "repository_url", "authors", "category")


@dataclass
class CrosswalkOptions:
    """
    Caller-supplied overrides for one crosswalk run.

    Attributes:
        category: Research software category; overrides the stored value
        keywords: Replaces the keyword set entirely when given
        build: False keeps stored build instructions, True copies the README
            reference, a string is used literally
        update: Let the manifest version win over a disagreeing CodeMeta version
        offline: Skip network lookups
    """

    category: Optional[str] = None
    keywords: Optional[List[str]] = None
    build: Union[bool, str] = False
    update: bool = False
    offline: bool = False


@dataclass
class Canonicalization:
    """Outcome of merging: the canonical record plus what was found along the way."""

    record: MetadataRecord
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    skipped_fields: Set[str] = field(default_factory=set)


def _present(partials: Mapping[str, PartialRecord], sources: tuple, field_name: str) -> List[tuple]:
    values = []
    for source in sources:
        partial = partials.get(source)
        value = getattr(partial, field_name) if partial is not None else None
        if value is not None:
            values.append((source, value))
    return values


def _resolve_scalar(
    field_name: str,
    partials: Mapping[str, PartialRecord],
    options: CrosswalkOptions,
    result: Canonicalization,
) -> Optional[Any]:
    values = _present(partials, SCALAR_SOURCES[field_name], field_name)
    if not values:
        return None

    owner, canonical = values[0]
    for source, value in values[1:]:
        if value == canonical:
            continue
        if field_name == "version" and owner == "manifest" and source == "codemeta":
            if options.update:
                logger.info(f"Updating codemeta version {value} to manifest version {canonical}")
                continue
            result.diagnostics.error(
                f"Version mismatch: {owner} has {canonical}, {source} has {value}; "
                "leaving every version untouched (run with update to propagate the manifest version)",
                field_name,
            )
            result.skipped_fields.add(field_name)
            continue
        if field_name == "version" and field_name in result.skipped_fields:
            continue
        result.diagnostics.warning(
            f"{source} {field_name} {value!s} differs from {owner} {canonical!s}; it will be overwritten",
            field_name,
        )
    return canonical


def _validate_license(license_id: str, diagnostics: Diagnostics) -> None:
    try:
        _spdx_licensing.parse(license_id, validate=True)
    except ExpressionError as e:
        diagnostics.warning(f"License {license_id!r} is not a valid SPDX expression: {e}", "license_id")


def merge_authors(
    partials: Mapping[str, PartialRecord],
    enrichment: EnrichmentResult,
    diagnostics: Diagnostics,
) -> List[Person]:
    """
    Union the author lists of every source.

    Manifest order comes first, newcomers follow in first-seen order.
    Duplicates and lookup results only fill attributes that are missing.
    """
    merged: List[Person] = []
    for source in AUTHOR_SOURCES:
        partial = partials.get(source)
        for person in (partial.authors if partial is not None else None) or []:
            for index, existing in enumerate(merged):
                if existing.same_as(person):
                    merged[index] = existing.fill_from(person)
                    break
            else:
                merged.append(person)

    enriched: List[Person] = []
    for person in merged:
        if person.identifier and person.identifier in enrichment.persons:
            found = enrichment.persons[person.identifier]
            if found is None:
                diagnostics.warning(f"ORCID {person.identifier} ({person.name or 'unnamed'}) did not resolve", "authors")
            else:
                person = person.fill_from(found)

        affiliation = person.affiliation
        if affiliation and affiliation.identifier and affiliation.identifier in enrichment.organizations:
            organization = enrichment.organizations[affiliation.identifier]
            if organization is None:
                diagnostics.warning(
                    f"ROR {affiliation.identifier} ({affiliation.name or 'unnamed'}) did not resolve; "
                    "affiliation kept as stored",
                    "authors",
                )
            else:
                person = replace(person, affiliation=affiliation.fill_from(organization))
        enriched.append(person)
    return enriched


def _resolve_category(
    partials: Mapping[str, PartialRecord],
    options: CrosswalkOptions,
    diagnostics: Diagnostics,
) -> Optional[str]:
    codemeta = partials.get("codemeta")
    category = options.category or (codemeta.category if codemeta is not None else None)
    if category and category not in SoftwareCategory.values():
        diagnostics.warning(
            f"Unknown category {category!r}; expected one of {', '.join(SoftwareCategory.values())}",
            "category",
        )
    return category


def _resolve_build_instructions(
    record: MetadataRecord,
    options: CrosswalkOptions,
    diagnostics: Diagnostics,
) -> Optional[str]:
    if options.build is True:
        if record.readme:
            return record.readme
        diagnostics.warning("Cannot copy build instructions from the README: no README found", "build_instructions")
        return record.build_instructions
    if isinstance(options.build, str) and options.build:
        return options.build
    return record.build_instructions


def canonicalize(
    partials: Mapping[str, PartialRecord],
    enrichment: EnrichmentResult,
    options: CrosswalkOptions,
    readme_hint: Optional[str] = None,
) -> Canonicalization:
    """
    Derive the canonical record.

    Args:
        partials: Extracted records keyed by format name
        enrichment: Results of every external lookup
        options: Caller overrides
        readme_hint: Relative path of the project README, if one exists

    Returns:
        Canonicalization with the record, the diagnostics and the fields
        no writer may touch
    """
    result = Canonicalization(record=MetadataRecord())
    record = result.record

    for field_name in SCALAR_SOURCES:
        setattr(record, field_name, _resolve_scalar(field_name, partials, options, result))

    if record.license_id:
        _validate_license(record.license_id, result.diagnostics)

    record.authors = merge_authors(partials, enrichment, result.diagnostics)

    if options.keywords is not None:
        record.keywords = unique(options.keywords)
    else:
        record.keywords = unique(kw for _, words in _present(partials, KEYWORD_SOURCES, "keywords") for kw in words)

    record.category = _resolve_category(partials, options, result.diagnostics)

    if record.first_release_date is None:
        record.first_release_date = enrichment.first_release_date

    if enrichment.operating_systems:
        record.operating_systems = unique(enrichment.operating_systems)
    else:
        codemeta = partials.get("codemeta")
        record.operating_systems = unique((codemeta.operating_systems if codemeta is not None else None) or [])

    if record.readme is None and readme_hint:
        record.readme = readme_reference(readme_hint, record.repository_url)
    record.build_instructions = _resolve_build_instructions(record, options, result.diagnostics)

    for field_name in EXPECTED_FIELDS:
        if not getattr(record, field_name):
            result.diagnostics.warning(f"Field {field_name} has no source", field_name)

    return result


def touch_if_changed(
    registry: FormatRegistry,
    fs: FileAccess,
    partials: Mapping[str, PartialRecord],
    canonical: Canonicalization,
    today: Optional[date] = None,
) -> bool:
    """
    Set ``date_modified`` to today if rewriting would change any metadata.

    The rendered files are re-extracted and compared field by field with the
    inputs, ignoring ``date_modified`` itself, so purely cosmetic rewrites do
    not count as modifications.

    Returns:
        True if the date was updated
    """
    changes = registry.render_all(fs, canonical.record, canonical.skipped_fields)
    if not changes:
        return False

    rendered = registry.extract_all(OverlayFileAccess(fs, changes))
    for name, before in partials.items():
        after = rendered.get(name, PartialRecord())
        if before.without("date_modified") != after.without("date_modified"):
            canonical.record.date_modified = today or date.today()
            logger.debug(f"Metadata in {name} changed; setting dateModified to {canonical.record.date_modified}")
            return True
    return False
