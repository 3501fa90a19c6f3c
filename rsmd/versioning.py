"""Version bump commands.

Only the manifest version is edited directly; a crosswalk with ``update``
then carries the new version into every other file.
"""

import os
from typing import Optional, Union

from semantic_version import Version

from rsmd._crosswalk.formats.manifest import MANIFEST_FILE, ManifestFormat, set_manifest_version
from rsmd._crosswalk.fs import FileAccess, LocalFileAccess
from rsmd._crosswalk.registry import create_default_registry
from rsmd._enrichment import Enricher
from rsmd.exceptions import ConfigurationError
from rsmd.logging_config import logger
from rsmd.orchestrator import CrosswalkResult, crosswalk

VERSION_PARTS = ("major", "minor", "patch")


def next_version(version: Version, part: str) -> Version:
    """
    Compute the next release version.

    A prerelease of the requested release is promoted to that release
    instead of skipping past it. Build metadata is always dropped.

    Examples:
        (1.2.3, "major") -> 2.0.0
        (1.2.3, "minor") -> 1.3.0
        (1.2.3, "patch") -> 1.2.4
        (1.3.0-rc1, "patch") -> 1.3.0
        (1.3.0-rc1, "minor") -> 1.3.0
        (2.0.0-rc1, "major") -> 2.0.0
        (1.3.1-rc1, "minor") -> 1.4.0
    """
    release = Version(major=version.major, minor=version.minor, patch=version.patch)
    if part == "major":
        if version.prerelease and version.minor == 0 and version.patch == 0:
            return release
        return Version(major=version.major + 1, minor=0, patch=0)
    if part == "minor":
        if version.prerelease and version.patch == 0:
            return release
        return Version(major=version.major, minor=version.minor + 1, patch=0)
    if part == "patch":
        if version.prerelease:
            return release
        return Version(major=version.major, minor=version.minor, patch=version.patch + 1)
    raise ValueError(f"Unknown version part {part!r}; expected one of {', '.join(VERSION_PARTS)}")


def bump_version(
    part: str,
    working_dir: Union[str, os.PathLike] = ".",
    fs: Optional[FileAccess] = None,
    enricher: Optional[Enricher] = None,
    **options,
) -> CrosswalkResult:
    """
    Bump one part of the manifest version and propagate it.

    Every format is parsed before the manifest is touched, so a malformed
    file aborts the bump with nothing written.

    Raises:
        ConfigurationError: If the manifest is missing or has no static version
        ParseError: If any metadata file cannot be parsed
    """
    if fs is None:
        fs = LocalFileAccess(working_dir)

    create_default_registry().extract_all(fs)

    content = fs.read_bytes(MANIFEST_FILE)
    if content is None:
        raise ConfigurationError(f"No {MANIFEST_FILE} found; cannot bump the version")
    current = ManifestFormat().extract(content).version
    if current is None:
        raise ConfigurationError(f"{MANIFEST_FILE} has no static project.version to bump")

    new = next_version(current, part)
    fs.write_bytes(MANIFEST_FILE, set_manifest_version(content, new))
    logger.info(f"Bumped version {current} -> {new}")

    options["update"] = True
    return crosswalk(working_dir, fs=fs, enricher=enricher, **options)


def increase_major(working_dir=".", fs=None, enricher=None, **options) -> CrosswalkResult:
    """Increase the major version (a.b.c -> a+1.0.0) and run the crosswalk."""
    return bump_version("major", working_dir, fs=fs, enricher=enricher, **options)


def increase_minor(working_dir=".", fs=None, enricher=None, **options) -> CrosswalkResult:
    """Increase the minor version (a.b.c -> a.b+1.0) and run the crosswalk."""
    return bump_version("minor", working_dir, fs=fs, enricher=enricher, **options)


def increase_patch(working_dir=".", fs=None, enricher=None, **options) -> CrosswalkResult:
    """Increase the patch version (a.b.c -> a.b.c+1) and run the crosswalk."""
    return bump_version("patch", working_dir, fs=fs, enricher=enricher, **options)
