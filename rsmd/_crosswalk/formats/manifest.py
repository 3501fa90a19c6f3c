"""pyproject.toml manifest format (PEP 621 / PEP 639).

The manifest owns the project name, description, version, author order and
repository URL. Reads go through ``tomllib``; writes go through ``tomlkit`` so
that every byte outside the owned keys survives a rewrite.
"""

from typing import AbstractSet, Any, Dict, List, Optional

import tomlkit
import tomllib
from semantic_version import Version

from rsmd.exceptions import ParseError
from rsmd.logging_config import logger

from ..fs import FileAccess
from ..record import MetadataRecord, PartialRecord, Person
from ..utils import parse_version, string_list

MANIFEST_FILE = "pyproject.toml"

# Keys of [project.urls] that name the source repository, in preference order
REPOSITORY_URL_KEYS = ("repository", "source", "source code", "code", "github")


def load_manifest(content: bytes) -> Dict[str, Any]:
    """Parse manifest bytes into a plain dict."""
    try:
        return tomllib.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        raise ParseError(MANIFEST_FILE, str(e)) from e


def _find_repository_key(urls: Dict[str, Any]) -> Optional[str]:
    lowered = {key.lower(): key for key in urls}
    for candidate in REPOSITORY_URL_KEYS:
        if candidate in lowered:
            return lowered[candidate]
    return None


def _author_entry(person: Person) -> Dict[str, str]:
    entry = {}
    if person.name:
        entry["name"] = person.name
    if person.email:
        entry["email"] = person.email
    return entry


class ManifestFormat:
    """
    Format handler for ``pyproject.toml``.

    Reads/writes inside the ``[project]`` table:
    - name, description, version (unless listed in ``dynamic``)
    - license (SPDX string, or ``{text = ...}``; ``{file = ...}`` is left alone)
    - authors -> [{name, email}]
    - keywords
    - urls.Repository (or Source / Source Code / Code) -> repository_url
    """

    name = "manifest"

    def paths(self, fs: FileAccess) -> List[str]:
        return [MANIFEST_FILE]

    def extract(self, content: Optional[bytes]) -> PartialRecord:
        if content is None:
            return PartialRecord()

        project = load_manifest(content).get("project", {})
        if not isinstance(project, dict):
            raise ParseError(MANIFEST_FILE, "[project] must be a table")

        record = PartialRecord()
        for key in ("name", "description"):
            value = project.get(key)
            if value is not None:
                if not isinstance(value, str):
                    raise ParseError(MANIFEST_FILE, f"project.{key} must be a string")
                setattr(record, key, value)

        if "version" in project and "version" not in project.get("dynamic", []):
            record.version = parse_version(project["version"], MANIFEST_FILE)

        license_data = project.get("license")
        if isinstance(license_data, str):
            record.license_id = license_data.strip()
        elif isinstance(license_data, dict) and isinstance(license_data.get("text"), str):
            # Only short texts are identifiers; full license bodies are not
            text = license_data["text"].strip()
            if text and "\n" not in text and len(text) < 64:
                record.license_id = text

        if "authors" in project:
            authors = project["authors"]
            if not isinstance(authors, list) or not all(isinstance(a, dict) for a in authors):
                raise ParseError(MANIFEST_FILE, "project.authors must be an array of tables")
            record.authors = [
                Person(name=author.get("name"), email=author.get("email"))
                for author in authors
                if author.get("name") or author.get("email")
            ]

        if "keywords" in project:
            record.keywords = string_list(project["keywords"], MANIFEST_FILE, "project.keywords")

        urls = project.get("urls")
        if isinstance(urls, dict):
            key = _find_repository_key(urls)
            if key and isinstance(urls[key], str):
                record.repository_url = urls[key]

        logger.debug(f"Extracted from {MANIFEST_FILE}: {', '.join(record.present_fields()) or 'nothing'}")
        return record

    def write(
        self,
        content: Optional[bytes],
        record: MetadataRecord,
        skip: AbstractSet[str] = frozenset(),
    ) -> Optional[bytes]:
        if content is None:
            doc = tomlkit.document()
            build_system = tomlkit.table()
            build_system["requires"] = ["setuptools>=61"]
            build_system["build-backend"] = "setuptools.build_meta"
            doc["build-system"] = build_system
            existing: Dict[str, Any] = {}
        else:
            doc = tomlkit.parse(content.decode("utf-8"))
            existing = load_manifest(content).get("project", {})

        if "project" not in doc:
            doc["project"] = tomlkit.table()
        project = doc["project"]

        def update(key: str, value: Any) -> None:
            if existing.get(key) != value:
                project[key] = value

        if record.name:
            update("name", record.name)
        if record.version is not None and "version" not in skip and "version" not in existing.get("dynamic", []):
            update("version", str(record.version))
        if record.description is not None:
            update("description", record.description)

        if record.license_id:
            license_data = existing.get("license")
            if isinstance(license_data, dict) and "file" in license_data and "text" not in license_data:
                pass
            elif isinstance(license_data, dict) and "text" in license_data:
                if license_data["text"].strip() != record.license_id:
                    project["license"]["text"] = record.license_id
            else:
                update("license", record.license_id)

        authors = [_author_entry(p) for p in record.authors if p.name or p.email]
        if authors and existing.get("authors") != authors:
            array = tomlkit.array()
            for entry in authors:
                table = tomlkit.inline_table()
                table.update(entry)
                array.append(table)
            array.multiline(True)
            project["authors"] = array

        if record.keywords or "keywords" in existing:
            update("keywords", list(record.keywords))

        if record.repository_url:
            urls = existing.get("urls") if isinstance(existing.get("urls"), dict) else {}
            key = _find_repository_key(urls) or "Repository"
            if urls.get(key) != record.repository_url:
                if "urls" not in project:
                    project["urls"] = tomlkit.table()
                project["urls"][key] = record.repository_url

        return tomlkit.dumps(doc).encode("utf-8")


def set_manifest_version(content: bytes, version: Version) -> bytes:
    """Rewrite only ``project.version`` of a manifest."""
    existing = load_manifest(content).get("project", {})
    if "version" not in existing:
        raise ParseError(MANIFEST_FILE, "project.version is not set")
    doc = tomlkit.parse(content.decode("utf-8"))
    doc["project"]["version"] = str(version)
    return tomlkit.dumps(doc).encode("utf-8")
