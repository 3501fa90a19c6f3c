""".zenodo.json format (Zenodo deposition metadata)."""

from typing import AbstractSet, Any, Dict, List, Optional

from rsmd.exceptions import ParseError
from rsmd.logging_config import logger

from ..fs import FileAccess
from ..record import MetadataRecord, Organization, PartialRecord, Person
from ..utils import dump_json, load_json_object, normalize_orcid, parse_version, split_name, string_list

ZENODO_FILE = ".zenodo.json"

ZENODO_KEYS = (
    "title",
    "description",
    "version",
    "upload_type",
    "access_right",
    "license",
    "creators",
    "keywords",
)

ZENODO_DEFAULTS = {
    "upload_type": "software",
    "access_right": "open",
}


def creator_name(person: Person) -> Optional[str]:
    """Render a "Given Family" name in Zenodo's "Family, Given" form."""
    if not person.name:
        return None
    given, family = split_name(person.name)
    return f"{family}, {given}" if given else family


def _parse_creator(value: Any) -> Person:
    if not isinstance(value, dict):
        raise ParseError(ZENODO_FILE, "creators entries must be objects")
    name = value.get("name")
    if isinstance(name, str) and "," in name:
        family, given = (part.strip() for part in name.split(",", 1))
        name = f"{given} {family}".strip()
    affiliation = value.get("affiliation")
    return Person(
        name=name or None,
        identifier=normalize_orcid(value.get("orcid")),
        affiliation=Organization(name=affiliation) if isinstance(affiliation, str) and affiliation else None,
    )


def _parse_license(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        value = value.get("id")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class ZenodoFormat:
    """
    Format handler for ``.zenodo.json``.

    Carries title/description/version, license, creators (with ORCID and
    affiliation name) and keywords. Other deposition keys (grants,
    related_identifiers, communities, ...) are passed through untouched.
    """

    name = "zenodo"

    def paths(self, fs: FileAccess) -> List[str]:
        return [ZENODO_FILE]

    def extract(self, content: Optional[bytes]) -> PartialRecord:
        if content is None:
            return PartialRecord()

        data = load_json_object(content, ZENODO_FILE)
        record = PartialRecord()

        for key in ("title", "description"):
            if data.get(key) is not None and not isinstance(data[key], str):
                raise ParseError(ZENODO_FILE, f"{key} must be a string")
        record.name = data.get("title")
        record.description = data.get("description")

        if data.get("version") is not None:
            record.version = parse_version(data["version"], ZENODO_FILE)
        if "license" in data:
            record.license_id = _parse_license(data["license"])
        if "creators" in data:
            if not isinstance(data["creators"], list):
                raise ParseError(ZENODO_FILE, "creators must be a list")
            record.authors = [p for p in (_parse_creator(c) for c in data["creators"]) if p.has_data()]
        if "keywords" in data:
            record.keywords = string_list(data["keywords"], ZENODO_FILE, "keywords")

        logger.debug(f"Extracted from {ZENODO_FILE}: {', '.join(record.present_fields()) or 'nothing'}")
        return record

    def write(
        self,
        content: Optional[bytes],
        record: MetadataRecord,
        skip: AbstractSet[str] = frozenset(),
    ) -> Optional[bytes]:
        existing = load_json_object(content, ZENODO_FILE) if content is not None else dict(ZENODO_DEFAULTS)
        result = dict(existing)

        if record.name:
            result["title"] = record.name
        if record.description is not None:
            result["description"] = record.description
        if record.version is not None and "version" not in skip:
            result["version"] = str(record.version)
        if record.license_id and "license_id" not in skip:
            if _parse_license(existing.get("license")) != record.license_id:
                result["license"] = record.license_id
        if record.authors and "authors" not in skip:
            creators = []
            for person in record.authors:
                creator: Dict[str, Any] = {}
                name = creator_name(person)
                if name:
                    creator["name"] = name
                if person.identifier:
                    creator["orcid"] = person.identifier
                if person.affiliation and person.affiliation.name:
                    creator["affiliation"] = person.affiliation.name
                if creator:
                    creators.append(creator)
            result["creators"] = creators
        if record.keywords or "keywords" in existing:
            result["keywords"] = list(record.keywords)

        if content is None:
            result = {key: result[key] for key in ZENODO_KEYS if key in result}
        return dump_json(result)
