"""codemeta.json format (CodeMeta 3.0 JSON-LD)."""

from typing import AbstractSet, Any, Dict, List, Optional

from rsmd.exceptions import ParseError
from rsmd.logging_config import logger

from ..fs import FileAccess
from ..record import MetadataRecord, Organization, PartialRecord, Person
from ..utils import (
    ORCID_URL_PREFIX,
    ROR_URL_PREFIX,
    SPDX_URL_PREFIX,
    dump_json,
    join_name,
    load_json_object,
    normalize_orcid,
    normalize_ror,
    parse_date,
    parse_version,
    split_name,
    string_list,
)

CODEMETA_FILE = "codemeta.json"
CODEMETA_CONTEXT = "https://w3id.org/codemeta/3.0"

# Canonical key order used for new files and for keys appended to existing ones
CODEMETA_KEYS = (
    "@context",
    "@type",
    "name",
    "description",
    "version",
    "license",
    "author",
    "keywords",
    "applicationCategory",
    "codeRepository",
    "readme",
    "buildInstructions",
    "operatingSystem",
    "programmingLanguage",
    "developmentStatus",
    "datePublished",
    "dateModified",
)

# Non-derivable defaults for a freshly created descriptor
CODEMETA_DEFAULTS = {
    "@context": CODEMETA_CONTEXT,
    "@type": "SoftwareSourceCode",
    "programmingLanguage": "Python",
    "developmentStatus": "active",
}


def _parse_license(value: Any) -> Optional[str]:
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        value = value.get("identifier") or value.get("@id") or value.get("url")
    if not isinstance(value, str) or not value.strip():
        return None
    value = value.strip()
    for prefix in (SPDX_URL_PREFIX, "http://spdx.org/licenses/"):
        if value.startswith(prefix):
            value = value[len(prefix) :]
            break
    if value.endswith(".html"):
        value = value[: -len(".html")]
    return value


def _parse_affiliation(value: Any) -> Optional[Organization]:
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, str):
        return Organization(name=value) if value.strip() else None
    if isinstance(value, dict):
        address = value.get("address")
        org = Organization(
            name=value.get("name") or value.get("legalName"),
            identifier=normalize_ror(value.get("@id") or value.get("identifier")),
            country=address.get("addressCountry") if isinstance(address, dict) else None,
        )
        return org if org.has_data() else None
    return None


def _parse_person(value: Any) -> Person:
    if not isinstance(value, dict):
        raise ParseError(CODEMETA_FILE, "author entries must be objects")
    name = value.get("name") if isinstance(value.get("name"), str) else None
    if not name:
        name = join_name(value.get("givenName"), value.get("familyName"))
    return Person(
        name=name,
        identifier=normalize_orcid(value.get("@id") or value.get("identifier")),
        affiliation=_parse_affiliation(value.get("affiliation")),
        email=value.get("email"),
    )


def _render_affiliation(org: Organization) -> Dict[str, Any]:
    data: Dict[str, Any] = {"@type": "Organization"}
    if org.identifier:
        data["@id"] = f"{ROR_URL_PREFIX}{org.identifier}"
    if org.name:
        data["name"] = org.name
    if org.country:
        data["address"] = {"@type": "PostalAddress", "addressCountry": org.country}
    return data


def render_person(person: Person) -> Dict[str, Any]:
    data: Dict[str, Any] = {"@type": "Person"}
    if person.identifier:
        data["@id"] = f"{ORCID_URL_PREFIX}{person.identifier}"
    if person.name:
        given, family = split_name(person.name)
        if given:
            data["givenName"] = given
        data["familyName"] = family
    if person.email:
        data["email"] = person.email
    if person.affiliation and person.affiliation.has_data():
        data["affiliation"] = _render_affiliation(person.affiliation)
    return data


def _merge_ordered(existing: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    """Apply updates keeping the position of existing keys; new keys follow canonical order."""
    result = dict(existing)
    for key in CODEMETA_KEYS:
        if key in updates:
            result[key] = updates[key]
    for key, value in updates.items():
        result[key] = value
    return result


class CodeMetaFormat:
    """
    Format handler for ``codemeta.json``.

    Carries every field of the metadata record. Keys the crosswalk does not
    own (funding, referencePublication, ...) are passed through untouched.
    """

    name = "codemeta"

    def paths(self, fs: FileAccess) -> List[str]:
        return [CODEMETA_FILE]

    def extract(self, content: Optional[bytes]) -> PartialRecord:
        if content is None:
            return PartialRecord()

        data = load_json_object(content, CODEMETA_FILE)
        record = PartialRecord()

        for key in ("name", "description", "codeRepository", "buildInstructions", "readme", "applicationCategory"):
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise ParseError(CODEMETA_FILE, f"{key} must be a string")
        record.name = data.get("name")
        record.description = data.get("description")
        record.repository_url = data.get("codeRepository")
        record.build_instructions = data.get("buildInstructions")
        record.readme = data.get("readme")
        record.category = data.get("applicationCategory")

        if data.get("version") is not None:
            record.version = parse_version(data["version"], CODEMETA_FILE)
        if "license" in data:
            record.license_id = _parse_license(data["license"])

        if "author" in data:
            authors = data["author"]
            if isinstance(authors, dict):
                authors = [authors]
            if not isinstance(authors, list):
                raise ParseError(CODEMETA_FILE, "author must be a list")
            record.authors = [p for p in (_parse_person(a) for a in authors) if p.has_data()]

        if "keywords" in data:
            record.keywords = string_list(data["keywords"], CODEMETA_FILE, "keywords")
        if "operatingSystem" in data:
            record.operating_systems = string_list(data["operatingSystem"], CODEMETA_FILE, "operatingSystem")

        if data.get("datePublished"):
            record.first_release_date = parse_date(data["datePublished"], CODEMETA_FILE)
        if data.get("dateModified"):
            record.date_modified = parse_date(data["dateModified"], CODEMETA_FILE)

        logger.debug(f"Extracted from {CODEMETA_FILE}: {', '.join(record.present_fields()) or 'nothing'}")
        return record

    def write(
        self,
        content: Optional[bytes],
        record: MetadataRecord,
        skip: AbstractSet[str] = frozenset(),
    ) -> Optional[bytes]:
        existing = load_json_object(content, CODEMETA_FILE) if content is not None else dict(CODEMETA_DEFAULTS)

        updates: Dict[str, Any] = {}
        if "@context" not in existing:
            updates["@context"] = CODEMETA_CONTEXT
        if "@type" not in existing:
            updates["@type"] = "SoftwareSourceCode"

        scalars = {
            "name": record.name,
            "description": record.description,
            "version": str(record.version) if record.version is not None else None,
            "applicationCategory": record.category,
            "codeRepository": record.repository_url,
            "readme": record.readme,
            "buildInstructions": record.build_instructions,
            "datePublished": record.first_release_date.isoformat() if record.first_release_date else None,
            "dateModified": record.date_modified.isoformat() if record.date_modified else None,
        }
        field_for_key = {"version": "version", "applicationCategory": "category"}
        for key, value in scalars.items():
            if value is None or field_for_key.get(key) in skip:
                continue
            updates[key] = value

        if record.license_id and "license_id" not in skip:
            if _parse_license(existing.get("license")) != record.license_id:
                updates["license"] = f"{SPDX_URL_PREFIX}{record.license_id}"
        if record.authors and "authors" not in skip:
            updates["author"] = [render_person(p) for p in record.authors]
        if record.keywords or "keywords" in existing:
            updates["keywords"] = list(record.keywords)
        if record.operating_systems:
            updates["operatingSystem"] = list(record.operating_systems)

        merged = _merge_ordered(existing, updates)
        if content is None:
            merged = {key: merged[key] for key in CODEMETA_KEYS if key in merged}
        return dump_json(merged)
