"""Shared helpers for format handlers."""

import json
import re
from datetime import date
from typing import Any, Dict, Optional, Tuple

from semantic_version import Version

from rsmd.exceptions import ParseError

ORCID_URL_PREFIX = "https://orcid.org/"
ROR_URL_PREFIX = "https://ror.org/"
SPDX_URL_PREFIX = "https://spdx.org/licenses/"

ORCID_PATTERN = re.compile(r"^\d{4}-\d{4}-\d{4}-\d{3}[\dX]$")
ROR_PATTERN = re.compile(r"^0[a-z0-9]{6}\d{2}$")


def normalize_orcid(value: Optional[str]) -> Optional[str]:
    """
    Reduce an ORCID iD to its bare form.

    Examples:
        "https://orcid.org/0000-0002-1825-0097" -> "0000-0002-1825-0097"
        "0000-0002-1825-0097" -> "0000-0002-1825-0097"
    """
    if not value:
        return None
    value = value.strip()
    for prefix in (ORCID_URL_PREFIX, "http://orcid.org/", "orcid.org/"):
        if value.startswith(prefix):
            value = value[len(prefix) :]
            break
    return value.rstrip("/") or None


def normalize_ror(value: Optional[str]) -> Optional[str]:
    """Reduce a ROR identifier ("https://ror.org/00vtgdb53") to its bare form."""
    if not value:
        return None
    value = value.strip()
    for prefix in (ROR_URL_PREFIX, "http://ror.org/", "ror.org/"):
        if value.startswith(prefix):
            value = value[len(prefix) :]
            break
    return value.rstrip("/") or None


def is_valid_orcid(value: str) -> bool:
    return bool(ORCID_PATTERN.match(value))


def is_valid_ror(value: str) -> bool:
    return bool(ROR_PATTERN.match(value))


def split_name(name: str) -> Tuple[Optional[str], str]:
    """
    Split a "Given Family" name into (given, family).

    The last whitespace-separated word is the family name.
    """
    parts = name.strip().rsplit(" ", 1)
    if len(parts) == 1:
        return None, parts[0]
    return parts[0], parts[1]


def join_name(given: Optional[str], family: Optional[str]) -> Optional[str]:
    name = " ".join(part.strip() for part in (given, family) if part and part.strip())
    return name or None


def parse_version(value: Any, path: str) -> Version:
    """Coerce a manifest or descriptor version string into a semantic version."""
    if not isinstance(value, str):
        raise ParseError(path, f"version must be a string, got {type(value).__name__}")
    try:
        return Version(value.strip())
    except ValueError as e:
        raise ParseError(path, f"invalid semantic version {value!r}: {e}") from e


def parse_date(value: Any, path: str) -> date:
    """Coerce an ISO-8601 date (or datetime) string into a date."""
    if not isinstance(value, str):
        raise ParseError(path, f"date must be a string, got {type(value).__name__}")
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError as e:
        raise ParseError(path, f"invalid date {value!r}: {e}") from e


def load_json_object(content: bytes, path: str) -> Dict[str, Any]:
    """Decode a JSON document whose top level must be an object."""
    try:
        data = json.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ParseError(path, str(e)) from e
    if not isinstance(data, dict):
        raise ParseError(path, "top level must be a JSON object")
    return data


def dump_json(data: Dict[str, Any]) -> bytes:
    return (json.dumps(data, indent=2, ensure_ascii=False) + "\n").encode("utf-8")


def string_list(value: Any, path: str, field_name: str) -> list:
    """Coerce a JSON/TOML list of strings, or a comma separated string, into a list."""
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return [item.strip() for item in value]
    raise ParseError(path, f"{field_name} must be a list of strings")
