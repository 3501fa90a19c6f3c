"""Metadata record dataclasses shared by every file format."""

from dataclasses import dataclass, field, fields, replace
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from semantic_version import Version


class SoftwareCategory(str, Enum):
    """Research software categories accepted for CodeMeta ``applicationCategory``."""

    AI = "ai"
    ASTRONOMY = "astronomy"
    BIOINFORMATICS = "bioinformatics"
    CHEMISTRY = "chemistry"
    CLIMATE = "climate"
    DATA = "data"
    ECOLOGY = "ecology"
    ECONOMICS = "economics"
    ENGINEERING = "engineering"
    EPIDEMIOLOGY = "epidemiology"
    HPC = "hpc"
    HUMANITIES = "humanities"
    MATHEMATICS = "mathematics"
    PHYSICS = "physics"
    SIMULATION = "simulation"
    STATISTICS = "statistics"
    VISUALISATION = "visualisation"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


@dataclass
class Organization:
    """
    An organisation, usually an author affiliation.

    Attributes:
        name: Display name
        identifier: ROR identifier (bare form, e.g. "00vtgdb53")
        country: Country name reported by the registry
    """

    name: Optional[str] = None
    identifier: Optional[str] = None
    country: Optional[str] = None

    def has_data(self) -> bool:
        """Check if this organisation has any meaningful data."""
        return bool(self.name or self.identifier)

    def same_as(self, other: "Organization") -> bool:
        """
        Decide whether ``other`` may complete this organisation.

        A ROR id only matches the same id. Without one, an unnamed entry
        matches anything and a named entry needs the exact same name.
        """
        if self.identifier:
            return self.identifier == other.identifier
        return not self.name or self.name == other.name

    def fill_from(self, other: "Organization") -> "Organization":
        """Return a copy with missing attributes taken from ``other``."""
        return Organization(
            name=self.name or other.name,
            identifier=self.identifier or other.identifier,
            country=self.country or other.country,
        )


@dataclass
class Person:
    """
    A software author.

    Attributes:
        name: Full name in "Given Family" order
        identifier: ORCID iD (bare form, e.g. "0000-0002-1825-0097")
        affiliation: Organisation the author is affiliated with
        email: Contact email
    """

    name: Optional[str] = None
    identifier: Optional[str] = None
    affiliation: Optional[Organization] = None
    email: Optional[str] = None

    def has_data(self) -> bool:
        """Check if this person has any meaningful data."""
        return bool(self.name or self.identifier)

    def same_as(self, other: "Person") -> bool:
        """
        Decide whether two entries describe the same author.

        Identifiers decide when both are known; otherwise names must match exactly.
        """
        if self.identifier and other.identifier:
            return self.identifier == other.identifier
        return bool(self.name) and self.name == other.name

    def fill_from(self, other: "Person") -> "Person":
        """Return a copy with missing attributes taken from ``other``; present values win."""
        affiliation = self.affiliation
        if affiliation is None:
            affiliation = other.affiliation
        elif other.affiliation is not None and affiliation.same_as(other.affiliation):
            affiliation = affiliation.fill_from(other.affiliation)
        return Person(
            name=self.name or other.name,
            identifier=self.identifier or other.identifier,
            affiliation=affiliation,
            email=self.email or other.email,
        )


def unique(values: Iterable[str]) -> List[str]:
    """De-duplicate strings keeping first-seen order."""
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


@dataclass
class PartialRecord:
    """
    Metadata extracted from a single file.

    ``None`` means the file does not carry the field. Present values are kept
    exactly as the file states them (after type coercion).
    """

    name: Optional[str] = None
    description: Optional[str] = None
    version: Optional[Version] = None
    license_id: Optional[str] = None
    authors: Optional[List[Person]] = None
    keywords: Optional[List[str]] = None
    category: Optional[str] = None
    repository_url: Optional[str] = None
    first_release_date: Optional[date] = None
    operating_systems: Optional[List[str]] = None
    build_instructions: Optional[str] = None
    readme: Optional[str] = None
    date_modified: Optional[date] = None

    def present_fields(self) -> List[str]:
        """Names of the fields this record carries."""
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    def merge(self, other: "PartialRecord") -> "PartialRecord":
        """
        Combine two partial records of the same format.

        The current instance's values take precedence; only absent fields
        are filled from ``other``.
        """
        values: Dict[str, Any] = {}
        for f in fields(self):
            mine = getattr(self, f.name)
            values[f.name] = mine if mine is not None else getattr(other, f.name)
        return PartialRecord(**values)

    def without(self, *field_names: str) -> "PartialRecord":
        """Return a copy with the given fields marked absent."""
        return replace(self, **{name: None for name in field_names})


RECORD_FIELDS = tuple(f.name for f in fields(PartialRecord))


@dataclass
class MetadataRecord:
    """
    The canonical metadata of one project for one crosswalk run.

    Built fresh from the extracted partial records, mutated by the
    canonicalizer, then handed to every writer.
    """

    name: Optional[str] = None
    description: Optional[str] = None
    version: Optional[Version] = None
    license_id: Optional[str] = None
    authors: List[Person] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    category: Optional[str] = None
    repository_url: Optional[str] = None
    first_release_date: Optional[date] = None
    operating_systems: List[str] = field(default_factory=list)
    build_instructions: Optional[str] = None
    readme: Optional[str] = None
    date_modified: Optional[date] = None
