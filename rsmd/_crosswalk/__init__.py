"""Crosswalk engine: one metadata record viewed through several files.

Each file format is a pair of pure functions (bytes -> PartialRecord,
MetadataRecord x bytes -> bytes). The canonicalizer merges the partial
records into one authoritative MetadataRecord.
"""

from .diagnostics import Diagnostic, Diagnostics, Severity
from .fs import FileAccess, LocalFileAccess, MemoryFileAccess
from .record import MetadataRecord, Organization, PartialRecord, Person, SoftwareCategory
from .registry import FormatRegistry, create_default_registry

__all__ = [
    "Diagnostic",
    "Diagnostics",
    "FileAccess",
    "FormatRegistry",
    "LocalFileAccess",
    "MemoryFileAccess",
    "MetadataRecord",
    "Organization",
    "PartialRecord",
    "Person",
    "Severity",
    "SoftwareCategory",
    "create_default_registry",
]
