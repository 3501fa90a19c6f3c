"""MetadataFormat protocol for file format plugins."""

from typing import AbstractSet, List, Optional, Protocol

from .fs import FileAccess
from .record import MetadataRecord, PartialRecord


class MetadataFormat(Protocol):
    """
    Protocol defining the interface for file format plugins.

    Each format is a pair of pure functions over file bytes: ``extract``
    turns a file into a PartialRecord and ``write`` renders the canonical
    record back into that file, changing only the fields the format carries.

    Example:
        class ZenodoFormat:
            name = "zenodo"

            def paths(self, fs: FileAccess) -> List[str]:
                return [".zenodo.json"]

            def extract(self, content: Optional[bytes]) -> PartialRecord:
                ...

            def write(self, content, record, skip=frozenset()) -> Optional[bytes]:
                ...
    """

    @property
    def name(self) -> str:
        """
        Short name of this format.

        Used for logging, diagnostics and as the key of extracted records.
        Examples: "manifest", "license", "codemeta", "zenodo", "headers"
        """
        ...

    def paths(self, fs: FileAccess) -> List[str]:
        """
        Relative paths this format reads and writes.

        Formats backed by a single file return the existing file, or the
        default file name to create when none exists.
        """
        ...

    def extract(self, content: Optional[bytes]) -> PartialRecord:
        """
        Parse file content into a PartialRecord.

        Args:
            content: File bytes, or None when the file does not exist

        Returns:
            PartialRecord (all fields absent when content is None)

        Raises:
            ParseError: If the content is malformed for this format
        """
        ...

    def write(
        self,
        content: Optional[bytes],
        record: MetadataRecord,
        skip: AbstractSet[str] = frozenset(),
    ) -> Optional[bytes]:
        """
        Render the canonical record into this format.

        Args:
            content: Existing file bytes, or None to create the file
            record: Canonical metadata
            skip: Field names that must keep their existing value

        Returns:
            New file bytes, or None if this format does not create the file
        """
        ...
