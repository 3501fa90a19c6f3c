"""Format registry: extract every source, render every target."""

from typing import AbstractSet, Dict, Iterator, List, Optional

from rsmd.exceptions import ParseError
from rsmd.logging_config import logger

from .fs import FileAccess
from .protocol import MetadataFormat
from .record import MetadataRecord, PartialRecord


class FormatRegistry:
    """
    Registry of file formats taking part in a crosswalk.

    Formats are kept in registration order, which is also the order in which
    files are extracted and written.

    Example:
        registry = FormatRegistry()
        registry.register(ManifestFormat())
        registry.register(CodeMetaFormat())

        partials = registry.extract_all(fs)
        changes = registry.render_all(fs, record)
    """

    def __init__(self) -> None:
        self._formats: List[MetadataFormat] = []

    def register(self, fmt: MetadataFormat) -> None:
        self._formats.append(fmt)
        logger.debug(f"Registered metadata format: {fmt.name}")

    def get(self, name: str) -> Optional[MetadataFormat]:
        for fmt in self._formats:
            if fmt.name == name:
                return fmt
        return None

    def __iter__(self) -> Iterator[MetadataFormat]:
        return iter(self._formats)

    def extract_all(self, fs: FileAccess) -> Dict[str, PartialRecord]:
        """
        Extract one PartialRecord per format.

        Formats spanning several files (source headers) combine their files'
        records, first present value wins.

        Raises:
            ParseError: If any present file is malformed
        """
        partials: Dict[str, PartialRecord] = {}
        for fmt in self._formats:
            combined = PartialRecord()
            for path in fmt.paths(fs):
                try:
                    partial = fmt.extract(fs.read_bytes(path))
                except ParseError as e:
                    raise ParseError(path, e.reason) from e
                combined = combined.merge(partial)
            partials[fmt.name] = combined
        return partials

    def render_all(
        self,
        fs: FileAccess,
        record: MetadataRecord,
        skip: AbstractSet[str] = frozenset(),
    ) -> Dict[str, bytes]:
        """
        Render the record into every format.

        Returns:
            Mapping of relative path -> new bytes, only for files whose
            content would change
        """
        changes: Dict[str, bytes] = {}
        for fmt in self._formats:
            for path in fmt.paths(fs):
                current = fs.read_bytes(path)
                rendered = fmt.write(current, record, skip)
                if rendered is not None and rendered != current:
                    changes[path] = rendered
        return changes

    def list_formats(self) -> List[str]:
        return [fmt.name for fmt in self._formats]


def create_default_registry() -> FormatRegistry:
    """
    Create a registry with the standard formats.

    Order: manifest, license, codemeta, zenodo, source headers.
    """
    from .formats import CodeMetaFormat, HeadersFormat, LicenseFormat, ManifestFormat, ZenodoFormat

    registry = FormatRegistry()
    registry.register(ManifestFormat())
    registry.register(LicenseFormat())
    registry.register(CodeMetaFormat())
    registry.register(ZenodoFormat())
    registry.register(HeadersFormat())
    return registry
