"""SPDX license headers embedded in Python source files."""

import re
from typing import AbstractSet, List, Optional

from rsmd.exceptions import ParseError

from ..fs import FileAccess
from ..record import MetadataRecord, PartialRecord

HEADER_SCAN_LINES = 10
HEADER_PATTERN = re.compile(r"^(?P<prefix>#\s*SPDX-License-Identifier:\s*)(?P<id>\S.*?)\s*$")
CODING_PATTERN = re.compile(r"^#.*coding[:=]")


def _decode(content: bytes) -> str:
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError("source file", str(e)) from e


class HeadersFormat:
    """
    Format handler for ``# SPDX-License-Identifier:`` comments in ``*.py`` files.

    Every Python file in the project is a separate document; an existing
    header has its identifier replaced, a missing one is inserted after any
    shebang or encoding line. Empty files are left empty and no file is
    ever created.
    """

    name = "headers"

    def paths(self, fs: FileAccess) -> List[str]:
        return fs.glob("**/*.py")

    def extract(self, content: Optional[bytes]) -> PartialRecord:
        if content is None:
            return PartialRecord()
        for line in _decode(content).splitlines()[:HEADER_SCAN_LINES]:
            match = HEADER_PATTERN.match(line)
            if match:
                return PartialRecord(license_id=match.group("id"))
        return PartialRecord()

    def write(
        self,
        content: Optional[bytes],
        record: MetadataRecord,
        skip: AbstractSet[str] = frozenset(),
    ) -> Optional[bytes]:
        if content is None or not content.strip() or not record.license_id or "license_id" in skip:
            return content

        text = _decode(content)
        lines = text.splitlines(keepends=True)
        for index, line in enumerate(lines[:HEADER_SCAN_LINES]):
            match = HEADER_PATTERN.match(line.rstrip("\r\n"))
            if match:
                if match.group("id") == record.license_id:
                    return content
                ending = line[len(line.rstrip("\r\n")) :]
                lines[index] = f"{match.group('prefix')}{record.license_id}{ending}"
                return "".join(lines).encode("utf-8")

        insert_at = 0
        if lines and lines[0].startswith("#!"):
            insert_at = 1
        if len(lines) > insert_at and CODING_PATTERN.match(lines[insert_at]):
            insert_at += 1
        if insert_at and not lines[insert_at - 1].endswith("\n"):
            lines[insert_at - 1] += "\n"
        lines.insert(insert_at, f"# SPDX-License-Identifier: {record.license_id}\n")
        return "".join(lines).encode("utf-8")
