"""File access for the repository checkout being reconciled.

The working tree is passed around explicitly so that tests can substitute an
in-memory tree for the local filesystem.
"""

import fnmatch
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from rsmd.exceptions import FileProcessingError
from rsmd.logging_config import logger

# Directories never scanned for source files
IGNORED_DIRECTORIES = {
    "__pycache__",
    "build",
    "dist",
    "node_modules",
    "site-packages",
    "venv",
}


class FileAccess(Protocol):
    """
    Protocol for reading and writing files relative to a project root.

    Paths are POSIX-style strings relative to the root (e.g. ".zenodo.json",
    "src/pkg/__init__.py").
    """

    def read_bytes(self, path: str) -> Optional[bytes]:
        """Return the file content, or None if the file does not exist."""
        ...

    def write_bytes(self, path: str, content: bytes) -> None:
        """Replace the file content atomically, creating it if needed."""
        ...

    def glob(self, pattern: str) -> List[str]:
        """Return sorted relative paths matching a glob pattern."""
        ...


def _is_ignored(relative: str) -> bool:
    parts = relative.split("/")[:-1]
    return any(part.startswith(".") and part != ".github" or part in IGNORED_DIRECTORIES for part in parts)


class LocalFileAccess:
    """FileAccess over a directory on disk."""

    def __init__(self, root: str | os.PathLike = ".") -> None:
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        return self.root / path

    def read_bytes(self, path: str) -> Optional[bytes]:
        target = self._resolve(path)
        if not target.is_file():
            return None
        return target.read_bytes()

    def write_bytes(self, path: str, content: bytes) -> None:
        """
        Write via a temporary file in the target directory and rename it.

        A crash mid-write leaves the previous content in place.
        """
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            if target.exists():
                os.chmod(tmp_name, target.stat().st_mode & 0o777)
            os.replace(tmp_name, target)
        except OSError as e:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise FileProcessingError(f"Failed to write {path}: {e}") from e
        logger.debug(f"Wrote {path} ({len(content)} bytes)")

    def glob(self, pattern: str) -> List[str]:
        matches = []
        for candidate in self.root.glob(pattern):
            if not candidate.is_file():
                continue
            relative = candidate.relative_to(self.root).as_posix()
            if not _is_ignored(relative):
                matches.append(relative)
        return sorted(matches)


class MemoryFileAccess:
    """FileAccess over an in-memory mapping of path -> bytes."""

    def __init__(self, files: Optional[Dict[str, bytes | str]] = None) -> None:
        self.files: Dict[str, bytes] = {}
        for path, content in (files or {}).items():
            self.files[path] = content.encode("utf-8") if isinstance(content, str) else content

    def read_bytes(self, path: str) -> Optional[bytes]:
        return self.files.get(path)

    def read_text(self, path: str) -> Optional[str]:
        content = self.files.get(path)
        return content.decode("utf-8") if content is not None else None

    def write_bytes(self, path: str, content: bytes) -> None:
        self.files[path] = content

    def glob(self, pattern: str) -> List[str]:
        # "**/" may match zero directories, as with pathlib
        patterns = {pattern}
        if pattern.startswith("**/"):
            patterns.add(pattern[3:])
        return sorted(
            path
            for path in self.files
            if any(fnmatch.fnmatchcase(path, p) for p in patterns) and not _is_ignored(path)
        )


class OverlayFileAccess:
    """
    Read-only view of a FileAccess with pending changes applied on top.

    Used to re-extract what the writers would produce without touching disk.
    """

    def __init__(self, base: FileAccess, changes: Dict[str, bytes]) -> None:
        self.base = base
        self.changes = changes

    def read_bytes(self, path: str) -> Optional[bytes]:
        if path in self.changes:
            return self.changes[path]
        return self.base.read_bytes(path)

    def write_bytes(self, path: str, content: bytes) -> None:
        raise FileProcessingError(f"Cannot write {path} through a read-only overlay")

    def glob(self, pattern: str) -> List[str]:
        return self.base.glob(pattern)
