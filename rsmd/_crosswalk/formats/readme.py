"""README discovery for the copy-from-README build instructions policy."""

from typing import Optional

from ..fs import FileAccess

README_FILES = ("README.md", "README.rst", "README.txt", "README")


def find_readme(fs: FileAccess) -> Optional[str]:
    """Return the relative path of the project README, if any."""
    for candidate in README_FILES:
        if fs.read_bytes(candidate) is not None:
            return candidate
    return None


def readme_reference(path: str, repository_url: Optional[str]) -> str:
    """
    Build the README reference stored in CodeMeta's ``readme`` field.

    Examples:
        ("README.md", "https://github.com/org/pkg") -> "https://github.com/org/pkg/blob/HEAD/README.md"
        ("README.md", "https://gitlab.com/org/pkg.git") -> "https://gitlab.com/org/pkg/-/blob/HEAD/README.md"
        ("README.md", None) -> "README.md"
    """
    if not repository_url or not repository_url.startswith(("https://", "http://")):
        return path
    base = repository_url.rstrip("/")
    if base.endswith(".git"):
        base = base[: -len(".git")]
    if "gitlab" in base:
        return f"{base}/-/blob/HEAD/{path}"
    return f"{base}/blob/HEAD/{path}"
