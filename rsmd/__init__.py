"""Keep research-software metadata consistent across project files."""


def _get_version() -> str:
    """Get package version with fallback mechanisms."""
    try:
        from importlib.metadata import version

        return version("research-software-metadata")
    except Exception:
        pass

    try:
        from pathlib import Path

        import tomllib

        pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
        if pyproject_path.exists():
            with open(pyproject_path, "rb") as f:
                pyproject_data = tomllib.load(f)
            return pyproject_data.get("project", {}).get("version", "unknown")
    except Exception:
        pass

    return "unknown"


__version__ = _get_version()

from .orchestrator import CrosswalkOptions, CrosswalkResult, crosswalk  # noqa: E402
from .versioning import increase_major, increase_minor, increase_patch  # noqa: E402

__all__ = [
    "CrosswalkOptions",
    "CrosswalkResult",
    "crosswalk",
    "increase_major",
    "increase_minor",
    "increase_patch",
]
