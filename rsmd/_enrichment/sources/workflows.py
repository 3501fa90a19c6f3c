"""GitHub Actions workflows as a source of supported operating systems."""

import re
from typing import Any, Dict, Iterable, List

import yaml

from rsmd._crosswalk.fs import FileAccess
from rsmd.logging_config import logger

WORKFLOW_PATTERNS = (".github/workflows/*.yml", ".github/workflows/*.yaml")

MATRIX_REFERENCE = re.compile(r"\$\{\{\s*matrix\.([\w-]+)\s*\}\}")

# Runner label prefix -> operating system name used in CodeMeta
RUNNER_OPERATING_SYSTEMS = (
    ("ubuntu", "Linux"),
    ("linux", "Linux"),
    ("macos", "macOS"),
    ("windows", "Windows"),
)


def runner_operating_system(label: Any) -> str | None:
    """Map a runner label such as "ubuntu-latest" or "macos-14" to an OS name."""
    if not isinstance(label, str):
        return None
    label = label.strip().lower()
    for prefix, operating_system in RUNNER_OPERATING_SYSTEMS:
        if label.startswith(prefix):
            return operating_system
    return None


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def _job_labels(job: Dict[str, Any]) -> Iterable[Any]:
    strategy = job.get("strategy") or {}
    matrix = strategy.get("matrix") if isinstance(strategy, dict) else None
    if not isinstance(matrix, dict):
        matrix = {}

    for runs_on in _as_list(job.get("runs-on")):
        if not isinstance(runs_on, str):
            continue
        reference = MATRIX_REFERENCE.search(runs_on)
        if reference is None:
            yield runs_on
            continue
        key = reference.group(1)
        yield from _as_list(matrix.get(key))
        for include in _as_list(matrix.get("include")):
            if isinstance(include, dict):
                yield from _as_list(include.get(key))


class WorkflowOSSource:
    """
    Infers supported operating systems from CI workflow definitions.

    Every OS exercised by at least one job counts. Workflow files that fail
    to parse are skipped with a warning.
    """

    @property
    def name(self) -> str:
        return "github-workflows"

    def fetch(self, fs: FileAccess) -> List[str]:
        """
        Collect operating systems from ``.github/workflows``.

        Returns:
            Sorted list of OS names; empty when no workflow names an OS
        """
        found = set()
        for pattern in WORKFLOW_PATTERNS:
            for path in fs.glob(pattern):
                content = fs.read_bytes(path)
                if content is None:
                    continue
                try:
                    data = yaml.safe_load(content)
                except yaml.YAMLError as e:
                    logger.warning(f"Skipping unparseable workflow {path}: {e}")
                    continue
                if not isinstance(data, dict) or not isinstance(data.get("jobs"), dict):
                    continue
                for job in data["jobs"].values():
                    if not isinstance(job, dict):
                        continue
                    for label in _job_labels(job):
                        operating_system = runner_operating_system(label)
                        if operating_system:
                            found.add(operating_system)

        if found:
            logger.debug(f"Operating systems from workflows: {sorted(found)}")
        return sorted(found)


def get_os_from_workflows(fs: FileAccess) -> List[str]:
    """Return the operating systems the project's GitHub workflows run on."""
    return WorkflowOSSource().fetch(fs)
