"""Diagnostics collected during a crosswalk run."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional

from rsmd.logging_config import logger


class Severity(str, Enum):
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Diagnostic:
    """A single inconsistency or gap found while reconciling metadata."""

    severity: Severity
    message: str
    field: Optional[str] = None

    def __str__(self) -> str:
        prefix = f"[{self.field}] " if self.field else ""
        return f"{self.severity.value}: {prefix}{self.message}"


@dataclass
class Diagnostics:
    """
    Ordered collection of diagnostics.

    Every diagnostic is logged as it is recorded, and the full list is
    returned to the caller at the end of the run.
    """

    items: List[Diagnostic] = field(default_factory=list)

    def warning(self, message: str, field: Optional[str] = None) -> None:
        logger.warning(message)
        self.items.append(Diagnostic(Severity.WARNING, message, field))

    def error(self, message: str, field: Optional[str] = None) -> None:
        logger.error(message)
        self.items.append(Diagnostic(Severity.ERROR, message, field))

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.items if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.items if d.severity is Severity.WARNING]

    def for_field(self, name: str) -> List[Diagnostic]:
        return [d for d in self.items if d.field == name]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)
