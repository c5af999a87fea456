"""Finding model: one reported style violation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Severity(Enum):
    """Severity level for a finding."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True, order=True)
class Position:
    """A 1-based line/column location in the source text."""

    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class Finding:
    """A single style violation found in a document.

    Attributes:
        rule: Identifier of the rule that produced this finding.
        severity: How serious the violation is.
        message: Human-readable description of the problem.
        position: Where the violation starts.
        source: Name of the document, for attribution only.
        fix: Suggested replacement text, if available.
    """

    rule: str
    severity: Severity
    message: str
    position: Position
    source: str = ""
    fix: str | None = None

    @property
    def line(self) -> int:
        return self.position.line

    @property
    def column(self) -> int:
        return self.position.column

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    @property
    def is_warning(self) -> bool:
        return self.severity is Severity.WARNING

    def sort_key(self) -> tuple[int, int, str]:
        return (self.position.line, self.position.column, self.rule)

    def to_dict(self) -> dict[str, object]:
        return {
            "rule": self.rule,
            "severity": self.severity.value,
            "message": self.message,
            "line": self.position.line,
            "column": self.position.column,
            "source": self.source,
            "fix": self.fix,
        }

    def __str__(self) -> str:
        prefix = f"{self.source}:" if self.source else ""
        return f"{prefix}{self.position}: {self.severity.value} [{self.rule}] {self.message}"
