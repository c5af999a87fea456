"""Finding aggregation: ordering, de-duplication and severity summary."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from cssguide.model.finding import Finding, Severity


@dataclass(frozen=True)
class Report:
    """The ordered, de-duplicated findings for one document."""

    source: str
    findings: tuple[Finding, ...] = ()

    @property
    def summary(self) -> dict[Severity, int]:
        counts = {severity: 0 for severity in Severity}
        for finding in self.findings:
            counts[finding.severity] += 1
        return counts

    @property
    def error_count(self) -> int:
        return self.summary[Severity.ERROR]

    @property
    def warning_count(self) -> int:
        return self.summary[Severity.WARNING]

    @property
    def has_errors(self) -> bool:
        return any(f.is_error for f in self.findings)

    def rules(self) -> list[str]:
        """Rule ids in finding order (repeats included)."""
        return [f.rule for f in self.findings]

    def __iter__(self) -> Iterator[Finding]:
        return iter(self.findings)

    def __len__(self) -> int:
        return len(self.findings)

    def to_dict(self) -> dict[str, object]:
        return {
            "source": self.source,
            "summary": {severity.value: count for severity, count in self.summary.items()},
            "findings": [f.to_dict() for f in self.findings],
        }


def aggregate(findings: Iterable[Finding], source: str = "") -> Report:
    """Sort findings by (line, column, rule) and collapse exact duplicates.

    Two findings are duplicates when they share a rule id and a position;
    the first one in input order is kept.
    """
    seen: set[tuple[str, int, int]] = set()
    unique: list[Finding] = []
    for finding in sorted(findings, key=Finding.sort_key):
        key = (finding.rule, finding.line, finding.column)
        if key in seen:
            continue
        seen.add(key)
        unique.append(finding)
    return Report(source=source, findings=tuple(unique))
