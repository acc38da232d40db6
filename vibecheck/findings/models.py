# Pydantic data models for findings: Severity, Finding, Summary.

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Finding severity, highest first."""

    BLOCKER = "blocker"
    HIGH = "high"
    MED = "med"
    LOW = "low"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Return an integer ranking; larger means more severe."""
        return _RANK[self]


_RANK = {
    Severity.BLOCKER: 4,
    Severity.HIGH: 3,
    Severity.MED: 2,
    Severity.LOW: 1,
    Severity.INFO: 0,
}

SEVERITY_ORDER: tuple[Severity, ...] = (
    Severity.BLOCKER,
    Severity.HIGH,
    Severity.MED,
    Severity.LOW,
    Severity.INFO,
)


class Finding(BaseModel):
    """A single issue reported by a rule (e.g. API route missing an auth guard)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, use_enum_values=False)

    rule_id: str = Field(..., alias="ruleId")
    severity: Severity
    message: str
    file: str = Field(..., description="absolute path of the offending file")
    line: Optional[int] = Field(None, ge=1, description="1-based line number")
    col: Optional[int] = Field(None, ge=1, description="1-based column number")
    fix_hint: Optional[str] = Field(None, alias="fixHint")

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Summary(BaseModel):
    """Finding counts by severity."""

    blocker: int = 0
    high: int = 0
    med: int = 0
    low: int = 0
    info: int = 0

    @classmethod
    def from_findings(cls, findings: Iterable[Finding]) -> "Summary":
        summary = cls()
        for f in findings:
            attr = f.severity.value
            setattr(summary, attr, getattr(summary, attr) + 1)
        return summary

    @property
    def total(self) -> int:
        return sum(getattr(self, s.value) for s in SEVERITY_ORDER)

    def as_rows(self) -> list[tuple[Severity, int]]:
        """Return severity/count pairs ordered for reporting."""
        return [(s, getattr(self, s.value)) for s in SEVERITY_ORDER]


def exit_code(findings: Iterable[Finding], strict: bool) -> int:
    """
    Map findings to a process exit status.

    Non-strict mode always returns 0. Strict mode returns 2 when any blocker
    is present, 1 when any high is present, else 0.
    """
    if not strict:
        return 0
    summary = Summary.from_findings(findings)
    if summary.blocker:
        return 2
    if summary.high:
        return 1
    return 0
