"""Outcome of running a proposed reservation change through the state machine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


class IssueKind(Enum):
    INSUFFICIENT_STOCK = "insufficient_stock"
    SKIPPED_STATE = "skipped_state"
    INVALID_REGRESSION = "invalid_regression"
    INVALID_TRANSITION = "invalid_transition"
    ALLOCATION_EXCEEDS_NEED = "allocation_exceeds_need"
    UNDER_ALLOCATED = "under_allocated"
    LOW_AVAILABILITY = "low_availability"


@dataclass(frozen=True)
class ValidationIssue:
    """A single conflict (severity ERROR) or warning (severity WARNING)."""

    kind: IssueKind
    message: str
    severity: Severity

    @staticmethod
    def conflict(kind: IssueKind, message: str) -> ValidationIssue:
        return ValidationIssue(kind=kind, message=message, severity=Severity.ERROR)

    @staticmethod
    def warning(kind: IssueKind, message: str) -> ValidationIssue:
        return ValidationIssue(kind=kind, message=message, severity=Severity.WARNING)


@dataclass(frozen=True)
class ValidationResult:
    conflicts: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.conflicts

    def kinds(self) -> set[IssueKind]:
        return {issue.kind for issue in self.conflicts + self.warnings}
