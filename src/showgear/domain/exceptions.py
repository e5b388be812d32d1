"""Domain-level exceptions.

Every business rule violation is a subclass of DomainException so the CLI
layer can catch them uniformly and display user-friendly messages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from showgear.domain.model.validation import ValidationIssue


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A referenced equipment item, production or reservation does not exist."""


class InvalidStateError(DomainException):
    """The operation is not allowed for the reservation's current status."""


class ConflictError(DomainException):
    """The state machine rejected a mutation.

    Carries the full list of blocking conflicts and the warnings that were
    raised alongside them so the caller can display both verbatim.
    """

    def __init__(
        self,
        conflicts: list[ValidationIssue],
        warnings: list[ValidationIssue] | None = None,
    ) -> None:
        self.conflicts = list(conflicts)
        self.warnings = list(warnings or [])
        super().__init__("; ".join(c.message for c in self.conflicts))


class InvalidPatternError(ValidationError):
    """An identifier pattern does not contain exactly one placeholder."""


class InvalidCountError(ValidationError):
    """A replication copy count is outside the permitted range."""


class CreationFailure(DomainException):
    """The catalog refused to create a single item (e.g. duplicate serial)."""
