"""Value Objects used by batch replication.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass

from showgear.domain.exceptions import InvalidCountError, InvalidPatternError

PLACEHOLDER = "{n}"
MIN_COPIES = 1
MAX_COPIES = 50
PREVIEW_SIZE = 5


@dataclass(frozen=True)
class CopyCount:
    """Number of copies to make of each source item, within [1, 50]."""

    value: int
    maximum: int = MAX_COPIES

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise InvalidCountError(
                f"Copy count must be an integer, got {type(self.value).__name__}"
            )
        if not MIN_COPIES <= self.value <= self.maximum:
            raise InvalidCountError(
                f"Copy count must be between {MIN_COPIES} and {self.maximum}, "
                f"got {self.value}"
            )

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class IdPattern:
    """Serial-number template containing exactly one ``{n}`` placeholder.

    ``SN-{n}`` renders ``SN-1``, ``SN-2``...  When several distinct source
    items share one pattern the placeholder is widened to
    ``{source_id}-{n}`` so copies of different items cannot collide.
    """

    template: str

    def __post_init__(self) -> None:
        occurrences = (self.template or "").count(PLACEHOLDER)
        if occurrences == 0:
            raise InvalidPatternError(
                f"Identifier pattern '{self.template}' must contain the "
                f"placeholder {PLACEHOLDER}"
            )
        if occurrences > 1:
            raise InvalidPatternError(
                f"Identifier pattern '{self.template}' must contain "
                f"{PLACEHOLDER} exactly once"
            )

    def render(self, copy_index: int, source_id: int | None = None) -> str:
        token = str(copy_index) if source_id is None else f"{source_id}-{copy_index}"
        return self.template.replace(PLACEHOLDER, token)

    def preview(self, count: int, source_id: int | None = None) -> list[str]:
        """First few identifiers, an ellipsis, then the last one."""
        shown = [self.render(i, source_id) for i in range(1, min(count, PREVIEW_SIZE) + 1)]
        if count > PREVIEW_SIZE:
            shown.append("...")
            shown.append(self.render(count, source_id))
        return shown

    def __str__(self) -> str:
        return self.template
