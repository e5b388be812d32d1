"""ReplicationJob: the ephemeral state of one batch duplication request.

Jobs are never persisted.  The engine mutates a job as it works through
the copies; callers may poll ``progress`` or call ``cancel()`` from
another thread while it runs.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from showgear.domain.model.equipment import EquipmentItem
from showgear.domain.model.value_objects import PLACEHOLDER, CopyCount, IdPattern

BATCH_PREFIX = "BATCH"


def suggest_pattern(sources: list[EquipmentItem]) -> str:
    """Default identifier pattern for duplicating *sources*.

    A single item with a serial number continues that serial; anything
    else gets a generic batch prefix.
    """
    distinct = {item.id: item for item in sources}
    if len(distinct) == 1:
        (item,) = distinct.values()
        if item.serial_number:
            return f"{item.serial_number}-{PLACEHOLDER}"
    return f"{BATCH_PREFIX}-{PLACEHOLDER}"


@dataclass(frozen=True)
class CopyOutcome:
    """Result of one copy attempt, in the order the attempts ran."""

    source_id: int
    copy_index: int
    identifier: str
    created_id: int | None = None
    error: str | None = None
    image_copied: bool | None = None  # None when the source has no image
    image_error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.created_id is not None


@dataclass(frozen=True)
class ImageCopyFailure:
    source_id: int
    item_id: int
    message: str


@dataclass
class ReplicationJob:
    sources: list[EquipmentItem]
    copy_count: CopyCount
    pattern: IdPattern
    completed: int = 0
    outcomes: list[CopyOutcome] = field(default_factory=list)
    _cancelled: threading.Event = field(default_factory=threading.Event, repr=False)

    @property
    def total(self) -> int:
        return len(self.sources) * self.copy_count.value

    @property
    def progress(self) -> int:
        """Percentage of attempts finished, successful or not (0-100)."""
        if self.total == 0:
            return 100
        return (self.completed * 100) // self.total

    @property
    def namespaced(self) -> bool:
        return len(self.sources) > 1

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Stop after the attempt in flight; copies already made are kept."""
        self._cancelled.set()

    def identifier_for(self, source: EquipmentItem, copy_index: int) -> str:
        if self.namespaced:
            return self.pattern.render(copy_index, source_id=source.id)
        return self.pattern.render(copy_index)

    def record(self, outcome: CopyOutcome) -> None:
        self.outcomes.append(outcome)
        self.completed += 1

    def result(self) -> ReplicationResult:
        return ReplicationResult(
            outcomes=list(self.outcomes),
            progress=self.progress,
            cancelled=self.cancelled,
        )


@dataclass(frozen=True)
class ReplicationResult:
    outcomes: list[CopyOutcome]
    progress: int
    cancelled: bool = False

    @property
    def created(self) -> list[CopyOutcome]:
        return [o for o in self.outcomes if o.succeeded]

    @property
    def failures(self) -> list[CopyOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def image_copy_failures(self) -> list[ImageCopyFailure]:
        return [
            ImageCopyFailure(
                source_id=o.source_id,
                item_id=o.created_id,  # type: ignore[arg-type]
                message=o.image_error or "Reference image was not copied",
            )
            for o in self.outcomes
            if o.succeeded and o.image_copied is False
        ]
