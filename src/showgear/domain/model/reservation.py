"""Reservation aggregate: a quantity of one equipment item committed to one production.

The status set is closed: ``ReservationStatus`` is the only way to express
a lifecycle position, and its declaration order is the workflow order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from showgear.domain.exceptions import ValidationError


class ReservationStatus(Enum):
    REQUESTED = "requested"
    ALLOCATED = "allocated"
    CHECKED_OUT = "checked-out"
    IN_USE = "in-use"
    RETURNED = "returned"

    @property
    def position(self) -> int:
        return _WORKFLOW.index(self)

    @property
    def is_active(self) -> bool:
        """True for statuses that consume shared stock."""
        return self in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self is ReservationStatus.RETURNED

    @staticmethod
    def parse(raw: str) -> ReservationStatus:
        try:
            return ReservationStatus(raw)
        except ValueError:
            allowed = ", ".join(s.value for s in ReservationStatus)
            raise ValidationError(
                f"Unknown reservation status '{raw}' (expected one of: {allowed})"
            ) from None


_WORKFLOW = list(ReservationStatus)

ACTIVE_STATUSES = frozenset(
    {
        ReservationStatus.ALLOCATED,
        ReservationStatus.CHECKED_OUT,
        ReservationStatus.IN_USE,
    }
)

REMOVABLE_STATUSES = frozenset({ReservationStatus.REQUESTED, ReservationStatus.RETURNED})


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Reservation:
    """Aggregate root for equipment reservations.

    Invariants:
    - ``0 <= quantity_allocated <= quantity_needed``
    - ``quantity_needed >= 1``

    Stock-level invariants span several reservations and are enforced by
    the allocation service through the state machine, not here.
    """

    id: int | None
    equipment_id: int
    production_id: int
    quantity_needed: int
    quantity_allocated: int = 0
    status: ReservationStatus = ReservationStatus.REQUESTED
    notes: str = ""
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)
    checked_out_at: datetime | None = None
    returned_at: datetime | None = None

    # --- Factory (used for NEW reservations only) -----------------------------

    @staticmethod
    def create(
        equipment_id: int,
        production_id: int,
        quantity_needed: int,
        notes: str = "",
    ) -> Reservation:
        _check_needed(quantity_needed)
        return Reservation(
            id=None,
            equipment_id=equipment_id,
            production_id=production_id,
            quantity_needed=quantity_needed,
            notes=(notes or "").strip(),
        )

    # --- Quantity proposals ---------------------------------------------------

    def propose_quantities(
        self,
        quantity_needed: int | None = None,
        quantity_allocated: int | None = None,
    ) -> tuple[int, int]:
        """Resolve the (needed, allocated) pair a change would produce.

        Lowering the need below what is already allocated clamps the
        allocation down in the same step.  An explicit allocation is
        returned as given; the state machine decides whether it fits.
        """
        needed = self.quantity_needed if quantity_needed is None else quantity_needed
        _check_needed(needed)

        if quantity_allocated is None:
            allocated = min(self.quantity_allocated, needed)
        else:
            if quantity_allocated < 0:
                raise ValidationError("Allocated quantity cannot be negative")
            allocated = quantity_allocated
        return needed, allocated

    # --- Mutation (only after validation) -------------------------------------

    def apply(
        self,
        status: ReservationStatus,
        quantity_needed: int,
        quantity_allocated: int,
        notes: str | None = None,
    ) -> None:
        """Write a validated change onto the aggregate and stamp timestamps."""
        _check_needed(quantity_needed)
        if not 0 <= quantity_allocated <= quantity_needed:
            raise ValidationError(
                f"Allocated quantity {quantity_allocated} must be between 0 "
                f"and quantity needed ({quantity_needed})"
            )

        now = _now()
        if status is not self.status:
            if status is ReservationStatus.CHECKED_OUT:
                self.checked_out_at = now
            elif status is ReservationStatus.RETURNED:
                self.returned_at = now

        self.status = status
        self.quantity_needed = quantity_needed
        self.quantity_allocated = quantity_allocated
        if notes is not None:
            self.notes = notes.strip()
        self.updated_at = now

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    @property
    def is_removable(self) -> bool:
        return self.status in REMOVABLE_STATUSES


def _check_needed(quantity_needed: int) -> None:
    if not isinstance(quantity_needed, int) or isinstance(quantity_needed, bool):
        raise ValidationError(
            f"Quantity needed must be an integer, got {type(quantity_needed).__name__}"
        )
    if quantity_needed < 1:
        raise ValidationError("Quantity needed must be at least 1")
