"""Domain service: Allocation State Machine.

Reservations move forward through

    requested -> allocated -> checked-out -> in-use -> returned

and ``returned`` is terminal.  A proposed change is not accepted just
because the target state is reachable: anything entering or staying in an
active status is checked against the quantity ledger first.

Rules:
- forward moves are allowed; jumping over intermediate states into
  ``checked-out`` or ``in-use`` warns (``skipped_state``)
- ``returned`` from ``requested`` or ``allocated`` is an
  ``invalid_regression``; every other backward move is an
  ``invalid_transition``
- an active status needs the proposed allocation to fit in what the
  ledger reports as available (``insufficient_stock``), unless the
  reservation already holds at least that much
- allocation may never exceed need (``allocation_exceeds_need``)
- entering an active status short of the needed quantity warns
  (``under_allocated``)
- an allocation that leaves less than a fifth of the item's total
  uncommitted warns (``low_availability``)

Only conflicts block.  Warnings ride along with a successful save.
"""

from __future__ import annotations

from showgear.domain.model.reservation import Reservation, ReservationStatus
from showgear.domain.model.validation import IssueKind, ValidationIssue, ValidationResult
from showgear.domain.service.quantity_ledger import QuantityLedger

_NEVER_CHECKED_OUT = (ReservationStatus.REQUESTED, ReservationStatus.ALLOCATED)
_SKIP_WARNED = (ReservationStatus.CHECKED_OUT, ReservationStatus.IN_USE)

# Regular workflow steps out of each status
NEXT_STEPS: dict[ReservationStatus, list[ReservationStatus]] = {
    ReservationStatus.REQUESTED: [ReservationStatus.ALLOCATED],
    ReservationStatus.ALLOCATED: [ReservationStatus.CHECKED_OUT],
    ReservationStatus.CHECKED_OUT: [ReservationStatus.IN_USE, ReservationStatus.RETURNED],
    ReservationStatus.IN_USE: [ReservationStatus.RETURNED],
    ReservationStatus.RETURNED: [],
}

LOW_AVAILABILITY_RATIO = 0.2


class AllocationStateMachine:

    def __init__(self, ledger: QuantityLedger) -> None:
        self._ledger = ledger

    def validate_transition(
        self,
        reservation: Reservation,
        proposed_status: ReservationStatus,
        proposed_quantity_allocated: int,
        proposed_quantity_needed: int | None = None,
    ) -> ValidationResult:
        """Check a proposed (status, quantities) change without applying it.

        Reads the ledger but never writes, so repeating the call against
        the same ledger state gives the same answer.
        """
        needed = (
            reservation.quantity_needed
            if proposed_quantity_needed is None
            else proposed_quantity_needed
        )
        conflicts: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        current = reservation.status
        if proposed_status is not current:
            self._check_direction(current, proposed_status, conflicts, warnings)

        if proposed_quantity_allocated > needed:
            conflicts.append(
                ValidationIssue.conflict(
                    IssueKind.ALLOCATION_EXCEEDS_NEED,
                    f"Cannot allocate {proposed_quantity_allocated} when only "
                    f"{needed} are needed",
                )
            )

        if proposed_status.is_active:
            # A hold that does not grow cannot overcommit the item
            holds_more = (
                not current.is_active
                or proposed_quantity_allocated > reservation.quantity_allocated
            )
            if holds_more:
                self._check_stock(reservation, proposed_quantity_allocated, conflicts, warnings)
            if proposed_status is not current and proposed_quantity_allocated < needed:
                warnings.append(
                    ValidationIssue.warning(
                        IssueKind.UNDER_ALLOCATED,
                        f"Setting status to \"{proposed_status.value}\" with "
                        f"{proposed_quantity_allocated} of {needed} allocated",
                    )
                )

        return ValidationResult(conflicts=conflicts, warnings=warnings)

    def suggested_transitions(self, reservation: Reservation) -> list[ReservationStatus]:
        """Next workflow steps the reservation could take right now.

        A step is offered only when it would pass validation with the
        reservation's current quantities.
        """
        return [
            status
            for status in NEXT_STEPS[reservation.status]
            if self.validate_transition(
                reservation, status, reservation.quantity_allocated
            ).valid
        ]

    # --- Internal helpers -----------------------------------------------------

    def _check_stock(
        self,
        reservation: Reservation,
        quantity: int,
        conflicts: list[ValidationIssue],
        warnings: list[ValidationIssue],
    ) -> None:
        view = self._ledger.view(reservation.equipment_id)
        available = view.available_excluding(reservation.id)
        if quantity > available:
            conflicts.append(
                ValidationIssue.conflict(
                    IssueKind.INSUFFICIENT_STOCK,
                    f"Insufficient stock for equipment #{reservation.equipment_id} "
                    f"(need {quantity}, have {available} available)",
                )
            )
            return

        remaining = available - quantity
        if remaining < view.total_quantity * LOW_AVAILABILITY_RATIO:
            warnings.append(
                ValidationIssue.warning(
                    IssueKind.LOW_AVAILABILITY,
                    f"Low availability after this allocation: {remaining} of "
                    f"{view.total_quantity} remaining",
                )
            )

    @staticmethod
    def _check_direction(
        current: ReservationStatus,
        proposed: ReservationStatus,
        conflicts: list[ValidationIssue],
        warnings: list[ValidationIssue],
    ) -> None:
        if proposed is ReservationStatus.RETURNED and current in _NEVER_CHECKED_OUT:
            conflicts.append(
                ValidationIssue.conflict(
                    IssueKind.INVALID_REGRESSION,
                    f"Cannot return equipment that was never checked out "
                    f"(current status is {current.value})",
                )
            )
            return

        if proposed.position < current.position:
            conflicts.append(
                ValidationIssue.conflict(
                    IssueKind.INVALID_TRANSITION,
                    f"Cannot move reservation from {current.value} back to "
                    f"{proposed.value}",
                )
            )
            return

        if proposed in _SKIP_WARNED and proposed.position - current.position > 1:
            skipped = ", ".join(
                s.value
                for s in ReservationStatus
                if current.position < s.position < proposed.position
            )
            warnings.append(
                ValidationIssue.warning(
                    IssueKind.SKIPPED_STATE,
                    f"Moving from {current.value} to {proposed.value} skips {skipped}",
                )
            )
