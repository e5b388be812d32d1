"""Application service: Allocation.

Owns reservation records end to end.  Every mutation is one atomic unit
per equipment item:

  1. take the item's lock
  2. re-read the reservation and consult the ledger via the state machine
  3. persist, then invalidate the ledger's cached view of the item

so two concurrent commits against the same item can never both pass the
stock check.
"""

from __future__ import annotations

import structlog

from showgear.application.locks import KeyedLock
from showgear.domain.exceptions import (
    ConflictError,
    EntityNotFoundError,
    InvalidStateError,
    ValidationError,
)
from showgear.domain.model.reservation import (
    REMOVABLE_STATUSES,
    Reservation,
    ReservationStatus,
)
from showgear.domain.model.validation import ValidationResult
from showgear.domain.repository.catalog import Catalog
from showgear.domain.repository.production_registry import ProductionRegistry
from showgear.domain.repository.reservation_repository import ReservationRepository
from showgear.domain.service.allocation_state_machine import AllocationStateMachine
from showgear.domain.service.quantity_ledger import AvailabilityView, QuantityLedger

logger = structlog.get_logger(__name__)


class AllocationService:

    def __init__(
        self,
        reservation_repo: ReservationRepository,
        catalog: Catalog,
        production_registry: ProductionRegistry,
        ledger: QuantityLedger | None = None,
        locks: KeyedLock | None = None,
    ) -> None:
        self._reservation_repo = reservation_repo
        self._catalog = catalog
        self._production_registry = production_registry
        self._ledger = ledger or QuantityLedger(catalog, reservation_repo)
        self._locks = locks or KeyedLock()
        self._state_machine = AllocationStateMachine(self._ledger)

    # --- Commands -------------------------------------------------------------

    def create(
        self,
        equipment_id: int,
        production_id: int,
        quantity_needed: int,
        notes: str = "",
    ) -> Reservation:
        """Request *quantity_needed* units of an item for a production."""
        if not self._catalog.item_exists(equipment_id):
            raise EntityNotFoundError(f"Equipment #{equipment_id} not found")
        if not self._production_registry.production_exists(production_id):
            raise EntityNotFoundError(f"Production #{production_id} not found")

        reservation = Reservation.create(
            equipment_id=equipment_id,
            production_id=production_id,
            quantity_needed=quantity_needed,
            notes=notes,
        )

        with self._locks.hold(equipment_id):
            if self._reservation_repo.find(production_id, equipment_id) is not None:
                raise ValidationError(
                    f"Equipment #{equipment_id} is already reserved for "
                    f"production #{production_id}"
                )
            self._reservation_repo.save(reservation)
            self._ledger.invalidate(equipment_id)

        logger.info(
            "Reservation created",
            reservation_id=reservation.id,
            equipment_id=equipment_id,
            production_id=production_id,
            quantity_needed=quantity_needed,
        )
        return reservation

    def update(
        self,
        reservation_id: int,
        quantity_needed: int | None = None,
        quantity_allocated: int | None = None,
        status: ReservationStatus | str | None = None,
        notes: str | None = None,
    ) -> tuple[Reservation, ValidationResult]:
        """Apply any combination of field changes as one validated mutation.

        Raises ConflictError (carrying conflicts and warnings) when the
        state machine blocks the change; nothing is written in that case.
        """
        target = None if status is None else _as_status(status)
        return self._change(reservation_id, quantity_needed, quantity_allocated, target, notes)

    def update_quantity(
        self,
        reservation_id: int,
        new_quantity_needed: int | None = None,
        new_quantity_allocated: int | None = None,
    ) -> tuple[Reservation, ValidationResult]:
        return self.update(
            reservation_id,
            quantity_needed=new_quantity_needed,
            quantity_allocated=new_quantity_allocated,
        )

    def transition_status(
        self,
        reservation_id: int,
        new_status: ReservationStatus | str,
    ) -> tuple[Reservation, ValidationResult]:
        """Move a reservation to *new_status*.

        Warnings are returned even though the save went through so the
        caller can surface them.
        """
        return self._change(
            reservation_id, None, None, _as_status(new_status), None, require_new_status=True
        )

    def checkout(self, reservation_id: int) -> tuple[Reservation, ValidationResult]:
        return self.transition_status(reservation_id, ReservationStatus.CHECKED_OUT)

    def return_equipment(self, reservation_id: int) -> tuple[Reservation, ValidationResult]:
        return self.transition_status(reservation_id, ReservationStatus.RETURNED)

    def remove(self, reservation_id: int) -> None:
        """Delete a reservation that is not holding physical equipment."""
        equipment_id = self._load(reservation_id).equipment_id

        with self._locks.hold(equipment_id):
            reservation = self._load(reservation_id)
            if reservation.status not in REMOVABLE_STATUSES:
                allowed = " or ".join(sorted(s.value for s in REMOVABLE_STATUSES))
                raise InvalidStateError(
                    f"Cannot remove reservation #{reservation_id} while it is "
                    f"{reservation.status.value} (must be {allowed})"
                )
            self._reservation_repo.delete(reservation_id)
            self._ledger.invalidate(equipment_id)

        logger.info(
            "Reservation removed",
            reservation_id=reservation_id,
            equipment_id=equipment_id,
        )

    # --- Queries --------------------------------------------------------------

    def validate_status(
        self,
        reservation_id: int,
        new_status: ReservationStatus | str,
        quantity: int | None = None,
    ) -> ValidationResult:
        """Dry run of a status change; nothing is written."""
        reservation = self._load(reservation_id)
        allocated = reservation.quantity_allocated if quantity is None else quantity
        if allocated < 0:
            raise ValidationError("Allocated quantity cannot be negative")
        return self._state_machine.validate_transition(
            reservation, _as_status(new_status), allocated
        )

    def suggested_transitions(self, reservation_id: int) -> list[ReservationStatus]:
        """Workflow steps that would currently pass validation."""
        return self._state_machine.suggested_transitions(self._load(reservation_id))

    def get(self, reservation_id: int) -> Reservation:
        return self._load(reservation_id)

    def list_for_production(self, production_id: int) -> list[Reservation]:
        if not self._production_registry.production_exists(production_id):
            raise EntityNotFoundError(f"Production #{production_id} not found")
        return self._reservation_repo.list_for_production(production_id)

    def list_for_equipment(self, equipment_id: int) -> list[Reservation]:
        if not self._catalog.item_exists(equipment_id):
            raise EntityNotFoundError(f"Equipment #{equipment_id} not found")
        return self._reservation_repo.list_for_equipment(equipment_id)

    def availability(self, equipment_id: int) -> AvailabilityView:
        return self._ledger.view(equipment_id)

    # --- Internal helpers -----------------------------------------------------

    def _load(self, reservation_id: int) -> Reservation:
        reservation = self._reservation_repo.get_by_id(reservation_id)
        if reservation is None:
            raise EntityNotFoundError(f"Reservation #{reservation_id} not found")
        return reservation

    def _change(
        self,
        reservation_id: int,
        quantity_needed: int | None,
        quantity_allocated: int | None,
        status: ReservationStatus | None,
        notes: str | None,
        require_new_status: bool = False,
    ) -> tuple[Reservation, ValidationResult]:
        """Lock the item, re-read, validate and persist one change."""
        equipment_id = self._load(reservation_id).equipment_id

        with self._locks.hold(equipment_id):
            reservation = self._load(reservation_id)
            if require_new_status and reservation.status is status:
                raise InvalidStateError(
                    f"Reservation #{reservation_id} is already {reservation.status.value}"
                )
            target = reservation.status if status is None else status
            needed, allocated = reservation.propose_quantities(
                quantity_needed, quantity_allocated
            )

            result = self._state_machine.validate_transition(
                reservation, target, allocated, needed
            )
            if not result.valid:
                logger.warning(
                    "Reservation change rejected",
                    reservation_id=reservation_id,
                    equipment_id=equipment_id,
                    status=target.value,
                    quantity_allocated=allocated,
                    conflicts=[c.kind.value for c in result.conflicts],
                )
                raise ConflictError(result.conflicts, result.warnings)

            previous = reservation.status
            reservation.apply(target, needed, allocated, notes)
            self._reservation_repo.save(reservation)
            self._ledger.invalidate(equipment_id)

        logger.info(
            "Reservation updated",
            reservation_id=reservation_id,
            equipment_id=equipment_id,
            from_status=previous.value,
            to_status=target.value,
            quantity_needed=needed,
            quantity_allocated=allocated,
            warnings=[w.kind.value for w in result.warnings],
        )
        return reservation, result


def _as_status(status: ReservationStatus | str) -> ReservationStatus:
    if isinstance(status, ReservationStatus):
        return status
    return ReservationStatus.parse(status)
