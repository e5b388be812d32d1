"""Domain service: Quantity Ledger.

Answers "how many units of this item are still uncommitted?" by summing
the allocations of every reservation in an active status.  Views are
cached per equipment item and must be invalidated by whoever mutates a
reservation or the item's total, so reads after a write in the same
process always see the write.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from showgear.domain.exceptions import EntityNotFoundError
from showgear.domain.model.reservation import ReservationStatus
from showgear.domain.repository.catalog import Catalog
from showgear.domain.repository.reservation_repository import ReservationRepository


@dataclass(frozen=True)
class AvailabilityView:
    """Snapshot of one item's stock against its reservations."""

    equipment_id: int
    total_quantity: int
    committed: dict[int, int] = field(default_factory=dict)  # reservation id -> qty
    by_status: dict[ReservationStatus, int] = field(default_factory=dict)

    @property
    def committed_quantity(self) -> int:
        return sum(self.committed.values())

    @property
    def available_quantity(self) -> int:
        return self.available_excluding(None)

    def available_excluding(self, reservation_id: int | None) -> int:
        held = sum(
            qty for rid, qty in self.committed.items() if rid != reservation_id
        )
        # A catalog total lowered below what is committed reads as zero
        return max(0, self.total_quantity - held)


class QuantityLedger:

    def __init__(self, catalog: Catalog, reservation_repo: ReservationRepository) -> None:
        self._catalog = catalog
        self._reservation_repo = reservation_repo
        self._views: dict[int, AvailabilityView] = {}
        self._generation = 0
        self._lock = threading.Lock()

    def available(self, equipment_id: int, excluding: int | None = None) -> int:
        """Units of the item not held by active reservations other than *excluding*."""
        return self.view(equipment_id).available_excluding(excluding)

    def view(self, equipment_id: int) -> AvailabilityView:
        with self._lock:
            cached = self._views.get(equipment_id)
            generation = self._generation
        if cached is not None:
            return cached

        view = self._compute(equipment_id)
        with self._lock:
            # Drop views computed across any invalidation
            if self._generation == generation:
                self._views[equipment_id] = view
        return view

    def invalidate(self, equipment_id: int) -> None:
        with self._lock:
            self._views.pop(equipment_id, None)
            self._generation += 1

    # --- Internal helpers -----------------------------------------------------

    def _compute(self, equipment_id: int) -> AvailabilityView:
        item = self._catalog.get_item(equipment_id)
        if item is None:
            raise EntityNotFoundError(f"Equipment #{equipment_id} not found")

        committed: dict[int, int] = {}
        by_status = {status: 0 for status in ReservationStatus}
        for reservation in self._reservation_repo.list_for_equipment(equipment_id):
            by_status[reservation.status] += reservation.quantity_allocated
            if reservation.is_active and reservation.id is not None:
                committed[reservation.id] = reservation.quantity_allocated

        return AvailabilityView(
            equipment_id=equipment_id,
            total_quantity=item.total_quantity,
            committed=committed,
            by_status=by_status,
        )
