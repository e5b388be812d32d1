"""Application service: Show Availability use case (query)."""

from __future__ import annotations

from dataclasses import dataclass

from showgear.domain.exceptions import EntityNotFoundError
from showgear.domain.model.reservation import ReservationStatus
from showgear.domain.repository.catalog import Catalog
from showgear.domain.service.quantity_ledger import QuantityLedger


@dataclass(frozen=True)
class AvailabilityDTO:
    equipment_id: int
    label: str
    total: int
    committed: int
    available: int
    by_status: dict[str, int]


class ShowAvailabilityHandler:

    def __init__(self, catalog: Catalog, ledger: QuantityLedger) -> None:
        self._catalog = catalog
        self._ledger = ledger

    def handle(self, equipment_id: int) -> AvailabilityDTO:
        item = self._catalog.get_item(equipment_id)
        if item is None:
            raise EntityNotFoundError(f"Equipment #{equipment_id} not found")

        view = self._ledger.view(equipment_id)
        return AvailabilityDTO(
            equipment_id=equipment_id,
            label=item.label,
            total=view.total_quantity,
            committed=view.committed_quantity,
            available=view.available_quantity,
            by_status={
                status.value: view.by_status.get(status, 0) for status in ReservationStatus
            },
        )
