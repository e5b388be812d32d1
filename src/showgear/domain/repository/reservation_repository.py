"""Abstract repository for Reservation aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from showgear.domain.model.reservation import Reservation


class ReservationRepository(ABC):

    @abstractmethod
    def get_by_id(self, reservation_id: int) -> Reservation | None:
        """Return a reservation by its ID, or None if not found."""

    @abstractmethod
    def find(self, production_id: int, equipment_id: int) -> Reservation | None:
        """Return the reservation of an item for a production, if any."""

    @abstractmethod
    def list_for_equipment(self, equipment_id: int) -> list[Reservation]:
        """Return every reservation held against an equipment item."""

    @abstractmethod
    def list_for_production(self, production_id: int) -> list[Reservation]:
        """Return every reservation made for a production."""

    @abstractmethod
    def save(self, reservation: Reservation) -> None:
        """Persist a new or updated reservation, assigning an ID if new."""

    @abstractmethod
    def delete(self, reservation_id: int) -> None:
        """Remove a reservation permanently."""
