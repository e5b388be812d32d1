"""Abstract catalog of equipment items.

Defined in the domain layer so the domain never depends on
infrastructure.  Concrete implementations (JSON, in-memory) live in the
infrastructure layer and in the test fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from showgear.domain.model.equipment import EquipmentItem


class Catalog(ABC):

    @abstractmethod
    def get_item(self, item_id: int) -> EquipmentItem | None:
        """Return an equipment item by its ID, or None if not found."""

    @abstractmethod
    def item_exists(self, item_id: int) -> bool:
        """True when an item with this ID is in the catalog."""

    @abstractmethod
    def list_all(self) -> list[EquipmentItem]:
        """Return every equipment item."""

    @abstractmethod
    def create_item(self, fields: dict) -> int:
        """Create an item from field values and return its new ID.

        Raises CreationFailure when the serial number is already taken or
        the fields are otherwise rejected.
        """

    @abstractmethod
    def attach_reference_image(self, item_id: int, image_id: int) -> None:
        """Link an existing reference image to an item."""
