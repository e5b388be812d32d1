"""Catalog records read by the reservation core and created by replication."""

from __future__ import annotations

from dataclasses import asdict, dataclass

# Fields never carried over to a duplicate: identity, the identifier being
# regenerated, and the image link, which is attached separately.
_NOT_COPIED = ("id", "serial_number", "reference_image_id")


@dataclass
class EquipmentItem:
    id: int | None
    name: str
    total_quantity: int = 1
    brand: str = ""
    model: str = ""
    serial_number: str | None = None
    type: str = ""
    category: str = ""
    location: str = ""
    description: str = ""
    status: str = "available"
    reference_image_id: int | None = None

    @property
    def label(self) -> str:
        parts = [p for p in (self.brand, self.model) if p]
        text = " ".join(parts) or self.name
        if self.serial_number:
            text += f" (SN: {self.serial_number})"
        return text

    def copy_fields(self, serial_number: str) -> dict:
        """Field values for a duplicate that differs only by serial number."""
        fields = {k: v for k, v in asdict(self).items() if k not in _NOT_COPIED}
        fields["serial_number"] = serial_number
        return fields


@dataclass
class Production:
    """A show the reservation core associates reservations with."""

    id: int | None
    name: str
    date: str = ""
    venue: str = ""
