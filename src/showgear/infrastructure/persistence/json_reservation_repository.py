"""JSON-file-backed implementation of ReservationRepository."""

from __future__ import annotations

import json
import threading
from datetime import datetime
from pathlib import Path

from showgear.domain.model.reservation import Reservation, ReservationStatus
from showgear.domain.repository.reservation_repository import ReservationRepository


class JsonReservationRepository(ReservationRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._write_lock = threading.Lock()
        self._ensure_file()

    # --- ReservationRepository interface --------------------------------------

    def get_by_id(self, reservation_id: int) -> Reservation | None:
        for raw in self._load_raw():
            if raw["id"] == reservation_id:
                return self._to_domain(raw)
        return None

    def find(self, production_id: int, equipment_id: int) -> Reservation | None:
        for raw in self._load_raw():
            if raw["production_id"] == production_id and raw["equipment_id"] == equipment_id:
                return self._to_domain(raw)
        return None

    def list_for_equipment(self, equipment_id: int) -> list[Reservation]:
        return [
            self._to_domain(raw)
            for raw in self._load_raw()
            if raw["equipment_id"] == equipment_id
        ]

    def list_for_production(self, production_id: int) -> list[Reservation]:
        return [
            self._to_domain(raw)
            for raw in self._load_raw()
            if raw["production_id"] == production_id
        ]

    def save(self, reservation: Reservation) -> None:
        with self._write_lock:
            records = self._load_raw()
            if reservation.id is None:
                reservation.id = max((raw["id"] for raw in records), default=0) + 1
                records.append(self._to_raw(reservation))
            else:
                for i, raw in enumerate(records):
                    if raw["id"] == reservation.id:
                        records[i] = self._to_raw(reservation)
                        break
                else:
                    records.append(self._to_raw(reservation))
            self._persist_raw(records)

    def delete(self, reservation_id: int) -> None:
        with self._write_lock:
            records = [raw for raw in self._load_raw() if raw["id"] != reservation_id]
            self._persist_raw(records)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(reservation: Reservation) -> dict:
        return {
            "id": reservation.id,
            "equipment_id": reservation.equipment_id,
            "production_id": reservation.production_id,
            "quantity_needed": reservation.quantity_needed,
            "quantity_allocated": reservation.quantity_allocated,
            "status": reservation.status.value,
            "notes": reservation.notes,
            "created_at": reservation.created_at.isoformat(),
            "updated_at": reservation.updated_at.isoformat(),
            "checked_out_at": _iso(reservation.checked_out_at),
            "returned_at": _iso(reservation.returned_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Reservation:
        return Reservation(
            id=raw["id"],
            equipment_id=raw["equipment_id"],
            production_id=raw["production_id"],
            quantity_needed=raw["quantity_needed"],
            quantity_allocated=raw.get("quantity_allocated", 0),
            status=ReservationStatus(raw["status"]),
            notes=raw.get("notes") or "",
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
            checked_out_at=_parse(raw.get("checked_out_at")),
            returned_at=_parse(raw.get("returned_at")),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, records: list[dict]) -> None:
        self._file_path.write_text(
            json.dumps(records, indent=2) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None
