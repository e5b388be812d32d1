"""JSON-file-backed implementation of Catalog."""

from __future__ import annotations

import json
import threading
from dataclasses import asdict
from dataclasses import fields as dataclass_fields
from pathlib import Path

from showgear.domain.exceptions import CreationFailure, EntityNotFoundError
from showgear.domain.model.equipment import EquipmentItem
from showgear.domain.repository.catalog import Catalog

_FIELD_NAMES = {f.name for f in dataclass_fields(EquipmentItem)}


class JsonCatalog(Catalog):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._write_lock = threading.Lock()
        self._ensure_file()

    # --- Catalog interface ----------------------------------------------------

    def get_item(self, item_id: int) -> EquipmentItem | None:
        for raw in self._load_raw():
            if raw["id"] == item_id:
                return self._to_domain(raw)
        return None

    def item_exists(self, item_id: int) -> bool:
        return any(raw["id"] == item_id for raw in self._load_raw())

    def list_all(self) -> list[EquipmentItem]:
        return [self._to_domain(raw) for raw in self._load_raw()]

    def create_item(self, fields: dict) -> int:
        unknown = set(fields) - _FIELD_NAMES
        if unknown:
            raise CreationFailure(f"Unknown equipment fields: {', '.join(sorted(unknown))}")
        if not (fields.get("name") or "").strip():
            raise CreationFailure("Equipment name is required")
        if fields.get("total_quantity", 1) < 0:
            raise CreationFailure("Total quantity cannot be negative")

        with self._write_lock:
            records = self._load_raw()
            serial = fields.get("serial_number")
            if serial and any(raw.get("serial_number") == serial for raw in records):
                raise CreationFailure(f"Serial number '{serial}' already exists")

            new_id = max((raw["id"] for raw in records), default=0) + 1
            item = EquipmentItem(**{**fields, "id": new_id})
            records.append(self._to_raw(item))
            self._persist_raw(records)
        return new_id

    def attach_reference_image(self, item_id: int, image_id: int) -> None:
        with self._write_lock:
            records = self._load_raw()
            for raw in records:
                if raw["id"] == item_id:
                    raw["reference_image_id"] = image_id
                    self._persist_raw(records)
                    return
        raise EntityNotFoundError(f"Equipment #{item_id} not found")

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(item: EquipmentItem) -> dict:
        return asdict(item)

    @staticmethod
    def _to_domain(raw: dict) -> EquipmentItem:
        return EquipmentItem(**{k: v for k, v in raw.items() if k in _FIELD_NAMES})

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
