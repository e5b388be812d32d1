"""JSON-file-backed implementation of ProductionRegistry."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path

from showgear.domain.exceptions import ValidationError
from showgear.domain.model.equipment import Production
from showgear.domain.repository.production_registry import ProductionRegistry


class JsonProductionRegistry(ProductionRegistry):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    def production_exists(self, production_id: int) -> bool:
        return any(raw["id"] == production_id for raw in self._load_raw())

    def list_all(self) -> list[Production]:
        return [Production(**raw) for raw in self._load_raw()]

    def add(self, production: Production) -> Production:
        if not production.name or not production.name.strip():
            raise ValidationError("Production name is required")
        records = self._load_raw()
        production.id = max((raw["id"] for raw in records), default=0) + 1
        production.name = production.name.strip()
        records.append(asdict(production))
        self._persist_raw(records)
        return production

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
