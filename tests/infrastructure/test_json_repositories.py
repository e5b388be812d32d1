"""Tests for the JSON-file-backed repositories."""

import json

import pytest

from showgear.domain.exceptions import CreationFailure, EntityNotFoundError, ValidationError
from showgear.domain.model.equipment import Production
from showgear.domain.model.reservation import Reservation, ReservationStatus
from showgear.infrastructure.persistence.json_catalog import JsonCatalog
from showgear.infrastructure.persistence.json_production_registry import JsonProductionRegistry
from showgear.infrastructure.persistence.json_reservation_repository import (
    JsonReservationRepository,
)


class TestJsonCatalog:

    def test_creates_file_on_first_use(self, tmp_path):
        JsonCatalog(tmp_path / "data" / "equipment.json")
        assert json.loads((tmp_path / "data" / "equipment.json").read_text()) == []

    def test_create_assigns_sequential_ids(self, tmp_path):
        catalog = JsonCatalog(tmp_path / "equipment.json")

        first = catalog.create_item({"name": "Spot", "serial_number": "S-1"})
        second = catalog.create_item({"name": "Spot", "serial_number": "S-2"})

        assert (first, second) == (1, 2)
        assert catalog.get_item(2).serial_number == "S-2"
        assert catalog.item_exists(1)
        assert not catalog.item_exists(3)

    def test_duplicate_serial_rejected(self, tmp_path):
        catalog = JsonCatalog(tmp_path / "equipment.json")
        catalog.create_item({"name": "Spot", "serial_number": "S-1"})

        with pytest.raises(CreationFailure, match="'S-1' already exists"):
            catalog.create_item({"name": "Spot", "serial_number": "S-1"})

    def test_items_without_serial_may_repeat(self, tmp_path):
        catalog = JsonCatalog(tmp_path / "equipment.json")
        catalog.create_item({"name": "Cable"})
        catalog.create_item({"name": "Cable"})
        assert len(catalog.list_all()) == 2

    def test_unknown_field_rejected(self, tmp_path):
        catalog = JsonCatalog(tmp_path / "equipment.json")
        with pytest.raises(CreationFailure, match="Unknown equipment fields: colour"):
            catalog.create_item({"name": "Spot", "colour": "red"})

    def test_attach_reference_image(self, tmp_path):
        catalog = JsonCatalog(tmp_path / "equipment.json")
        item_id = catalog.create_item({"name": "Spot"})

        catalog.attach_reference_image(item_id, 12)

        assert catalog.get_item(item_id).reference_image_id == 12

    def test_attach_to_missing_item_rejected(self, tmp_path):
        catalog = JsonCatalog(tmp_path / "equipment.json")
        with pytest.raises(EntityNotFoundError):
            catalog.attach_reference_image(5, 12)


class TestJsonReservationRepository:

    def test_round_trip_preserves_fields(self, tmp_path):
        repo = JsonReservationRepository(tmp_path / "reservations.json")
        r = Reservation.create(equipment_id=3, production_id=4, quantity_needed=2, notes="x")
        r.apply(ReservationStatus.CHECKED_OUT, 2, 2)

        repo.save(r)
        loaded = repo.get_by_id(r.id)

        assert loaded == r
        assert loaded.status is ReservationStatus.CHECKED_OUT
        assert loaded.checked_out_at == r.checked_out_at

    def test_save_updates_in_place(self, tmp_path):
        repo = JsonReservationRepository(tmp_path / "reservations.json")
        r = Reservation.create(equipment_id=3, production_id=4, quantity_needed=2)
        repo.save(r)

        r.apply(ReservationStatus.ALLOCATED, 2, 1)
        repo.save(r)

        assert len(repo.list_for_equipment(3)) == 1
        assert repo.get_by_id(r.id).quantity_allocated == 1

    def test_find_and_lists(self, tmp_path):
        repo = JsonReservationRepository(tmp_path / "reservations.json")
        for production_id, equipment_id in [(1, 10), (1, 11), (2, 10)]:
            repo.save(Reservation.create(equipment_id, production_id, 1))

        assert repo.find(2, 10).production_id == 2
        assert repo.find(2, 11) is None
        assert len(repo.list_for_equipment(10)) == 2
        assert len(repo.list_for_production(1)) == 2

    def test_delete(self, tmp_path):
        repo = JsonReservationRepository(tmp_path / "reservations.json")
        r = Reservation.create(equipment_id=3, production_id=4, quantity_needed=2)
        repo.save(r)

        repo.delete(r.id)

        assert repo.get_by_id(r.id) is None


class TestJsonProductionRegistry:

    def test_add_and_exists(self, tmp_path):
        registry = JsonProductionRegistry(tmp_path / "productions.json")

        p = registry.add(Production(id=None, name=" Hamlet ", date="2026-11-01"))

        assert p.id == 1
        assert p.name == "Hamlet"
        assert registry.production_exists(1)
        assert not registry.production_exists(2)

    def test_blank_name_rejected(self, tmp_path):
        registry = JsonProductionRegistry(tmp_path / "productions.json")
        with pytest.raises(ValidationError, match="name is required"):
            registry.add(Production(id=None, name="  "))
