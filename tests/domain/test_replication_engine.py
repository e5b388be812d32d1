"""Unit tests for the ReplicationEngine domain service."""

import pytest

from showgear.domain.exceptions import InvalidCountError, InvalidPatternError, ValidationError
from showgear.domain.model.equipment import EquipmentItem
from showgear.domain.model.replication import suggest_pattern
from showgear.domain.service.replication_engine import ReplicationEngine
from tests.fakes import FakeCatalog


def _item(item_id: int, serial: str, image: int | None = None) -> EquipmentItem:
    return EquipmentItem(
        id=item_id,
        name="Moving head",
        brand="Martin",
        model="MAC Aura",
        serial_number=serial,
        total_quantity=1,
        category="Lighting",
        location="Bay 3",
        reference_image_id=image,
    )


class TestInputValidation:

    def test_pattern_without_placeholder_rejected_before_any_catalog_call(self):
        catalog = FakeCatalog([_item(42, "MH-001")])
        engine = ReplicationEngine(catalog)

        with pytest.raises(InvalidPatternError):
            engine.replicate([_item(42, "MH-001")], 3, "BATCH")

        assert catalog.calls == []

    @pytest.mark.parametrize("count", [0, 51])
    def test_count_out_of_range_rejected(self, count):
        catalog = FakeCatalog()
        engine = ReplicationEngine(catalog)

        with pytest.raises(InvalidCountError):
            engine.replicate([_item(42, "MH-001")], count, "SN-{n}")

        assert catalog.calls == []

    def test_configured_maximum_applies(self):
        engine = ReplicationEngine(FakeCatalog(), max_copies=5)

        with pytest.raises(InvalidCountError, match="between 1 and 5"):
            engine.replicate([_item(42, "MH-001")], 6, "SN-{n}")

    def test_no_sources_rejected(self):
        engine = ReplicationEngine(FakeCatalog())

        with pytest.raises(ValidationError, match="At least one source"):
            engine.replicate([], 2, "SN-{n}")


class TestSingleSource:

    def test_creates_copies_in_order(self):
        source = _item(42, "MH-001")
        catalog = FakeCatalog([source])

        result = ReplicationEngine(catalog).replicate([source], 3, "SN-{n}")

        assert [o.identifier for o in result.created] == ["SN-1", "SN-2", "SN-3"]
        assert result.failures == []
        assert result.progress == 100

    def test_copy_carries_every_field_but_identity(self):
        source = _item(42, "MH-001")
        catalog = FakeCatalog([source])

        result = ReplicationEngine(catalog).replicate([source], 1, "SN-{n}")

        copy = catalog.get_item(result.created[0].created_id)
        assert copy.id != 42
        assert copy.serial_number == "SN-1"
        assert (copy.brand, copy.model, copy.category, copy.location) == (
            "Martin", "MAC Aura", "Lighting", "Bay 3",
        )

    def test_collision_recorded_and_batch_continues(self):
        source = _item(42, "MH-001")
        catalog = FakeCatalog([source, _item(7, "SN-2")])

        result = ReplicationEngine(catalog).replicate([source], 3, "SN-{n}")

        assert [o.identifier for o in result.created] == ["SN-1", "SN-3"]
        assert len(result.failures) == 1
        failure = result.failures[0]
        assert (failure.source_id, failure.copy_index) == (42, 2)
        assert "already exists" in failure.error
        assert result.progress == 100

    def test_unexpected_catalog_error_is_a_copy_failure(self):
        source = _item(42, "MH-001")
        catalog = FakeCatalog([source])

        def broken(fields):
            raise RuntimeError("database is locked")

        catalog.create_item = broken

        result = ReplicationEngine(catalog).replicate([source], 2, "SN-{n}")

        assert result.created == []
        assert [f.error for f in result.failures] == ["database is locked"] * 2


class TestMultipleSources:

    def test_identifiers_namespaced_by_source(self):
        a, b = _item(1, "A"), _item(2, "B")
        catalog = FakeCatalog([a, b])

        result = ReplicationEngine(catalog).replicate([a, b], 2, "BATCH-{n}")

        assert [o.identifier for o in result.created] == [
            "BATCH-1-1", "BATCH-1-2", "BATCH-2-1", "BATCH-2-2",
        ]

    def test_repeated_source_duplicated_once(self):
        a = _item(1, "A")
        catalog = FakeCatalog([a])

        result = ReplicationEngine(catalog).replicate([a, a], 2, "SN-{n}")

        assert [o.identifier for o in result.created] == ["SN-1", "SN-2"]


class TestProgress:

    def test_callback_sees_every_attempt(self):
        source = _item(42, "MH-001")
        catalog = FakeCatalog([source])
        catalog.fail_serials = {"SN-2"}
        seen = []

        ReplicationEngine(catalog).replicate(
            [source], 4, "SN-{n}", on_progress=lambda job: seen.append(job.progress)
        )

        assert seen == [25, 50, 75, 100]

    def test_progress_floors(self):
        source = _item(42, "MH-001")
        engine = ReplicationEngine(FakeCatalog([source]))
        job = engine.new_job([source], 3, "SN-{n}")
        seen = []

        engine.run(job, on_progress=lambda j: seen.append(j.progress))

        assert seen == [33, 66, 100]

    def test_cancel_stops_further_copies(self):
        source = _item(42, "MH-001")
        catalog = FakeCatalog([source])
        engine = ReplicationEngine(catalog)
        job = engine.new_job([source], 5, "SN-{n}")

        def cancel_after_two(j):
            if j.completed == 2:
                j.cancel()

        result = engine.run(job, on_progress=cancel_after_two)

        assert result.cancelled
        assert [o.identifier for o in result.created] == ["SN-1", "SN-2"]
        assert result.progress == 40
        assert catalog.get_item(43).serial_number == "SN-1"


class TestTimeout:

    def test_slow_copy_recorded_as_failure(self):
        source = _item(42, "MH-001")
        catalog = FakeCatalog([source])
        catalog.slow_serials = {"SN-1"}
        catalog.delay = 0.5

        result = ReplicationEngine(catalog, create_timeout=0.05).replicate(
            [source], 2, "SN-{n}"
        )

        assert [f.copy_index for f in result.failures] == [1]
        assert "Timed out" in result.failures[0].error
        assert [o.identifier for o in result.created] == ["SN-2"]


class TestReferenceImages:

    def test_image_attached_to_each_copy(self):
        source = _item(42, "MH-001", image=9)
        catalog = FakeCatalog([source])

        result = ReplicationEngine(catalog).replicate([source], 2, "SN-{n}")

        assert all(o.image_copied for o in result.created)
        assert result.image_copy_failures == []
        assert catalog.get_item(result.created[0].created_id).reference_image_id == 9

    def test_image_failure_does_not_fail_the_copy(self):
        source = _item(42, "MH-001", image=9)
        catalog = FakeCatalog([source])
        catalog.fail_images = True

        result = ReplicationEngine(catalog).replicate([source], 2, "SN-{n}")

        assert len(result.created) == 2
        assert result.failures == []
        assert [f.item_id for f in result.image_copy_failures] == [
            o.created_id for o in result.created
        ]
        assert result.image_copy_failures[0].message == "Image storage unavailable"

    def test_no_image_means_nothing_to_copy(self):
        source = _item(42, "MH-001")
        catalog = FakeCatalog([source])

        result = ReplicationEngine(catalog).replicate([source], 1, "SN-{n}")

        assert result.created[0].image_copied is None
        assert "attach_reference_image" not in catalog.calls


class TestSuggestPattern:

    def test_single_source_continues_its_serial(self):
        assert suggest_pattern([_item(1, "MH-07")]) == "MH-07-{n}"

    def test_repeated_source_counts_once(self):
        assert suggest_pattern([_item(1, "MH-07"), _item(1, "MH-07")]) == "MH-07-{n}"

    def test_several_sources_use_batch_prefix(self):
        assert suggest_pattern([_item(1, "MH-07"), _item(2, "MH-08")]) == "BATCH-{n}"

    def test_source_without_serial_uses_batch_prefix(self):
        assert suggest_pattern([EquipmentItem(id=1, name="Cable")]) == "BATCH-{n}"
