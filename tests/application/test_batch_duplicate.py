"""Integration tests for the BatchDuplicate use case."""

import pytest

from showgear.application.batch_duplicate import BatchDuplicateHandler
from showgear.domain.exceptions import (
    EntityNotFoundError,
    InvalidCountError,
    InvalidPatternError,
    ValidationError,
)
from showgear.domain.model.equipment import EquipmentItem
from showgear.domain.service.replication_engine import ReplicationEngine
from tests.fakes import FakeCatalog


def _setup(*items: EquipmentItem):
    catalog = FakeCatalog(list(items))
    return BatchDuplicateHandler(catalog=catalog, engine=ReplicationEngine(catalog)), catalog


def _item(item_id: int, serial: str, image: int | None = None) -> EquipmentItem:
    return EquipmentItem(
        id=item_id, name="Par can", serial_number=serial, reference_image_id=image
    )


class TestBatchDuplicateHappyPath:

    def test_returns_created_and_failures(self):
        handler, catalog = _setup(_item(42, "PAR-001"), _item(7, "SN-2"))

        dto = handler.handle([42], 3, "SN-{n}")

        assert [c.serial_number for c in dto.created] == ["SN-1", "SN-3"]
        assert [(f.source_id, f.copy_index) for f in dto.failures] == [(42, 2)]
        assert dto.failures[0].serial_number == "SN-2"
        assert dto.progress == 100
        assert not dto.cancelled

    def test_image_failures_reported_separately(self):
        handler, catalog = _setup(_item(42, "PAR-001", image=3))
        catalog.fail_images = True

        dto = handler.handle([42], 2, "SN-{n}")

        assert len(dto.created) == 2
        assert all(c.image_copied is False for c in dto.created)
        assert [f.item_id for f in dto.image_copy_failures] == [c.item_id for c in dto.created]

    def test_progress_streamed(self):
        handler, _ = _setup(_item(1, "A"), _item(2, "B"))
        seen = []

        handler.handle([1, 2], 2, "X-{n}", on_progress=lambda job: seen.append(job.completed))

        assert seen == [1, 2, 3, 4]


class TestBatchDuplicateValidation:

    def test_unknown_source_aborts_before_any_copy(self):
        handler, catalog = _setup(_item(42, "PAR-001"))

        with pytest.raises(EntityNotFoundError, match="Equipment #99 not found"):
            handler.handle([42, 99], 2, "SN-{n}")

        assert "create_item" not in catalog.calls

    def test_bad_pattern_rejected_before_reading_sources(self):
        handler, catalog = _setup(_item(42, "PAR-001"))

        with pytest.raises(InvalidPatternError):
            handler.handle([42], 2, "BATCH")

        assert catalog.calls == []

    def test_bad_count_rejected_before_reading_sources_without_pattern(self):
        handler, catalog = _setup(_item(42, "PAR-001"))

        with pytest.raises(InvalidCountError):
            handler.handle([42], 0)

        assert catalog.calls == []

    def test_empty_selection_rejected(self):
        handler, _ = _setup()
        with pytest.raises(ValidationError, match="at least one"):
            handler.handle([], 2, "SN-{n}")


class TestPreview:

    def test_single_source_uses_pattern_directly(self):
        handler, _ = _setup(_item(42, "PAR-001"))
        assert handler.preview([42], 2, "SN-{n}") == {42: ["SN-1", "SN-2"]}

    def test_multiple_sources_namespaced(self):
        handler, catalog = _setup(_item(1, "A"), _item(2, "B"))

        preview = handler.preview([1, 2], 1, "X-{n}")

        assert preview == {1: ["X-1-1"], 2: ["X-2-1"]}
        assert "create_item" not in catalog.calls


class TestDefaultPattern:

    def test_single_source_continues_its_serial(self):
        handler, _ = _setup(_item(42, "PAR-001"))

        dto = handler.handle([42], 2)

        assert [c.serial_number for c in dto.created] == ["PAR-001-1", "PAR-001-2"]

    def test_multiple_sources_use_batch_prefix(self):
        handler, _ = _setup(_item(1, "A"), _item(2, "B"))

        assert handler.preview([1, 2], 1) == {1: ["BATCH-1-1"], 2: ["BATCH-2-1"]}

    def test_prepared_job_exposes_chosen_pattern(self):
        handler, _ = _setup(_item(42, "PAR-001"))

        job = handler.prepare([42], 1)

        assert str(job.pattern) == "PAR-001-{n}"
