"""Application service: Batch Duplicate Equipment use case.

Resolves the requested source IDs through the catalog, then hands the
items to the replication engine.  Failing to read any source aborts the
whole request before a single copy is made; per-copy failures after that
are collected in the result.
"""

from __future__ import annotations

from showgear.application.dto import (
    BatchDuplicateDTO,
    CopyFailureDTO,
    CreatedCopyDTO,
    ImageCopyFailureDTO,
)
from showgear.domain.exceptions import EntityNotFoundError, ValidationError
from showgear.domain.model.equipment import EquipmentItem
from showgear.domain.model.replication import (
    ReplicationJob,
    ReplicationResult,
    suggest_pattern,
)
from showgear.domain.repository.catalog import Catalog
from showgear.domain.service.replication_engine import ProgressCallback, ReplicationEngine


class BatchDuplicateHandler:

    def __init__(self, catalog: Catalog, engine: ReplicationEngine) -> None:
        self._catalog = catalog
        self._engine = engine

    def prepare(
        self, equipment_ids: list[int], copy_count: int, id_pattern: str | None = None
    ) -> ReplicationJob:
        """Validate input and load sources; the returned job can be polled or cancelled.

        Without *id_pattern* the sources decide it (see ``suggest_pattern``).
        """
        if not equipment_ids:
            raise ValidationError("Select at least one equipment item to duplicate")
        # Input is checked before any catalog read
        if id_pattern is None:
            self._engine.check_count(copy_count)
        else:
            self._engine.check_request(copy_count, id_pattern)

        sources = self._load_sources(equipment_ids)
        if id_pattern is None:
            id_pattern = suggest_pattern(sources)
        return self._engine.new_job(sources, copy_count, id_pattern)

    def handle(
        self,
        equipment_ids: list[int],
        copy_count: int,
        id_pattern: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> BatchDuplicateDTO:
        job = self.prepare(equipment_ids, copy_count, id_pattern)
        return self.run(job, on_progress=on_progress)

    def run(
        self, job: ReplicationJob, on_progress: ProgressCallback | None = None
    ) -> BatchDuplicateDTO:
        return self._to_dto(self._engine.run(job, on_progress=on_progress))

    def preview(
        self, equipment_ids: list[int], copy_count: int, id_pattern: str | None = None
    ) -> dict[int, list[str]]:
        """Serial numbers the batch would generate, keyed by source ID."""
        job = self.prepare(equipment_ids, copy_count, id_pattern)
        return {
            source.id: job.pattern.preview(
                job.copy_count.value,
                source_id=source.id if job.namespaced else None,
            )
            for source in job.sources
        }

    # --- Internal helpers -----------------------------------------------------

    def _load_sources(self, equipment_ids: list[int]) -> list[EquipmentItem]:
        sources: list[EquipmentItem] = []
        for equipment_id in equipment_ids:
            item = self._catalog.get_item(equipment_id)
            if item is None:
                raise EntityNotFoundError(f"Equipment #{equipment_id} not found")
            sources.append(item)
        return sources

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_dto(result: ReplicationResult) -> BatchDuplicateDTO:
        return BatchDuplicateDTO(
            created=[
                CreatedCopyDTO(
                    source_id=o.source_id,
                    copy_index=o.copy_index,
                    item_id=o.created_id,  # type: ignore[arg-type]
                    serial_number=o.identifier,
                    image_copied=o.image_copied,
                )
                for o in result.created
            ],
            failures=[
                CopyFailureDTO(
                    source_id=o.source_id,
                    copy_index=o.copy_index,
                    serial_number=o.identifier,
                    message=o.error or "",
                )
                for o in result.failures
            ],
            image_copy_failures=[
                ImageCopyFailureDTO(source_id=f.source_id, item_id=f.item_id, message=f.message)
                for f in result.image_copy_failures
            ],
            progress=result.progress,
            cancelled=result.cancelled,
        )
