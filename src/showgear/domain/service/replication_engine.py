"""Domain service: Replication Engine.

Creates N serial-number-distinct copies of one or more catalog items.
Copies are made strictly one at a time, in source order then copy order,
so progress and per-copy error attribution stay meaningful.  Every copy
is its own catalog creation; the batch as a whole is not atomic and a
failed copy never stops the rest.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

import structlog

from showgear.domain.exceptions import CreationFailure, ValidationError
from showgear.domain.model.equipment import EquipmentItem
from showgear.domain.model.replication import CopyOutcome, ReplicationJob, ReplicationResult
from showgear.domain.model.value_objects import MAX_COPIES, CopyCount, IdPattern
from showgear.domain.repository.catalog import Catalog

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[ReplicationJob], None]


class ReplicationEngine:

    def __init__(
        self,
        catalog: Catalog,
        max_copies: int = MAX_COPIES,
        create_timeout: float | None = None,
    ) -> None:
        self._catalog = catalog
        self._max_copies = max_copies
        self._create_timeout = create_timeout

    def replicate(
        self,
        source_items: list[EquipmentItem],
        copy_count: int,
        id_pattern: str,
        on_progress: ProgressCallback | None = None,
    ) -> ReplicationResult:
        job = self.new_job(source_items, copy_count, id_pattern)
        return self.run(job, on_progress=on_progress)

    def new_job(
        self,
        source_items: list[EquipmentItem],
        copy_count: int,
        id_pattern: str,
    ) -> ReplicationJob:
        """Validate the request and build a job without touching the catalog.

        Raises InvalidPatternError / InvalidCountError on bad input.
        """
        count, pattern = self.check_request(copy_count, id_pattern)

        sources: list[EquipmentItem] = []
        seen: set[int | None] = set()
        for item in source_items:
            if item.id in seen:
                continue
            seen.add(item.id)
            sources.append(item)
        if not sources:
            raise ValidationError("At least one source item is required")

        return ReplicationJob(sources=sources, copy_count=count, pattern=pattern)

    def check_request(self, copy_count: int, id_pattern: str) -> tuple[CopyCount, IdPattern]:
        pattern = IdPattern(id_pattern)
        return self.check_count(copy_count), pattern

    def check_count(self, copy_count: int) -> CopyCount:
        return CopyCount(copy_count, maximum=self._max_copies)

    def run(
        self,
        job: ReplicationJob,
        on_progress: ProgressCallback | None = None,
    ) -> ReplicationResult:
        logger.info(
            "Starting batch duplication",
            sources=[s.id for s in job.sources],
            copy_count=job.copy_count.value,
            pattern=str(job.pattern),
        )

        for source in job.sources:
            for copy_index in range(1, job.copy_count.value + 1):
                if job.cancelled:
                    logger.info(
                        "Batch duplication cancelled",
                        completed=job.completed,
                        total=job.total,
                    )
                    return job.result()

                job.record(self._copy_one(job, source, copy_index))
                if on_progress is not None:
                    on_progress(job)

        result = job.result()
        logger.info(
            "Batch duplication complete",
            created=len(result.created),
            failed=len(result.failures),
            image_failures=len(result.image_copy_failures),
        )
        return result

    # --- Internal helpers -----------------------------------------------------

    def _copy_one(
        self, job: ReplicationJob, source: EquipmentItem, copy_index: int
    ) -> CopyOutcome:
        identifier = job.identifier_for(source, copy_index)
        try:
            created_id = self._create(source.copy_fields(identifier))
        except Exception as exc:
            logger.warning(
                "Failed to create duplicate",
                source_id=source.id,
                copy_index=copy_index,
                serial_number=identifier,
                error=str(exc),
            )
            return CopyOutcome(
                source_id=source.id,  # type: ignore[arg-type]
                copy_index=copy_index,
                identifier=identifier,
                error=str(exc) or type(exc).__name__,
            )

        logger.debug(
            "Created duplicate",
            source_id=source.id,
            copy_index=copy_index,
            item_id=created_id,
            serial_number=identifier,
        )

        image_copied: bool | None = None
        image_error: str | None = None
        if source.reference_image_id is not None:
            try:
                self._catalog.attach_reference_image(created_id, source.reference_image_id)
                image_copied = True
            except Exception as exc:
                logger.warning(
                    "Failed to copy reference image",
                    source_id=source.id,
                    item_id=created_id,
                    image_id=source.reference_image_id,
                    error=str(exc),
                )
                image_copied = False
                image_error = str(exc) or type(exc).__name__

        return CopyOutcome(
            source_id=source.id,  # type: ignore[arg-type]
            copy_index=copy_index,
            identifier=identifier,
            created_id=created_id,
            image_copied=image_copied,
            image_error=image_error,
        )

    def _create(self, fields: dict) -> int:
        if self._create_timeout is None:
            return self._catalog.create_item(fields)

        executor = ThreadPoolExecutor(max_workers=1)
        try:
            future = executor.submit(self._catalog.create_item, fields)
            return future.result(timeout=self._create_timeout)
        except FutureTimeoutError:
            raise CreationFailure(
                f"Timed out after {self._create_timeout}s creating "
                f"'{fields.get('serial_number')}'"
            ) from None
        finally:
            executor.shutdown(wait=False)
