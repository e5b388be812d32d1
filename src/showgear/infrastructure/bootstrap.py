"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.

The ledger cache and the per-item locks must be shared by every service
in the process, so they are built once per data directory.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from showgear.application.allocation_service import AllocationService
from showgear.application.batch_duplicate import BatchDuplicateHandler
from showgear.application.locks import KeyedLock
from showgear.application.show_availability import ShowAvailabilityHandler
from showgear.domain.service.quantity_ledger import QuantityLedger
from showgear.domain.service.replication_engine import ReplicationEngine
from showgear.infrastructure.config import get_settings
from showgear.infrastructure.persistence.json_catalog import JsonCatalog
from showgear.infrastructure.persistence.json_production_registry import (
    JsonProductionRegistry,
)
from showgear.infrastructure.persistence.json_reservation_repository import (
    JsonReservationRepository,
)


@dataclass(frozen=True)
class Container:
    catalog: JsonCatalog
    productions: JsonProductionRegistry
    reservations: JsonReservationRepository
    ledger: QuantityLedger
    locks: KeyedLock


@lru_cache
def _container_for(data_dir: Path) -> Container:
    catalog = JsonCatalog(data_dir / "equipment.json")
    reservations = JsonReservationRepository(data_dir / "reservations.json")
    return Container(
        catalog=catalog,
        productions=JsonProductionRegistry(data_dir / "productions.json"),
        reservations=reservations,
        ledger=QuantityLedger(catalog, reservations),
        locks=KeyedLock(),
    )


def container() -> Container:
    return _container_for(get_settings().data_dir.resolve())


def reset() -> None:
    """Forget cached settings and wiring (used when the environment changes)."""
    get_settings.cache_clear()
    _container_for.cache_clear()


def allocation_service() -> AllocationService:
    c = container()
    return AllocationService(
        reservation_repo=c.reservations,
        catalog=c.catalog,
        production_registry=c.productions,
        ledger=c.ledger,
        locks=c.locks,
    )


def batch_duplicate_handler() -> BatchDuplicateHandler:
    settings = get_settings()
    c = container()
    engine = ReplicationEngine(
        c.catalog,
        max_copies=settings.max_copies,
        create_timeout=settings.create_timeout_seconds or None,
    )
    return BatchDuplicateHandler(catalog=c.catalog, engine=engine)


def show_availability_handler() -> ShowAvailabilityHandler:
    c = container()
    return ShowAvailabilityHandler(catalog=c.catalog, ledger=c.ledger)
