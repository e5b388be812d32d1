"""Abstract registry of productions (shows)."""

from __future__ import annotations

from abc import ABC, abstractmethod


class ProductionRegistry(ABC):

    @abstractmethod
    def production_exists(self, production_id: int) -> bool:
        """True when a production with this ID is registered."""
