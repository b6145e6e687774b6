from __future__ import annotations

from typing import Iterable, List

from ...logging import get_logger
from .. import engine
from ..interface import InventoryRepository
from ..models import AvailabilityResult, InventoryItem, SearchQuery, SearchResult

logger = get_logger(__name__)


class MemoryInventoryStore(InventoryRepository):
    """
    Process-resident implementation.
    - Takes its records once at construction and never mutates them.
    - Every search performs a fresh filter/sort pass over the stored records
      (so each UI interaction triggers new work, mirroring a DB query).
    """

    def __init__(self, items: Iterable[InventoryItem]) -> None:
        self._items = tuple(items)
        logger.info(f"Inventory store loaded with {len(self._items)} records")

    def __len__(self) -> int:
        return len(self._items)

    # ---------- lookups ----------

    def list_items(self) -> List[InventoryItem]:
        return list(self._items)

    def find_by_part_number(self, part_number: str) -> List[InventoryItem]:
        normalized = (part_number or "").strip().upper()
        if not normalized:
            return []
        return [item for item in self._items if item.part_number.strip().upper() == normalized]

    def list_branches(self) -> List[str]:
        return sorted({item.branch.strip().upper() for item in self._items})

    # ---------- queries ----------

    def search(self, query: SearchQuery) -> SearchResult:
        return engine.search(self._items, query)

    def get_peak_availability(self, part_number: str) -> AvailabilityResult:
        return engine.peak_availability(self.find_by_part_number(part_number), part_number)
