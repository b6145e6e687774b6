from __future__ import annotations

from typing import List, Protocol

from .models import AvailabilityResult, InventoryItem, SearchQuery, SearchResult


# ---- Inventory store protocol ----

class InventoryRepository(Protocol):
    """
    Read-only contract for the inventory store.

    Records are immutable once stored; callers receive the stored objects and
    must not expect copies.
    """

    def list_items(self) -> List[InventoryItem]:
        """All records in storage order."""
        ...

    def find_by_part_number(self, part_number: str) -> List[InventoryItem]:
        """Records whose trimmed part number equals `part_number`, ignoring case."""
        ...

    def list_branches(self) -> List[str]:
        """Distinct normalized branch codes, sorted."""
        ...

    def search(self, query: SearchQuery) -> SearchResult:
        """Filter, sort and paginate the records."""
        ...

    def get_peak_availability(self, part_number: str) -> AvailabilityResult:
        """Aggregate a part's availability across branches."""
        ...
