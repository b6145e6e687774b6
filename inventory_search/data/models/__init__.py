from .inventory import InventoryItem, LotInfo
from .search_query import (
    SearchBy,
    SearchQuery,
    SortDirection,
    SortField,
    SortSpec,
)
from .results import (
    AvailabilityResult,
    BranchAvailability,
    SearchResult,
)
from .envelope import Envelope

__all__ = [
    # Records
    "InventoryItem",
    "LotInfo",
    # Query
    "SearchBy",
    "SearchQuery",
    "SortDirection",
    "SortField",
    "SortSpec",
    # Results
    "AvailabilityResult",
    "BranchAvailability",
    "SearchResult",
    # Envelope
    "Envelope",
]
