"""
Query engine over inventory records.

Both entry points are pure: they read the records they are given and build new
result objects. Filtering and sorting run over a pandas frame of the scalar
columns whose index is the record position, so the page is mapped back to the
original record objects at the end.
"""

from __future__ import annotations

from typing import Dict, NamedTuple, Optional, Sequence

import pandas as pd

from ..errors import InvalidArgument
from ..logging import get_logger
from .models import (
    AvailabilityResult,
    BranchAvailability,
    InventoryItem,
    SearchBy,
    SearchQuery,
    SearchResult,
    SortDirection,
    SortField,
)

logger = get_logger(__name__)

_COLUMNS = [
    "part_number", "supplier_sku", "description", "branch",
    "available_qty", "uom", "lead_time_days", "last_purchase_date",
]

_CRITERIA_COLUMNS: Dict[SearchBy, str] = {
    SearchBy.PART_NUMBER: "part_number",
    SearchBy.DESCRIPTION: "description",
    SearchBy.SUPPLIER_SKU: "supplier_sku",
}


class SortKey(NamedTuple):
    """Frame column a sort field reads, and where absent values land when ascending."""
    column: str
    absent_first: bool = True


SORT_KEYS: Dict[SortField, SortKey] = {
    SortField.PART_NUMBER: SortKey("part_number"),
    SortField.DESCRIPTION: SortKey("description"),
    SortField.BRANCH: SortKey("branch"),
    SortField.AVAILABLE_QTY: SortKey("available_qty"),
    SortField.UOM: SortKey("uom"),
    # absent lead time ranks as the largest value
    SortField.LEAD_TIME_DAYS: SortKey("lead_time_days", absent_first=False),
    # absent purchase date ranks as the earliest value
    SortField.LAST_PURCHASE_DATE: SortKey("last_purchase_date", absent_first=True),
}

_unmapped = set(SortField) - set(SORT_KEYS)
if _unmapped:
    raise RuntimeError(f"Sort fields without a sort key: {sorted(f.value for f in _unmapped)}")


# ---------- frame helpers ----------

def to_frame(records: Sequence[InventoryItem]) -> pd.DataFrame:
    """Scalar columns of `records`, indexed by record position."""
    df = pd.DataFrame.from_records(
        [{column: getattr(item, column) for column in _COLUMNS} for item in records],
        columns=_COLUMNS,
    )
    df["lead_time_days"] = pd.to_numeric(df["lead_time_days"])
    df["last_purchase_date"] = pd.to_datetime(df["last_purchase_date"], utc=True)
    return df


def _normalize_code(values: pd.Series) -> pd.Series:
    return values.fillna("").astype(str).str.strip().str.upper()


def _filter(df: pd.DataFrame, query: SearchQuery) -> pd.DataFrame:
    mask = pd.Series(True, index=df.index)
    if query.criteria:
        column = df[_CRITERIA_COLUMNS[query.by]].fillna("").astype(str).str.lower()
        mask &= column.str.contains(query.criteria.lower(), regex=False)
    if query.branches:
        wanted = {branch.strip().upper() for branch in query.branches}
        mask &= _normalize_code(df["branch"]).isin(wanted)
    if query.only_available:
        mask &= df["available_qty"] > 0
    return df.loc[mask]


def _sort(df: pd.DataFrame, query: SearchQuery) -> pd.DataFrame:
    spec = query.effective_sort
    key = SORT_KEYS[spec.field]
    ascending = spec.direction == SortDirection.ASC
    # descending mirrors the absent position so absent values keep their rank
    absent_first = key.absent_first if ascending else not key.absent_first
    return df.sort_values(
        key.column,
        ascending=ascending,
        kind="stable",
        na_position="first" if absent_first else "last",
    )


# ---------- entry points ----------

def search(records: Sequence[InventoryItem], query: Optional[SearchQuery]) -> SearchResult:
    """Filter, sort and paginate `records` according to `query`.

    `total` counts every match before slicing. Pages past the end come back
    empty with the correct total.
    """
    if query is None:
        raise InvalidArgument("query is required")

    records = list(records)
    if not records:
        return SearchResult(total=0, items=[])

    df = _sort(_filter(to_frame(records), query), query)
    total = int(len(df))
    start = query.page * query.size
    page = df.iloc[start:start + query.size]
    items = [records[position] for position in page.index]

    logger.debug(
        f"search criteria={query.criteria!r} by={query.by.value} branches={query.branches} "
        f"page={query.page} size={query.size} -> total={total} returned={len(items)}"
    )
    return SearchResult(total=total, items=items)


def peak_availability(records: Sequence[InventoryItem], part_number: Optional[str]) -> AvailabilityResult:
    """Sum a part's available quantity per branch, largest branch first.

    Matching is exact on the trimmed, upper-cased part number. No match is not an
    error: the result is empty with the identifier echoed back trimmed.
    """
    if part_number is None or not part_number.strip():
        raise InvalidArgument("partNumber is required")

    normalized = part_number.strip().upper()
    records = list(records)
    empty = AvailabilityResult(part_number=part_number.strip(), total_available=0, branches=[])
    if not records:
        return empty

    df = to_frame(records)
    matched = df.loc[_normalize_code(df["part_number"]) == normalized]
    if matched.empty:
        logger.debug(f"peak availability part={normalized} -> no matches")
        return empty

    grouped = (
        matched.assign(branch=_normalize_code(matched["branch"]))
               .groupby("branch", as_index=False, sort=False)["available_qty"]
               .sum()
               .sort_values(["available_qty", "branch"], ascending=[False, True], kind="stable")
    )
    branches = [
        BranchAvailability(branch=row.branch, qty=int(row.available_qty))
        for row in grouped.itertuples(index=False)
    ]

    logger.debug(f"peak availability part={normalized} -> {len(branches)} branches")
    return AvailabilityResult(
        part_number=records[matched.index[0]].part_number,
        total_available=sum(b.qty for b in branches),
        branches=branches,
    )
