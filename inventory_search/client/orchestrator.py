"""
Search orchestration for the inventory search page.

Three triggers feed one request stream: explicit searches, sort changes and
page changes. Each trigger restarts the debounce window and bumps a
generation number; a request only publishes its outcome while its generation
is still the latest, so a superseded response can never overwrite newer state.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Callable, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from ..config import get_config
from ..data.models import (
    AvailabilityResult,
    InventoryItem,
    SearchBy,
    SearchQuery,
    SortDirection,
    SortField,
    SortSpec,
)
from ..logging import get_logger
from .service import InventorySearchApi

logger = get_logger(__name__)


class SearchForm(BaseModel):
    """Criteria entered by the user."""
    criteria: str = Field(default="", description="Text criteria")
    by: SearchBy = Field(default=SearchBy.PART_NUMBER, description="Field the criteria applies to")
    branches: List[str] = Field(default_factory=list, description="Selected branch codes")
    only_available: bool = Field(default=False, description="Only items in stock")


class SearchState(BaseModel):
    """Snapshot published to subscribers after every change."""
    model_config = {"frozen": True}

    loading: bool = False
    items: List[InventoryItem] = Field(default_factory=list)
    total: int = 0
    error_message: Optional[str] = None
    page: int = 0
    generation: int = 0


class PeakStatus(str, Enum):
    NOT_FETCHED = "not_fetched"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class PeakLookup(BaseModel):
    """Peak availability state for one part.

    NOT_FETCHED and FAILED both lack a result; they are kept apart so a failed
    lookup is never shown as "no data yet".
    """
    model_config = {"frozen": True}

    part_number: str
    status: PeakStatus = PeakStatus.NOT_FETCHED
    result: Optional[AvailabilityResult] = None
    error_message: Optional[str] = None


Subscriber = Callable[[SearchState], None]


class SearchOrchestrator:
    """Turns user triggers into debounced, last-request-wins searches.

    Trigger methods are synchronous and must be called on the running event
    loop; the request itself runs as a task.
    """

    def __init__(
        self,
        api: InventorySearchApi,
        debounce_ms: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> None:
        config = get_config()
        self._api = api
        self.debounce_seconds = (config.search_debounce_ms if debounce_ms is None else debounce_ms) / 1000.0
        self.page_size = page_size or config.default_page_size

        self.form = SearchForm()
        self.sort: Optional[SortSpec] = None
        self.page = 0

        self._state = SearchState()
        self._generation = 0
        self._pending: Optional[asyncio.Task] = None
        self._subscribers: List[Subscriber] = []
        self._peaks: Dict[str, PeakLookup] = {}

    # ---------- published state ----------

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register `callback` for state changes; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, **changes) -> None:
        self._state = self._state.model_copy(update=changes)
        for callback in list(self._subscribers):
            callback(self._state)

    # ---------- triggers ----------

    def search(
        self,
        criteria: Optional[str] = None,
        by: Union[SearchBy, str, None] = None,
        branches: Optional[List[str]] = None,
        only_available: Optional[bool] = None,
    ) -> None:
        """Explicit search. Loading is published right away, before the debounce."""
        if criteria is not None:
            self.form.criteria = criteria
        if by is not None:
            self.form.by = by if isinstance(by, SearchBy) else SearchBy.parse(by)
        if branches is not None:
            self.form.branches = list(branches)
        if only_available is not None:
            self.form.only_available = only_available
        self.page = 0
        self._publish(loading=True)
        self._trigger("search")

    def toggle_sort(self, field: Union[SortField, str]) -> None:
        """Same field again flips the direction; a new field starts ascending."""
        field = field if isinstance(field, SortField) else SortField.parse(field)
        direction = SortDirection.ASC
        if self.sort is not None and self.sort.field == field and self.sort.direction == SortDirection.ASC:
            direction = SortDirection.DESC
        self.set_sort(field, direction)

    def set_sort(self, field: Union[SortField, str], direction: Union[SortDirection, str] = SortDirection.ASC) -> None:
        self.sort = SortSpec(field=field, direction=direction)
        self.page = 0
        self._trigger("sort")

    def change_page(self, page: int) -> None:
        self.page = max(0, int(page))
        self._trigger("page")

    def build_query(self) -> SearchQuery:
        """Snapshot of the current form, sort and page."""
        return SearchQuery(
            criteria=self.form.criteria,
            by=self.form.by,
            branches=list(self.form.branches),
            only_available=self.form.only_available,
            sort=self.sort,
            page=self.page,
            size=self.page_size,
        )

    def _trigger(self, source: str) -> None:
        self._generation += 1
        generation = self._generation
        if self._pending is not None and not self._pending.done():
            # the upstream call is shielded, so it still completes into the cache
            self._pending.cancel()
        self._pending = asyncio.get_running_loop().create_task(self._run(generation))
        logger.debug(f"{source} trigger -> generation {generation}")

    async def _run(self, generation: int) -> None:
        await asyncio.sleep(self.debounce_seconds)

        query = self.build_query()
        self._publish(loading=True, generation=generation)
        try:
            envelope = await self._api.search(query)
        except Exception as e:
            if generation != self._generation:
                logger.debug(f"discarding failure of superseded generation {generation}")
                return
            logger.warning(f"Search failed: {e!r}")
            self._publish(loading=False, error_message=str(e) or "Search failed")
            return

        if generation != self._generation:
            logger.debug(f"discarding result of superseded generation {generation}")
            return

        if envelope.is_failed:
            logger.warning(f"Search failed: {envelope.message}")
            self._publish(loading=False, error_message=envelope.message or "Search failed")
        else:
            self._publish(
                loading=False,
                error_message=None,
                items=list(envelope.data.items),
                total=envelope.data.total,
                page=query.page,
            )

    async def wait_idle(self) -> None:
        """Wait until no request is pending, following any that replace it."""
        while True:
            task = self._pending
            if task is None or task.done():
                return
            await asyncio.wait({task})

    async def aclose(self) -> None:
        """Cancel pending work; nothing is published afterwards."""
        self._generation += 1
        task = self._pending
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait({task})
        self._subscribers.clear()

    # ---------- peak availability ----------

    def peak_lookup(self, part_number: str) -> PeakLookup:
        key = part_number.strip().upper()
        return self._peaks.get(key) or PeakLookup(part_number=part_number.strip())

    async def fetch_peak_availability(self, part_number: str) -> PeakLookup:
        """Fetch (or reuse) a part's peak availability and record the outcome.

        A fetch for a part that is already loading returns the loading state.
        Blank part numbers raise InvalidArgument.
        """
        key = (part_number or "").strip().upper()
        current = self._peaks.get(key)
        if current is not None and current.status == PeakStatus.LOADING:
            return current

        pending = self._api.get_peak_availability(part_number)
        part_number = part_number.strip()
        self._peaks[key] = PeakLookup(
            part_number=part_number,
            status=PeakStatus.LOADING,
            result=current.result if current is not None else None,
        )
        try:
            envelope = await pending
        except asyncio.CancelledError:
            if current is None:
                self._peaks.pop(key, None)
            else:
                self._peaks[key] = current
            raise
        except Exception as e:
            logger.warning(f"Peak availability lookup for {part_number} failed: {e!r}")
            lookup = PeakLookup(
                part_number=part_number,
                status=PeakStatus.FAILED,
                error_message=str(e) or "Peak availability lookup failed",
            )
        else:
            if envelope.is_failed:
                lookup = PeakLookup(part_number=part_number, status=PeakStatus.FAILED, error_message=envelope.message)
            else:
                lookup = PeakLookup(part_number=part_number, status=PeakStatus.LOADED, result=envelope.data)
        self._peaks[key] = lookup
        return lookup
