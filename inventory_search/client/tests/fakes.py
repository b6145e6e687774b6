import asyncio
from typing import Dict, List, Optional

from inventory_search.client.transport import LocalInventoryTransport
from inventory_search.data.models import AvailabilityResult, Envelope, SearchQuery, SearchResult


class ScriptedTransport(LocalInventoryTransport):
    """Local transport that records calls and can hold, fail or break them."""

    def __init__(self, store) -> None:
        super().__init__(store)
        self.search_calls: List[SearchQuery] = []
        self.peak_calls: List[str] = []
        self.gates: Dict[int, asyncio.Event] = {}
        self.fail_message: Optional[str] = None
        self.raise_error: Optional[Exception] = None

    def hold_page(self, page: int) -> asyncio.Event:
        self.gates[page] = asyncio.Event()
        return self.gates[page]

    async def search(self, query: SearchQuery) -> Envelope[SearchResult]:
        self.search_calls.append(query)
        gate = self.gates.get(query.page)
        if gate is not None:
            await gate.wait()
        if self.raise_error is not None:
            raise self.raise_error
        if self.fail_message is not None:
            return Envelope[SearchResult].failure(self.fail_message)
        return await super().search(query)

    async def peak_availability(self, part_number: str) -> Envelope[AvailabilityResult]:
        self.peak_calls.append(part_number)
        if self.raise_error is not None:
            raise self.raise_error
        if self.fail_message is not None:
            return Envelope[AvailabilityResult].failure(self.fail_message)
        return await super().peak_availability(part_number)


async def wait_until(predicate, attempts: int = 200) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0.001)
    raise AssertionError("condition was not reached")
