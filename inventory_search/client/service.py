from __future__ import annotations

import asyncio
from typing import Optional

from ..data.models import AvailabilityResult, Envelope, SearchQuery, SearchResult
from ..errors import InvalidArgument
from .cache import ResultCache, peak_cache_key, search_cache_key
from .transport import InventoryTransport


def envelope_failed(envelope: Envelope) -> bool:
    return envelope.is_failed


class InventorySearchApi:
    """Cached front for an inventory transport.

    Owns two independent result caches, one for searches and one for peak
    availability lookups; they never share keys or capacity. The returned
    awaitables are shielded, so a caller that gets cancelled leaves the shared
    upstream call running for the other callers and for the cache.
    """

    def __init__(
        self,
        transport: InventoryTransport,
        search_cache: Optional[ResultCache[Envelope[SearchResult]]] = None,
        peak_cache: Optional[ResultCache[Envelope[AvailabilityResult]]] = None,
    ) -> None:
        self._transport = transport
        self.search_cache = search_cache if search_cache is not None else ResultCache("search", is_failure=envelope_failed)
        self.peak_cache = peak_cache if peak_cache is not None else ResultCache("peak", is_failure=envelope_failed)

    def search(self, query: SearchQuery) -> "asyncio.Future[Envelope[SearchResult]]":
        if query is None:
            raise InvalidArgument("query is required")
        handle = self.search_cache.get_or_create(
            search_cache_key(query),
            lambda: self._transport.search(query),
        )
        return asyncio.shield(handle)

    def get_peak_availability(self, part_number: str) -> "asyncio.Future[Envelope[AvailabilityResult]]":
        if part_number is None or not part_number.strip():
            raise InvalidArgument("partNumber is required")
        part_number = part_number.strip()
        handle = self.peak_cache.get_or_create(
            peak_cache_key(part_number),
            lambda: self._transport.peak_availability(part_number),
        )
        return asyncio.shield(handle)

    async def aclose(self) -> None:
        """Drop both caches and close the transport if it can be closed."""
        self.search_cache.clear()
        self.peak_cache.clear()
        aclose = getattr(self._transport, "aclose", None)
        if aclose is not None:
            await aclose()
