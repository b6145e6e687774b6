from __future__ import annotations

from typing import Dict, Optional, Protocol, Type, TypeVar

import httpx

from ..config import get_config
from ..data.interface import InventoryRepository
from ..data.models import AvailabilityResult, Envelope, SearchQuery, SearchResult
from ..errors import InvalidArgument, UpstreamFailure
from ..logging import get_logger

logger = get_logger(__name__)

E = TypeVar("E", bound=Envelope)


# ---- Transport protocol ----

class InventoryTransport(Protocol):
    """
    One asynchronous call per request with exactly one outcome.

    Failures the service reports come back as failed envelopes; failures to
    reach the service at all raise UpstreamFailure.
    """

    async def search(self, query: SearchQuery) -> Envelope[SearchResult]:
        ...

    async def peak_availability(self, part_number: str) -> Envelope[AvailabilityResult]:
        ...


class HttpInventoryTransport(InventoryTransport):
    """httpx client for the inventory HTTP service."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        config = get_config()
        self.base_url = (base_url or config.api_base_url).rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=config.http_timeout_seconds if timeout is None else timeout,
        )

    async def __aenter__(self) -> "HttpInventoryTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @staticmethod
    def search_params(query: SearchQuery) -> Dict[str, str]:
        """Query string for a search; branches and sort only when present."""
        params = {
            "criteria": query.criteria.strip(),
            "by": query.by.value,
            "onlyAvailable": "true" if query.only_available else "false",
            "page": str(query.page),
            "size": str(query.size),
        }
        if query.branches:
            params["branches"] = ",".join(query.branches)
        if query.sort is not None:
            params["sort"] = query.sort.to_param()
        return params

    async def search(self, query: SearchQuery) -> Envelope[SearchResult]:
        return await self._get("/inventory/search", self.search_params(query), Envelope[SearchResult])

    async def peak_availability(self, part_number: str) -> Envelope[AvailabilityResult]:
        return await self._get(
            "/inventory/availability/peak",
            {"partNumber": part_number.strip()},
            Envelope[AvailabilityResult],
        )

    async def _get(self, path: str, params: Dict[str, str], model: Type[E]) -> E:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as e:
            logger.warning(f"GET {path} failed: {e!r}")
            raise UpstreamFailure(f"GET {path} failed: {e}") from e

        # error statuses still carry an envelope; only an undecodable body is fatal
        try:
            return model.model_validate(response.json())
        except ValueError as e:
            raise UpstreamFailure(
                f"GET {path} returned HTTP {response.status_code} without a valid envelope"
            ) from e


class LocalInventoryTransport(InventoryTransport):
    """In-process transport that calls the query engine through a store.

    Mirrors the HTTP service: results are wrapped in envelopes and any error
    becomes a failed envelope carrying its message.
    """

    def __init__(self, store: InventoryRepository) -> None:
        self._store = store

    async def search(self, query: SearchQuery) -> Envelope[SearchResult]:
        try:
            return Envelope[SearchResult].success(self._store.search(query))
        except InvalidArgument as e:
            return Envelope[SearchResult].failure(str(e))
        except Exception as e:
            logger.exception("Local search failed")
            return Envelope[SearchResult].failure(str(e) or type(e).__name__)

    async def peak_availability(self, part_number: str) -> Envelope[AvailabilityResult]:
        try:
            return Envelope[AvailabilityResult].success(self._store.get_peak_availability(part_number))
        except InvalidArgument as e:
            return Envelope[AvailabilityResult].failure(str(e))
        except Exception as e:
            logger.exception("Local peak availability lookup failed")
            return Envelope[AvailabilityResult].failure(str(e) or type(e).__name__)
