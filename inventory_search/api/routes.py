from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from ..config import get_config
from ..data.interface import InventoryRepository
from ..data.models import AvailabilityResult, Envelope, SearchQuery, SearchResult
from ..errors import InvalidArgument
from ..logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


def get_store(request: Request) -> InventoryRepository:
    return request.app.state.store


def envelope_response(envelope: Envelope, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=envelope.model_dump(mode="json", by_alias=True))


@router.get("/inventory/search")
def search_inventory(
    criteria: str = Query(default=""),
    by: str = Query(default="PartNumber"),
    branches: str = Query(default=""),
    only_available: bool = Query(default=False, alias="onlyAvailable"),
    page: int = Query(default=0),
    size: Optional[int] = Query(default=None),
    sort: str = Query(default=""),
    fail: bool = Query(default=False),
    store: InventoryRepository = Depends(get_store),
) -> JSONResponse:
    """Filtered, sorted, paginated inventory search."""
    if fail:
        return envelope_response(Envelope[SearchResult].failure("Forced failure (fail=true)"), 400)

    try:
        query = SearchQuery(
            criteria=criteria,
            by=by,
            branches=branches,
            only_available=only_available,
            sort=sort,
            page=page,
            size=size if size is not None else 0,
        )
        result = store.search(query)
    except InvalidArgument as e:
        return envelope_response(Envelope[SearchResult].failure(str(e)), 400)
    except Exception as e:
        logger.exception("Inventory search failed")
        return envelope_response(Envelope[SearchResult].failure(str(e) or type(e).__name__), 500)

    return envelope_response(Envelope[SearchResult].success(result))


@router.get("/inventory/availability/peak")
def peak_availability(
    part_number: Optional[str] = Query(default=None, alias="partNumber"),
    store: InventoryRepository = Depends(get_store),
) -> JSONResponse:
    """Availability of one part summed per branch."""
    if part_number is None or not part_number.strip():
        return envelope_response(Envelope[AvailabilityResult].failure("partNumber is required"), 400)

    try:
        result = store.get_peak_availability(part_number)
    except InvalidArgument as e:
        return envelope_response(Envelope[AvailabilityResult].failure(str(e)), 400)
    except Exception as e:
        logger.exception("Peak availability lookup failed")
        return envelope_response(Envelope[AvailabilityResult].failure(str(e) or type(e).__name__), 500)

    return envelope_response(Envelope[AvailabilityResult].success(result))


@router.get("/health")
def health() -> dict:
    return {"status": "ok", "env": get_config().app_env}
