import time
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..config import get_config
from ..data.interface import InventoryRepository
from ..data.models import Envelope
from ..data.util import get_inventory_store
from ..logging import get_logger
from .routes import envelope_response, router

logger = get_logger(__name__)


async def log_requests(request: Request, call_next: Callable) -> Response:
    """Log every request with its status and timing."""
    start_time = time.time()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(f"{request.method} {request.url.path} raised")
        return envelope_response(Envelope.failure("Internal server error"), 500)

    process_time = time.time() - start_time
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"({process_time * 1000:.1f} ms) query={dict(request.query_params)}"
    )
    response.headers["X-Process-Time"] = f"{process_time:.4f}"
    return response


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed query parameters are the caller's fault: 400 with a failed envelope."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
        for error in exc.errors()
    )
    return envelope_response(Envelope.failure(f"Invalid request: {details}"), 400)


def create_app(store: Optional[InventoryRepository] = None) -> FastAPI:
    """Build the API around `store`, or around a freshly seeded store."""
    app = FastAPI(title="Inventory Search", docs_url="/docs")
    app.state.store = store if store is not None else get_inventory_store()
    app.middleware("http")(log_requests)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.include_router(router)
    return app


def run() -> None:
    import uvicorn

    config = get_config()
    uvicorn.run(create_app(), host=config.api_host, port=config.api_port)
