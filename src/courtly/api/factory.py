"""FastAPI application factory."""

import psycopg2
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from courtly.infra.db import StorageError
from courtly.observability.correlation import (
    CORRELATION_ID_HEADER,
    accept_inbound,
    correlation_scope,
)
from courtly.observability.logging import get_logger

from .routes import bookings, health, quotes, schedule, slots

logger = get_logger(__name__)


def _storage_unavailable(request: Request, exc: StorageError) -> JSONResponse:
    logger.error(
        "storage failure",
        extra={
            "extra_fields": {
                "operation": exc.operation,
                "cause": type(exc.cause).__name__ if exc.cause is not None else None,
                "path": request.url.path,
            }
        },
    )
    return JSONResponse(status_code=503, content={"detail": "storage_unavailable"})


def create_app() -> FastAPI:
    """Create the FastAPI app with all routers mounted.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="Courtly",
        docs_url=None,
        redoc_url=None,
    )

    # Correlation ID middleware
    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next) -> Response:
        cid = accept_inbound(request.headers.get(CORRELATION_ID_HEADER))
        with correlation_scope(cid):
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = cid
            return response

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        return _storage_unavailable(request, exc)

    # Reads outside the admission path raise raw driver errors
    @app.exception_handler(psycopg2.Error)
    async def db_error_handler(request: Request, exc: psycopg2.Error) -> JSONResponse:
        operation = getattr(request.scope.get("endpoint"), "__name__", "request")
        return _storage_unavailable(request, StorageError(operation, exc))

    app.include_router(health.router)
    app.include_router(slots.router)
    app.include_router(schedule.router)
    app.include_router(quotes.router)
    app.include_router(bookings.router)

    return app
