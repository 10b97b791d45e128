"""Global error handlers: every failure leaves the API as JSON.

Fairness rejections and cap exhaustion never reach these handlers: they are
ordinary 200 responses carrying earnedAmount=0 and a reason.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger()


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed submissions are client errors and are never retried server-side."""
        return JSONResponse(
            status_code=422,
            content={"detail": "Validation error", "errors": jsonable_errors(exc)},
        )

    @app.exception_handler(OperationalError)
    async def storage_unavailable_handler(request: Request, exc: OperationalError) -> JSONResponse:
        """Connection-level database failures: nothing was committed, the client may retry."""
        logger.error(
            "storage_unavailable",
            path=request.url.path,
            method=request.method,
            error=str(exc.orig) if isinstance(exc, DBAPIError) else str(exc),
        )
        return JSONResponse(
            status_code=503,
            content={"detail": "Storage temporarily unavailable, retry later"},
            headers={"Retry-After": "1"},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions; always return JSON."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, object]]:
    """Strip non-serializable context (e.g. exception objects) from pydantic errors."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
