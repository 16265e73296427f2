"""Translate domain and framework errors into the response envelope."""
import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from inventsync.domain.errors import (
    AuthenticationError,
    ConflictError,
    InventSyncError,
    MarketplaceError,
    NotFoundError,
    PreconditionError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

# Checked in order, so subclasses must precede their bases.
_STATUS_BY_ERROR: tuple[tuple[type[InventSyncError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (PreconditionError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (MarketplaceError, status.HTTP_502_BAD_GATEWAY),
)


def status_for(exc: InventSyncError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _envelope(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


async def _handle_domain_error(request: Request, exc: InventSyncError) -> JSONResponse:
    status_code = status_for(exc)
    logger.info(
        "request_rejected",
        path=request.url.path,
        error_type=exc.__class__.__name__,
        status_code=status_code,
        error=str(exc),
    )
    return _envelope(status_code, str(exc))


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"
    return _envelope(status.HTTP_400_BAD_REQUEST, message)


async def _handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error = "Not found" if exc.status_code == status.HTTP_404_NOT_FOUND else str(exc.detail)
    return _envelope(exc.status_code, error)


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path)
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InventSyncError, _handle_domain_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _handle_http_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _handle_unexpected_error)
