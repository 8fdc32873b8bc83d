"""
Custom exception handlers for FastAPI.

Domain errors from ``stockapp.exceptions`` map to client errors; anything
else becomes a generic 500.

Security:
- Request IDs are logged server-side for tracing but NOT exposed to clients
- Generic error messages for 500 errors to prevent information disclosure
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

import structlog

from stockapp.exceptions import (
    EntityNotFoundError,
    IndexSchemaError,
    InsufficientStockError,
    InvalidInputError,
    OperationCancelledError,
    SearchUnavailableError,
)
from stockapp.logging import get_logger

logger = get_logger("backend.errors")

# Non-standard status used when the client gave up on the request
CLIENT_CLOSED_REQUEST = 499


def _get_request_id() -> str:
    """
    Get the current request ID from context.

    Used for server-side logging only - NOT exposed to clients.
    """
    ctx = structlog.contextvars.get_contextvars()
    return ctx.get("request_id", "-")


def _response_payload(detail: str, status_code: int) -> dict:
    """
    Create error response payload.

    Security: Does NOT include request_id to prevent information disclosure.
    """
    return {
        "detail": detail,
        "status_code": status_code,
    }


def _client_error(event: str, exc: Exception, status_code: int) -> JSONResponse:
    logger.warning(
        event,
        detail=str(exc),
        status_code=status_code,
        request_id=_get_request_id(),
    )
    return JSONResponse(
        status_code=status_code,
        content=_response_payload(str(exc), status_code),
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        request_id = _get_request_id()
        logger.warning(
            "http_exception",
            detail=exc.detail,
            status_code=exc.status_code,
            request_id=request_id,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=_response_payload(str(exc.detail), exc.status_code),
        )

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError):
        request_id = _get_request_id()
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            request_id=request_id,
        )
        return JSONResponse(
            status_code=422,
            content={
                **_response_payload("Validation error", 422),
                "errors": exc.errors(include_url=False, include_context=False),
            },
        )

    @app.exception_handler(EntityNotFoundError)
    async def not_found_handler(request: Request, exc: EntityNotFoundError):
        return _client_error("entity_not_found", exc, 404)

    @app.exception_handler(InsufficientStockError)
    async def insufficient_stock_handler(request: Request, exc: InsufficientStockError):
        return _client_error("insufficient_stock", exc, 400)

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        return _client_error("invalid_input", exc, 400)

    @app.exception_handler(IndexSchemaError)
    async def index_schema_handler(request: Request, exc: IndexSchemaError):
        return _client_error("index_schema_error", exc, 400)

    @app.exception_handler(SearchUnavailableError)
    async def search_unavailable_handler(request: Request, exc: SearchUnavailableError):
        return _client_error("search_unavailable", exc, 400)

    @app.exception_handler(OperationCancelledError)
    async def cancelled_handler(request: Request, exc: OperationCancelledError):
        logger.info("request_cancelled", detail=str(exc), request_id=_get_request_id())
        return JSONResponse(
            status_code=CLIENT_CLOSED_REQUEST,
            content=_response_payload("Request was cancelled", CLIENT_CLOSED_REQUEST),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        request_id = _get_request_id()
        logger.exception(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            request_id=request_id,
        )
        return JSONResponse(
            status_code=500,
            content=_response_payload("Internal server error", 500),
        )
