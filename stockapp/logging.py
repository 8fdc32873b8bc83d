"""
Structured logging for StockApp.

Every log line carries the context bound for the current request or
operation (request id, collection being reindexed, ...) through structlog
contextvars. Development renders to the console, anything else to JSON.
"""

import logging
import os
import sys
import time
import uuid
from collections.abc import Iterator, Mapping, MutableMapping
from contextlib import contextmanager
from functools import lru_cache
from typing import Any

import structlog
from structlog.types import Processor

REQUEST_ID_HEADER = b"x-request-id"


def _is_development() -> bool:
    from .config import get_settings

    return get_settings().debug or os.getenv("ENV", "development") == "development"


def _add_app_context(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> Mapping[str, Any] | str | bytes | bytearray | tuple[Any, ...]:
    event_dict.setdefault("app", "stockapp")
    return event_dict


def get_processors(development: bool | None = None) -> list[Processor]:
    """Processor chain for console (development) or JSON output."""
    if development is None:
        development = _is_development()

    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _add_app_context,
    ]
    if development:
        return shared + [structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback)]
    return shared + [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]


@lru_cache(maxsize=1)
def configure_logging(level: str = "INFO") -> None:
    """Configure structlog on top of the stdlib root logger. Runs once."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    structlog.configure(
        processors=get_processors(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def bind_context(**kwargs: Any) -> None:
    """Bind values to every later log line of the current request or task."""
    structlog.contextvars.bind_contextvars(**kwargs)


@contextmanager
def operation_context(operation: str, **context: Any) -> Iterator[None]:
    """
    Scope log context to one operation and log how long it took.

    Values bound inside the block (``operation`` plus ``context``) are
    removed again on exit, also when the block raises.

    Usage:
        with operation_context("reindex", collection="products"):
            logger.info("reindex_started")  # carries operation and collection
    """
    logger = get_logger("operations")
    start = time.perf_counter()
    with structlog.contextvars.bound_contextvars(operation=operation, **context):
        try:
            yield
        except Exception as e:
            logger.error(
                "operation_failed",
                duration_seconds=round(time.perf_counter() - start, 3),
                error=str(e),
            )
            raise
        logger.info("operation_complete", duration_seconds=round(time.perf_counter() - start, 3))


def _request_id(scope: MutableMapping[str, Any]) -> str:
    state = scope.get("state") or {}
    if state.get("request_id"):
        return state["request_id"]
    for name, value in scope.get("headers", []):
        if name == REQUEST_ID_HEADER:
            return value.decode("latin-1")
    return str(uuid.uuid4())[:8]


class RequestLoggingMiddleware:
    """
    ASGI middleware that logs one line per HTTP request.

    The request id set by ``RequestIDMiddleware`` (or the incoming
    ``X-Request-ID`` header) is bound for the whole request and cleared
    afterwards. WebSocket traffic is passed through untouched.
    """

    def __init__(self, app):
        self.app = app
        self.logger = get_logger("http")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "")
        path = scope.get("path", "")
        status_code = 500
        start = time.perf_counter()

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
            await send(message)

        with structlog.contextvars.bound_contextvars(request_id=_request_id(scope)):
            try:
                await self.app(scope, receive, send_wrapper)
            finally:
                if status_code >= 500:
                    log = self.logger.error
                elif status_code >= 400:
                    log = self.logger.warning
                else:
                    log = self.logger.info
                log(
                    "request_complete",
                    method=method,
                    path=path,
                    status_code=status_code,
                    duration_seconds=round(time.perf_counter() - start, 3),
                )


__all__ = [
    "configure_logging",
    "get_logger",
    "get_processors",
    "bind_context",
    "operation_context",
    "RequestLoggingMiddleware",
]
