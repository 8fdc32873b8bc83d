"""
FastAPI application entry point.

Uses structured logging from the stockapp.logging module.
"""

import asyncio

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from stockapp.cache import cache
from stockapp.db import db
from stockapp.exceptions import IndexSchemaError, SearchUnavailableError
from stockapp.logging import RequestLoggingMiddleware, configure_logging, get_logger
from stockapp.notifications import ConnectionHub
from stockapp.search import SearchIndex, create_search_client

from .config import get_settings
from .error_handlers import register_exception_handlers
from .middleware.request_id import RequestIDMiddleware
from .routers import categories as categories_router
from .routers import dashboard as dashboard_router
from .routers import locations as locations_router
from .routers import product_attributes as product_attributes_router
from .routers import products as products_router
from .routers import realtime as realtime_router
from .routers import stock_movements as stock_movements_router

# Configure structured logging
settings = get_settings()
log_level = "DEBUG" if settings.debug else "INFO"
configure_logging(level=log_level)
logger = get_logger("api")


def create_app(search_index: SearchIndex | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        search_index: Optional pre-built index; by default one is created
            from ELASTICSEARCH_URL (no client when it is empty)
    """
    api_version = "v1"
    api_prefix = f"{settings.api_prefix}/{api_version}"

    app = FastAPI(title=settings.app_name, debug=settings.debug)
    app.state.search_index = search_index or SearchIndex(create_search_client(settings))
    app.state.hub = ConnectionHub()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Content-Type",
            "Accept",
            "Accept-Encoding",
            "Origin",
            "X-Requested-With",
            "X-Request-ID",
        ],
    )

    # GZip compression for responses > 500 bytes
    app.add_middleware(GZipMiddleware, minimum_size=500)

    # RequestIDMiddleware is outermost so the request log line carries its id
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    @app.on_event("startup")
    async def startup_event():
        """Initialize services on startup."""
        logger.info("app_startup", app_name=settings.app_name)

        db.initialize(settings.database_url)
        db.create_all_tables()
        logger.info("database_initialized")

        cache.initialize()
        if cache.is_available:
            logger.info("cache_initialized", redis_host=settings.redis_host)
        else:
            logger.warning("cache_unavailable")

        app.state.hub.bind_loop(asyncio.get_running_loop())

        index: SearchIndex = app.state.search_index
        if not index.available:
            logger.warning("search_unavailable")
            return
        try:
            index.ensure_all_schemas()
        except (IndexSchemaError, SearchUnavailableError) as e:
            # Reads fall back to the primary store; a reindex retries the schemas
            logger.error("search_schema_setup_failed", error=str(e))

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("app_shutdown", websocket_clients=app.state.hub.connection_count)

    @app.get("/health", tags=["health"])
    def health_check():
        """Liveness check."""
        return {"status": "ok"}

    @app.get("/health/ready", tags=["health"])
    def readiness_check():
        """
        Readiness check endpoint.

        The database is required; cache and search are optional and only
        reported.

        Returns 200 if ready, 503 if not ready.
        """
        checks = {
            "database": db.ping(),
            "cache": cache.health_check().get("status") == "healthy",
            "search": app.state.search_index.available,
        }

        if not checks["database"]:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "not_ready", "checks": checks},
            )

        return {"status": "ready", "checks": checks}

    # API is accessible at /api/v1/*
    app.include_router(products_router.router, prefix=api_prefix)
    app.include_router(stock_movements_router.router, prefix=api_prefix)
    app.include_router(product_attributes_router.router, prefix=api_prefix)
    app.include_router(categories_router.router, prefix=api_prefix)
    app.include_router(locations_router.router, prefix=api_prefix)
    app.include_router(dashboard_router.router, prefix=api_prefix)
    app.include_router(realtime_router.router)

    return app


app = create_app()
