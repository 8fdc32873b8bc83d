"""
FastAPI dependency injection module.

Provides centralized dependencies for:
- Database sessions
- Caching and search
- Services
- Request cancellation
"""

import asyncio
import threading
from collections.abc import AsyncIterator

from fastapi import Depends, Request, WebSocket
from sqlalchemy.orm import Session

from stockapp.cache import CacheSweeper, RedisCache, SweepBounds, cache
from stockapp.logging import get_logger
from stockapp.notifications import ChangeNotifier, ConnectionHub
from stockapp.search import SearchIndex
from stockapp.services import (
    CategoryService,
    DashboardService,
    LocationService,
    ProductAttributeService,
    ProductService,
    ReadPathOrchestrator,
    ReindexService,
    StockMovementService,
)

from ..config import get_settings
from ..database import get_db

logger = get_logger("backend.dependencies")

_cache_init_lock = threading.Lock()

DISCONNECT_POLL_SECONDS = 0.1

# =============================================================================
# Infrastructure Dependencies
# =============================================================================


def get_cache() -> RedisCache:
    """Get Redis cache instance, connecting on first use."""
    if not cache.initialized:
        with _cache_init_lock:
            if not cache.initialized:
                cache.initialize()
    return cache


def get_search_index(request: Request) -> SearchIndex:
    """Get the search index created by the app factory."""
    return request.app.state.search_index


def get_hub(request: Request) -> ConnectionHub:
    return request.app.state.hub


def get_websocket_hub(websocket: WebSocket) -> ConnectionHub:
    return websocket.app.state.hub


def get_notifier(
    search_index: SearchIndex = Depends(get_search_index),
    hub: ConnectionHub = Depends(get_hub),
    redis_cache: RedisCache = Depends(get_cache),
) -> ChangeNotifier:
    return ChangeNotifier(search_index, hub, redis_cache)


def get_sweeper(redis_cache: RedisCache = Depends(get_cache)) -> CacheSweeper:
    return CacheSweeper(redis_cache, SweepBounds.from_settings(get_settings()))


async def get_cancel_event(request: Request) -> AsyncIterator[threading.Event]:
    """
    Event that is set once the client disconnects.

    Sync endpoints run in a worker thread; the read path checks the event
    between store calls.
    """
    cancel_event = threading.Event()

    async def watch_disconnect() -> None:
        while not cancel_event.is_set():
            if await request.is_disconnected():
                logger.info("client_disconnected", path=request.url.path)
                cancel_event.set()
                return
            await asyncio.sleep(DISCONNECT_POLL_SECONDS)

    watcher = asyncio.create_task(watch_disconnect())
    try:
        yield cancel_event
    finally:
        watcher.cancel()


# =============================================================================
# Service Dependencies
# =============================================================================


def get_read_path(
    redis_cache: RedisCache = Depends(get_cache),
    search_index: SearchIndex = Depends(get_search_index),
) -> ReadPathOrchestrator:
    return ReadPathOrchestrator(redis_cache, search_index, get_settings())


def get_dashboard_service(redis_cache: RedisCache = Depends(get_cache)) -> DashboardService:
    return DashboardService(redis_cache)


def get_reindex_service(
    search_index: SearchIndex = Depends(get_search_index),
    sweeper: CacheSweeper = Depends(get_sweeper),
) -> ReindexService:
    return ReindexService(search_index, sweeper, get_settings().reindex_error_sample_size)


def get_product_service(
    db: Session = Depends(get_db),
    notifier: ChangeNotifier = Depends(get_notifier),
) -> ProductService:
    return ProductService(db, notifier)


def get_stock_movement_service(
    db: Session = Depends(get_db),
    notifier: ChangeNotifier = Depends(get_notifier),
) -> StockMovementService:
    return StockMovementService(db, notifier)


def get_product_attribute_service(
    db: Session = Depends(get_db),
    notifier: ChangeNotifier = Depends(get_notifier),
) -> ProductAttributeService:
    return ProductAttributeService(db, notifier)


def get_category_service(
    db: Session = Depends(get_db),
    notifier: ChangeNotifier = Depends(get_notifier),
) -> CategoryService:
    return CategoryService(db, notifier)


def get_location_service(
    db: Session = Depends(get_db),
    notifier: ChangeNotifier = Depends(get_notifier),
) -> LocationService:
    return LocationService(db, notifier)
