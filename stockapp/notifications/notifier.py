"""
Change notifier.

Turns committed writes into search index updates and real-time events.
Every method is meant to run as a post-commit hook: failures are logged
here and never raised, so the write that triggered them is unaffected.

Category and location changes are broadcast only. Product documents that
carry the old category or location name keep it until they are
reindexed.
"""

from collections.abc import Callable
from typing import Any

from stockapp.cache import CacheKeys, RedisCache
from stockapp.dto import (
    CategoryDto,
    DashboardStatsDto,
    LocationDto,
    ProductAttributeDto,
    ProductDto,
    StockMovementDto,
)
from stockapp.logging import get_logger
from stockapp.search import SearchIndex

from .broadcaster import Broadcaster, NullBroadcaster

logger = get_logger("notifications.notifier")


class Events:
    PRODUCT_CREATED = "ProductCreated"
    PRODUCT_UPDATED = "ProductUpdated"
    PRODUCT_DELETED = "ProductDeleted"
    STOCK_MOVEMENT_CREATED = "StockMovementCreated"
    PRODUCT_ATTRIBUTE_CREATED = "ProductAttributeCreated"
    PRODUCT_ATTRIBUTE_UPDATED = "ProductAttributeUpdated"
    PRODUCT_ATTRIBUTE_DELETED = "ProductAttributeDeleted"
    CATEGORY_CREATED = "CategoryCreated"
    CATEGORY_UPDATED = "CategoryUpdated"
    CATEGORY_DELETED = "CategoryDeleted"
    LOCATION_CREATED = "LocationCreated"
    LOCATION_UPDATED = "LocationUpdated"
    LOCATION_DELETED = "LocationDeleted"
    DASHBOARD_STATS_UPDATED = "DashboardStatsUpdated"


class ChangeNotifier:
    """
    Pushes committed changes to the search index and to connected clients.

    Usage:
        notifier = ChangeNotifier(search_index, hub, cache)
        hooks.add("product_saved", notifier.product_saved, dto, created=True)
    """

    def __init__(
        self,
        search_index: SearchIndex,
        broadcaster: Broadcaster | None = None,
        cache: RedisCache | None = None,
    ):
        self.search_index = search_index
        self.broadcaster = broadcaster or NullBroadcaster()
        self.cache = cache

    def _attempt(self, action: str, fn: Callable[..., Any], *args: Any) -> bool:
        try:
            fn(*args)
            return True
        except Exception as e:
            logger.error("change_notification_failed", action=action, error=str(e))
            return False

    def _index(self, action: str, fn: Callable[..., Any], *args: Any) -> bool:
        if not self.search_index.available:
            return False
        return self._attempt(action, fn, *args)

    def _broadcast(self, event_name: str, payload: Any) -> bool:
        return self._attempt(event_name, self.broadcaster.publish, event_name, payload)

    # Products

    def product_saved(self, product: ProductDto, created: bool = False) -> None:
        self._index("index_product", self.search_index.index_product, product)
        event_name = Events.PRODUCT_CREATED if created else Events.PRODUCT_UPDATED
        self._broadcast(event_name, product.model_dump(mode="json"))

    def product_deleted(
        self,
        product_id: int,
        attribute_ids: list[int] | None = None,
        movement_ids: list[int] | None = None,
    ) -> None:
        """Drop the product document and the documents of its cascaded children."""
        self._index("delete_product", self.search_index.delete_product, product_id)
        for attribute_id in attribute_ids or []:
            self._index(
                "delete_product_attribute", self.search_index.delete_product_attribute, attribute_id
            )
        for movement_id in movement_ids or []:
            self._index(
                "delete_stock_movement", self.search_index.delete_stock_movement, movement_id
            )
        self._broadcast(Events.PRODUCT_DELETED, product_id)

    # Stock movements

    def stock_movement_saved(self, movement: StockMovementDto) -> None:
        self._index("index_stock_movement", self.search_index.index_stock_movement, movement)
        self._broadcast(Events.STOCK_MOVEMENT_CREATED, movement.model_dump(mode="json"))

    # Product attributes

    def attribute_saved(self, attribute: ProductAttributeDto, created: bool = False) -> None:
        self._index(
            "index_product_attribute", self.search_index.index_product_attribute, attribute
        )
        event_name = Events.PRODUCT_ATTRIBUTE_CREATED if created else Events.PRODUCT_ATTRIBUTE_UPDATED
        self._broadcast(event_name, attribute.model_dump(mode="json"))

    def attribute_deleted(self, attribute_id: int) -> None:
        self._index(
            "delete_product_attribute", self.search_index.delete_product_attribute, attribute_id
        )
        self._broadcast(Events.PRODUCT_ATTRIBUTE_DELETED, attribute_id)

    # Catalog

    def category_changed(self, event_name: str, payload: CategoryDto | int) -> None:
        self._broadcast(event_name, _payload(payload))

    def location_changed(self, event_name: str, payload: LocationDto | int) -> None:
        self._broadcast(event_name, _payload(payload))

    # Dashboard

    def dashboard_changed(self, stats: DashboardStatsDto) -> None:
        """Drop the cached stats and push the fresh ones."""
        if self.cache is not None:
            self._attempt("invalidate_dashboard_stats", self.cache.delete, CacheKeys.DASHBOARD_STATS)
        self._broadcast(Events.DASHBOARD_STATS_UPDATED, stats.model_dump(mode="json"))


def _payload(value: Any) -> Any:
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    return value
