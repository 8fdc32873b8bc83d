"""
Cache-aside read path for the list endpoints.

A request with a free-text term goes straight to the search index when it
is configured. Everything else reads the cache, falls back to the primary
store on a miss and writes the page back with a TTL. Writes do not
invalidate list pages, so a cached page can be up to one TTL old.
"""

import threading
from datetime import date
from typing import Callable, Optional, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from stockapp.cache import CacheKeys, RedisCache
from stockapp.config import Settings, get_settings
from stockapp.dto import Page, ProductAttributeDto, ProductDto, StockMovementDto
from stockapp.exceptions import OperationCancelledError
from stockapp.logging import get_logger
from stockapp.models import StockMovementType
from stockapp.repositories import (
    ProductAttributeRepository,
    ProductRepository,
    StockMovementRepository,
)
from stockapp.search import SearchIndex

logger = get_logger("read_path")

M = TypeVar("M", bound=BaseModel)


def check_cancelled(cancel_event: Optional[threading.Event], operation: str) -> None:
    """Raise OperationCancelledError if the caller has given up."""
    if cancel_event is not None and cancel_event.is_set():
        logger.info("read_cancelled", operation=operation)
        raise OperationCancelledError(f"{operation} was cancelled")


def _normalize_term(term: Optional[str]) -> Optional[str]:
    if term is None:
        return None
    return term.strip()


class ReadPathOrchestrator:
    """
    Chooses between search index, cache and primary store for list reads.

    Args:
        cache: Cache store for list pages
        search_index: Secondary index used for free-text terms
        settings: Supplies the default TTL
    """

    def __init__(
        self,
        cache: RedisCache,
        search_index: SearchIndex,
        settings: Optional[Settings] = None,
    ):
        self.cache = cache
        self.search_index = search_index
        self.settings = settings or get_settings()

    def _use_search(self, term: Optional[str]) -> bool:
        return bool(term) and self.search_index.available

    def _cached_page(self, key: str, model: type[M]) -> Optional[Page[M]]:
        """Read one cached page, treating unreadable entries as a miss."""
        data = self.cache.get_json(key)
        if data is None:
            return None
        try:
            return Page[model].model_validate(data)  # type: ignore[valid-type]
        except ValidationError as e:
            logger.warning("cache_entry_invalid", key=key, error=str(e))
            return None

    def _cache_aside(
        self,
        key: str,
        model: type[M],
        load: Callable[[], Page[M]],
        ttl: Optional[int],
        cancel_event: Optional[threading.Event],
        operation: str,
    ) -> Page[M]:
        cached = self._cached_page(key, model)
        if cached is not None:
            logger.debug("read_served_from_cache", operation=operation, key=key)
            return cached

        check_cancelled(cancel_event, operation)
        page = load()
        check_cancelled(cancel_event, operation)

        self.cache.set_json(
            key,
            page.model_dump(mode="json"),
            ttl=ttl if ttl is not None else self.settings.cache_default_ttl,
        )
        logger.debug("read_served_from_primary", operation=operation, key=key, total=page.total_count)
        return page

    def list_products(
        self,
        session: Session,
        page: int = 1,
        page_size: int = 10,
        category_id: Optional[int] = None,
        location_id: Optional[int] = None,
        search_term: Optional[str] = None,
        ttl: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Page[ProductDto]:
        """
        Get one page of products.

        Raises:
            OperationCancelledError: cancel_event was set before a store call finished
        """
        term = _normalize_term(search_term)
        if self._use_search(term):
            check_cancelled(cancel_event, "list_products")
            return self.search_index.search_products(term, page, page_size, category_id, location_id)

        key = CacheKeys.products_list(page, page_size, category_id, location_id, term)
        return self._cache_aside(
            key,
            ProductDto,
            lambda: ProductRepository(session).list_page(
                page, page_size, category_id, location_id, term
            ),
            ttl,
            cancel_event,
            "list_products",
        )

    def list_stock_movements(
        self,
        session: Session,
        page: int = 1,
        page_size: int = 10,
        product_id: Optional[int] = None,
        category_id: Optional[int] = None,
        movement_type: Optional[StockMovementType] = None,
        search_term: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        ttl: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Page[StockMovementDto]:
        """
        Get one page of stock movements.

        The cache key has no slot for product, category or type, so those
        filtered reads always come from the primary store.
        """
        term = _normalize_term(search_term)
        if self._use_search(term):
            check_cancelled(cancel_event, "list_stock_movements")
            return self.search_index.search_stock_movements(
                term,
                page,
                page_size,
                product_id,
                category_id,
                movement_type.value if movement_type else None,
                start_date,
                end_date,
            )

        def load() -> Page[StockMovementDto]:
            return StockMovementRepository(session).list_page(
                page, page_size, product_id, category_id, movement_type, term, start_date, end_date
            )

        if product_id is not None or category_id is not None or movement_type is not None:
            check_cancelled(cancel_event, "list_stock_movements")
            return load()

        key = CacheKeys.stock_movements_list(page, page_size, term, start_date, end_date)
        return self._cache_aside(
            key, StockMovementDto, load, ttl, cancel_event, "list_stock_movements"
        )

    def list_product_attributes(
        self,
        session: Session,
        page: int = 1,
        page_size: int = 10,
        product_id: Optional[int] = None,
        search_key: Optional[str] = None,
        ttl: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Page[ProductAttributeDto]:
        term = _normalize_term(search_key)
        if self._use_search(term):
            check_cancelled(cancel_event, "list_product_attributes")
            return self.search_index.search_product_attributes(term, page, page_size, product_id)

        key = CacheKeys.product_attributes_list(page, page_size, product_id, term)
        return self._cache_aside(
            key,
            ProductAttributeDto,
            lambda: ProductAttributeRepository(session).list_page(page, page_size, product_id, term),
            ttl,
            cancel_event,
            "list_product_attributes",
        )
