"""
Best-effort cache sweep for list pages.

Redis pattern deletes are not used, so after a bulk change the sweeper
rebuilds every list key inside a fixed parameter space and deletes each
one. Pages outside the bounds (page 11, a page size of 15, any non-empty
search term) stay cached until their TTL runs out.
"""

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import Optional

from stockapp.config import Settings
from stockapp.logging import get_logger

from .cache_keys import CacheKeys
from .redis_client import RedisCache

logger = get_logger("cache.sweeper")

# An absent and an empty search term are both swept.
SEARCH_TERM_VARIANTS: tuple[Optional[str], ...] = (None, "")


@dataclass(frozen=True)
class SweepBounds:
    """Page numbers and page sizes the sweeper enumerates."""

    max_page: int = 10
    page_sizes: Sequence[int] = field(default_factory=lambda: tuple(range(10, 101, 10)))

    @classmethod
    def from_settings(cls, settings: Settings) -> "SweepBounds":
        return cls(
            max_page=settings.sweep_max_page,
            page_sizes=tuple(
                range(
                    settings.sweep_min_page_size,
                    settings.sweep_max_page_size + 1,
                    settings.sweep_page_size_step,
                )
            ),
        )

    def pages(self) -> range:
        return range(1, self.max_page + 1)

    def page_grid(self) -> Iterator[tuple[int, int]]:
        for page in self.pages():
            for page_size in self.page_sizes:
                yield page, page_size


class CacheSweeper:
    """
    Deletes the list-page cache keys most likely to hold stale data.

    Every method returns the number of delete calls issued. A failing
    cache never raises out of a sweep.
    """

    def __init__(self, cache: RedisCache, bounds: SweepBounds | None = None):
        self.cache = cache
        self.bounds = bounds or SweepBounds()

    def sweep_products(
        self,
        category_ids: Iterable[int] = (),
        location_ids: Iterable[int] = (),
    ) -> int:
        category_ids = list(category_ids)
        location_ids = list(location_ids)

        def keys() -> Iterator[str]:
            for page, page_size in self.bounds.page_grid():
                for term in SEARCH_TERM_VARIANTS:
                    yield CacheKeys.products_list(page, page_size, None, None, term)
                    for category_id in category_ids:
                        yield CacheKeys.products_list(page, page_size, category_id, None, term)
                    for location_id in location_ids:
                        yield CacheKeys.products_list(page, page_size, None, location_id, term)

        return self._delete_all("products", keys())

    def sweep_stock_movements(self) -> int:
        def keys() -> Iterator[str]:
            for page, page_size in self.bounds.page_grid():
                for term in SEARCH_TERM_VARIANTS:
                    yield CacheKeys.stock_movements_list(page, page_size, term)

        return self._delete_all("stock_movements", keys())

    def sweep_product_attributes(self, product_ids: Iterable[int] = ()) -> int:
        product_ids = list(product_ids)

        def keys() -> Iterator[str]:
            for page, page_size in self.bounds.page_grid():
                for term in SEARCH_TERM_VARIANTS:
                    yield CacheKeys.product_attributes_list(page, page_size, None, term)
                    for product_id in product_ids:
                        yield CacheKeys.product_attributes_list(page, page_size, product_id, term)

        return self._delete_all("product_attributes", keys())

    def _delete_all(self, collection: str, keys: Iterator[str]) -> int:
        issued = 0
        try:
            for key in keys:
                self.cache.delete(key)
                issued += 1
        except Exception as e:
            logger.warning("cache_sweep_failed", collection=collection, issued=issued, error=str(e))
            return issued

        logger.info("cache_sweep_completed", collection=collection, issued=issued)
        return issued
