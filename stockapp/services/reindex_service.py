"""
Full rebuild of a search collection from the primary store.

The steps are not transactional: the collection is dropped first, so a
crash part-way leaves it empty or partly filled until the next reindex.
Two concurrent reindexes of the same collection are not serialized.
"""

from collections.abc import Callable, Sequence
from typing import Any

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from stockapp.cache import CacheSweeper
from stockapp.exceptions import SearchUnavailableError
from stockapp.logging import get_logger, operation_context
from stockapp.repositories import (
    CategoryRepository,
    LocationRepository,
    ProductAttributeRepository,
    ProductRepository,
    StockMovementRepository,
)
from stockapp.search import PRODUCT_ATTRIBUTES, PRODUCTS, STOCK_MOVEMENTS, SearchIndex

logger = get_logger("reindex")


class ReindexSummary(BaseModel):
    """Outcome of one collection rebuild."""

    collection: str
    indexed_count: int = 0
    failed_count: int = 0
    errors: list[str] = Field(default_factory=list)
    total_count: int = 0


class ReindexService:
    """
    Rebuilds search collections and sweeps the list cache afterwards.

    Per-document failures are counted and sampled into the summary; only a
    failure to recreate the collection schemas aborts the run.
    """

    def __init__(self, search_index: SearchIndex, sweeper: CacheSweeper, error_sample_size: int = 10):
        self.search_index = search_index
        self.sweeper = sweeper
        self.error_sample_size = error_sample_size

    def _require_search(self) -> None:
        if not self.search_index.available:
            raise SearchUnavailableError("Search service is not available")

    def _rebuild(
        self,
        collection: str,
        rows: Sequence[Any],
        index_one: Callable[[Any], None],
        sweep: Callable[[], int],
    ) -> ReindexSummary:
        self._require_search()
        with operation_context("reindex", collection=collection):
            logger.info("reindex_started", total=len(rows))

            self.search_index.delete_collection(collection)
            # IndexSchemaError propagates: nothing to index into
            self.search_index.ensure_all_schemas()

            summary = ReindexSummary(collection=collection, total_count=len(rows))
            for row in rows:
                try:
                    index_one(row)
                    summary.indexed_count += 1
                except Exception as e:
                    summary.failed_count += 1
                    if len(summary.errors) < self.error_sample_size:
                        summary.errors.append(f"{collection} {row.id}: {e}")

            try:
                sweep()
            except Exception as e:
                logger.warning("reindex_cache_sweep_failed", error=str(e))

            logger.info(
                "reindex_completed",
                indexed=summary.indexed_count,
                failed=summary.failed_count,
                total=summary.total_count,
            )
        return summary

    def reindex_products(self, session: Session) -> ReindexSummary:
        rows = ProductRepository(session).list_all_dtos()
        category_ids = CategoryRepository(session).all_ids()
        location_ids = LocationRepository(session).all_ids()
        return self._rebuild(
            PRODUCTS,
            rows,
            self.search_index.index_product,
            lambda: self.sweeper.sweep_products(category_ids, location_ids),
        )

    def reindex_stock_movements(self, session: Session) -> ReindexSummary:
        rows = StockMovementRepository(session).list_all_dtos()
        return self._rebuild(
            STOCK_MOVEMENTS,
            rows,
            self.search_index.index_stock_movement,
            self.sweeper.sweep_stock_movements,
        )

    def reindex_product_attributes(self, session: Session) -> ReindexSummary:
        rows = ProductAttributeRepository(session).list_all_dtos()
        product_ids = ProductRepository(session).all_ids()
        return self._rebuild(
            PRODUCT_ATTRIBUTES,
            rows,
            self.search_index.index_product_attribute,
            lambda: self.sweeper.sweep_product_attributes(product_ids),
        )

    def index_counts(self) -> dict[str, int]:
        self._require_search()
        return self.search_index.document_counts()
