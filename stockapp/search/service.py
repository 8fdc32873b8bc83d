"""
Search index operations over Elasticsearch.

Document writes (``upsert_document``) raise on failure so a batch caller
can count them; document deletes and searches never raise. Searches
degrade to an empty result carrying the requested page metadata.
"""

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional, TypeVar

from elastic_transport import TransportError
from elasticsearch import ApiError, Elasticsearch, NotFoundError
from pydantic import BaseModel, ValidationError

from stockapp.dto import Page, ProductAttributeDto, ProductDto, StockMovementDto, to_document
from stockapp.exceptions import IndexSchemaError, SearchUnavailableError
from stockapp.logging import get_logger

from . import queries
from .schemas import (
    ALL_COLLECTIONS,
    ANALYSIS_SETTINGS,
    PRODUCT_ATTRIBUTES,
    PRODUCTS,
    STOCK_MOVEMENTS,
    mapping_for,
)

logger = get_logger("search")

M = TypeVar("M", bound=BaseModel)

SEARCH_ERRORS = (ApiError, TransportError)


@dataclass
class SearchResult:
    """Raw hits of one search page."""

    items: list[dict[str, Any]] = field(default_factory=list)
    total_count: int = 0
    page: int = 1
    page_size: int = 10
    highlights: dict[str, dict[str, list[str]]] = field(default_factory=dict)

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total_count / self.page_size)

    def to_page(self, model: type[M]) -> Page[M]:
        """Validate hits into read models; hits that do not validate are skipped."""
        items = []
        for item in self.items:
            try:
                items.append(model.model_validate(item))
            except ValidationError as e:
                logger.warning("search_hit_invalid", model=model.__name__, error=str(e))
        return Page[model](  # type: ignore[valid-type]
            items=items,
            total_count=self.total_count,
            page=self.page,
            page_size=self.page_size,
        )


class SearchIndex:
    """
    Elasticsearch-backed secondary index of denormalized read models.

    Usage:
        index = SearchIndex(create_search_client())
        index.ensure_all_schemas()
        index.index_product(product_dto)
        page = index.search_products("vida", page=1, page_size=10)
    """

    def __init__(self, client: Optional[Elasticsearch]):
        self.client = client

    @property
    def available(self) -> bool:
        return self.client is not None

    def _require_client(self) -> Elasticsearch:
        if self.client is None:
            raise SearchUnavailableError("Search service is not available")
        return self.client

    # =========================================================================
    # Document operations
    # =========================================================================

    def upsert_document(self, collection: str, doc_id: int, body: dict[str, Any]) -> None:
        """
        Create or overwrite one document, refreshing the collection.

        Raises:
            SearchUnavailableError: No search client is configured
            ApiError, TransportError: The engine rejected or never received the write
        """
        client = self._require_client()
        try:
            client.index(index=collection, id=str(doc_id), document=body, refresh=True)
        except SEARCH_ERRORS as e:
            logger.error("search_index_failed", collection=collection, doc_id=doc_id, error=str(e))
            raise
        logger.info("search_document_indexed", collection=collection, doc_id=doc_id)

    def delete_document(self, collection: str, doc_id: int) -> bool:
        """Remove one document. A missing document counts as deleted."""
        if self.client is None:
            return False
        try:
            self.client.delete(index=collection, id=str(doc_id), refresh=True)
        except NotFoundError:
            logger.info("search_document_already_absent", collection=collection, doc_id=doc_id)
            return True
        except SEARCH_ERRORS as e:
            logger.error("search_delete_failed", collection=collection, doc_id=doc_id, error=str(e))
            return False
        logger.info("search_document_deleted", collection=collection, doc_id=doc_id)
        return True

    def search(
        self,
        collection: str,
        query: dict[str, Any],
        page: int = 1,
        page_size: int = 10,
        sort: Optional[list[dict[str, Any]]] = None,
        highlight: Optional[dict[str, Any]] = None,
    ) -> SearchResult:
        """
        Run one paginated query.

        Returns:
            SearchResult, empty with the requested page metadata on any failure
        """
        empty = SearchResult(page=page, page_size=page_size)
        if self.client is None:
            return empty

        try:
            response = self.client.search(
                index=collection,
                query=query,
                from_=(page - 1) * page_size,
                size=page_size,
                sort=sort,
                highlight=highlight,
            )
        except SEARCH_ERRORS as e:
            logger.error("search_failed", collection=collection, error=str(e))
            return empty

        hits = response["hits"]
        total = hits.get("total", 0)
        if isinstance(total, dict):
            total = total.get("value", 0)

        items = [hit["_source"] for hit in hits.get("hits", [])]
        highlights = {
            str(hit["_id"]): hit["highlight"] for hit in hits.get("hits", []) if hit.get("highlight")
        }
        if not items and total:
            logger.warning("search_page_beyond_results", collection=collection, total=total, page=page)

        logger.info("search_completed", collection=collection, total=total, returned=len(items))
        return SearchResult(
            items=items,
            total_count=int(total),
            page=page,
            page_size=page_size,
            highlights=highlights,
        )

    # =========================================================================
    # Collection lifecycle
    # =========================================================================

    def ensure_schema(self, collection: str) -> bool:
        """
        Create a collection with its mapping if it does not exist yet.

        Returns:
            True if the collection was created, False if it already existed

        Raises:
            IndexSchemaError: The collection could not be created
        """
        client = self._require_client()
        try:
            if client.indices.exists(index=collection):
                return False
            client.indices.create(
                index=collection,
                settings=ANALYSIS_SETTINGS,
                mappings=mapping_for(collection),
            )
        except ApiError as e:
            if e.error == "resource_already_exists_exception":
                return False
            logger.error("search_schema_failed", collection=collection, error=str(e))
            raise IndexSchemaError(collection, str(e)) from e
        except TransportError as e:
            logger.error("search_schema_failed", collection=collection, error=str(e))
            raise IndexSchemaError(collection, str(e)) from e

        logger.info("search_schema_created", collection=collection)
        return True

    def ensure_all_schemas(self) -> None:
        for collection in ALL_COLLECTIONS:
            self.ensure_schema(collection)
        logger.info("search_schemas_ensured")

    def delete_collection(self, collection: str) -> bool:
        """Drop a collection and every document in it. Absent collections are fine."""
        client = self._require_client()
        try:
            client.indices.delete(index=collection, ignore_unavailable=True)
        except SEARCH_ERRORS as e:
            logger.warning("search_collection_delete_failed", collection=collection, error=str(e))
            return False
        logger.info("search_collection_deleted", collection=collection)
        return True

    def count_documents(self, collection: str) -> int:
        """Count documents in a collection; 0 when it is missing or unreachable."""
        if self.client is None:
            return 0
        try:
            return int(self.client.count(index=collection)["count"])
        except SEARCH_ERRORS as e:
            logger.warning("search_count_failed", collection=collection, error=str(e))
            return 0

    def document_counts(self) -> dict[str, int]:
        return {collection: self.count_documents(collection) for collection in ALL_COLLECTIONS}

    # =========================================================================
    # Typed wrappers
    # =========================================================================

    def index_product(self, product: ProductDto) -> None:
        self.upsert_document(PRODUCTS, product.id, to_document(product))

    def delete_product(self, product_id: int) -> bool:
        return self.delete_document(PRODUCTS, product_id)

    def search_products(
        self,
        term: Optional[str],
        page: int = 1,
        page_size: int = 10,
        category_id: Optional[int] = None,
        location_id: Optional[int] = None,
    ) -> Page[ProductDto]:
        result = self.search(
            PRODUCTS,
            queries.product_query(term, category_id, location_id),
            page,
            page_size,
            sort=queries.recency_sort(),
            highlight=queries.PRODUCT_HIGHLIGHT,
        )
        return result.to_page(ProductDto)

    def index_stock_movement(self, movement: StockMovementDto) -> None:
        self.upsert_document(STOCK_MOVEMENTS, movement.id, to_document(movement))

    def delete_stock_movement(self, movement_id: int) -> bool:
        return self.delete_document(STOCK_MOVEMENTS, movement_id)

    def search_stock_movements(
        self,
        term: Optional[str],
        page: int = 1,
        page_size: int = 10,
        product_id: Optional[int] = None,
        category_id: Optional[int] = None,
        movement_type: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Page[StockMovementDto]:
        result = self.search(
            STOCK_MOVEMENTS,
            queries.stock_movement_query(
                term, product_id, category_id, movement_type, start_date, end_date
            ),
            page,
            page_size,
            sort=queries.STOCK_MOVEMENT_SORT,
            highlight=queries.STOCK_MOVEMENT_HIGHLIGHT,
        )
        return result.to_page(StockMovementDto)

    def index_product_attribute(self, attribute: ProductAttributeDto) -> None:
        self.upsert_document(PRODUCT_ATTRIBUTES, attribute.id, to_document(attribute))

    def delete_product_attribute(self, attribute_id: int) -> bool:
        return self.delete_document(PRODUCT_ATTRIBUTES, attribute_id)

    def search_product_attributes(
        self,
        term: Optional[str],
        page: int = 1,
        page_size: int = 10,
        product_id: Optional[int] = None,
    ) -> Page[ProductAttributeDto]:
        result = self.search(
            PRODUCT_ATTRIBUTES,
            queries.product_attribute_query(term, product_id),
            page,
            page_size,
            sort=queries.recency_sort(),
            highlight=queries.PRODUCT_ATTRIBUTE_HIGHLIGHT,
        )
        return result.to_page(ProductAttributeDto)
