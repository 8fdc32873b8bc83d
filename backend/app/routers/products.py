"""
Product endpoints.

List reads go through the cache-aside read path; writes commit first and
leave indexing and broadcasts to post-commit hooks.
"""

import threading
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from stockapp.dto import Page, ProductDto
from stockapp.services import ProductService, ReadPathOrchestrator, ReindexService

from ..database import get_db
from ..dependencies import (
    get_cancel_event,
    get_product_service,
    get_read_path,
    get_reindex_service,
)
from ..schemas import (
    DeletedResponse,
    IndexCountsResponse,
    ProductCreateRequest,
    ProductUpdateRequest,
    ReindexResponse,
)

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=Page[ProductDto])
def list_products(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    category_id: Optional[int] = None,
    location_id: Optional[int] = None,
    search_term: Optional[str] = None,
    db: Session = Depends(get_db),
    read_path: ReadPathOrchestrator = Depends(get_read_path),
    cancel_event: threading.Event = Depends(get_cancel_event),
):
    return read_path.list_products(
        db,
        page=page,
        page_size=page_size,
        category_id=category_id,
        location_id=location_id,
        search_term=search_term,
        cancel_event=cancel_event,
    )


@router.post("/reindex", response_model=ReindexResponse)
def reindex_products(
    db: Session = Depends(get_db),
    reindex_service: ReindexService = Depends(get_reindex_service),
):
    """Drop and rebuild the products collection, then sweep cached list pages."""
    summary = reindex_service.reindex_products(db)
    return ReindexResponse(
        message=f"Reindexed {summary.indexed_count} of {summary.total_count} products",
        **summary.model_dump(),
    )


@router.get("/index-counts", response_model=IndexCountsResponse)
def index_counts(reindex_service: ReindexService = Depends(get_reindex_service)):
    return IndexCountsResponse(counts=reindex_service.index_counts())


@router.get("/{product_id}", response_model=ProductDto)
def get_product(product_id: int, service: ProductService = Depends(get_product_service)):
    return service.get(product_id)


@router.post("", response_model=ProductDto, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreateRequest,
    service: ProductService = Depends(get_product_service),
):
    return service.create(**payload.model_dump())


@router.put("/{product_id}", response_model=ProductDto)
def update_product(
    product_id: int,
    payload: ProductUpdateRequest,
    service: ProductService = Depends(get_product_service),
):
    return service.update(product_id, **payload.model_dump(exclude_unset=True))


@router.delete("/{product_id}", response_model=DeletedResponse)
def delete_product(product_id: int, service: ProductService = Depends(get_product_service)):
    service.delete(product_id)
    return DeletedResponse(id=product_id)
