"""
Product attribute endpoints.
"""

import threading
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from stockapp.dto import Page, ProductAttributeDto
from stockapp.services import ProductAttributeService, ReadPathOrchestrator, ReindexService

from ..database import get_db
from ..dependencies import (
    get_cancel_event,
    get_product_attribute_service,
    get_read_path,
    get_reindex_service,
)
from ..schemas import (
    DeletedResponse,
    ProductAttributeCreateRequest,
    ProductAttributeUpdateRequest,
    ReindexResponse,
)

router = APIRouter(prefix="/product-attributes", tags=["product-attributes"])


@router.get("", response_model=Page[ProductAttributeDto])
def list_product_attributes(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    product_id: Optional[int] = None,
    search_key: Optional[str] = None,
    db: Session = Depends(get_db),
    read_path: ReadPathOrchestrator = Depends(get_read_path),
    cancel_event: threading.Event = Depends(get_cancel_event),
):
    return read_path.list_product_attributes(
        db,
        page=page,
        page_size=page_size,
        product_id=product_id,
        search_key=search_key,
        cancel_event=cancel_event,
    )


@router.post("/reindex", response_model=ReindexResponse)
def reindex_product_attributes(
    db: Session = Depends(get_db),
    reindex_service: ReindexService = Depends(get_reindex_service),
):
    summary = reindex_service.reindex_product_attributes(db)
    return ReindexResponse(
        message=f"Reindexed {summary.indexed_count} of {summary.total_count} product attributes",
        **summary.model_dump(),
    )


@router.get("/{attribute_id}", response_model=ProductAttributeDto)
def get_product_attribute(
    attribute_id: int,
    service: ProductAttributeService = Depends(get_product_attribute_service),
):
    return service.get(attribute_id)


@router.post("", response_model=ProductAttributeDto, status_code=status.HTTP_201_CREATED)
def create_product_attribute(
    payload: ProductAttributeCreateRequest,
    service: ProductAttributeService = Depends(get_product_attribute_service),
):
    return service.create(payload.product_id, payload.key, payload.value)


@router.put("/{attribute_id}", response_model=ProductAttributeDto)
def update_product_attribute(
    attribute_id: int,
    payload: ProductAttributeUpdateRequest,
    service: ProductAttributeService = Depends(get_product_attribute_service),
):
    return service.update(attribute_id, payload.key, payload.value)


@router.delete("/{attribute_id}", response_model=DeletedResponse)
def delete_product_attribute(
    attribute_id: int,
    service: ProductAttributeService = Depends(get_product_attribute_service),
):
    service.delete(attribute_id)
    return DeletedResponse(id=attribute_id)
