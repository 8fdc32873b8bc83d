"""
Stock movement endpoints.
"""

import threading
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from stockapp.dto import Page, StockMovementDto
from stockapp.models import StockMovementType
from stockapp.services import ReadPathOrchestrator, ReindexService, StockMovementService

from ..database import get_db
from ..dependencies import (
    get_cancel_event,
    get_read_path,
    get_reindex_service,
    get_stock_movement_service,
)
from ..schemas import ReindexResponse, StockMovementCreateRequest

router = APIRouter(prefix="/stock-movements", tags=["stock-movements"])


@router.get("", response_model=Page[StockMovementDto])
def list_stock_movements(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    product_id: Optional[int] = None,
    category_id: Optional[int] = None,
    movement_type: Optional[StockMovementType] = Query(None, alias="type"),
    search_term: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    read_path: ReadPathOrchestrator = Depends(get_read_path),
    cancel_event: threading.Event = Depends(get_cancel_event),
):
    return read_path.list_stock_movements(
        db,
        page=page,
        page_size=page_size,
        product_id=product_id,
        category_id=category_id,
        movement_type=movement_type,
        search_term=search_term,
        start_date=start_date,
        end_date=end_date,
        cancel_event=cancel_event,
    )


@router.post("/reindex", response_model=ReindexResponse)
def reindex_stock_movements(
    db: Session = Depends(get_db),
    reindex_service: ReindexService = Depends(get_reindex_service),
):
    summary = reindex_service.reindex_stock_movements(db)
    return ReindexResponse(
        message=f"Reindexed {summary.indexed_count} of {summary.total_count} stock movements",
        **summary.model_dump(),
    )


@router.post("", response_model=StockMovementDto, status_code=status.HTTP_201_CREATED)
def create_stock_movement(
    payload: StockMovementCreateRequest,
    service: StockMovementService = Depends(get_stock_movement_service),
):
    return service.create(
        product_id=payload.product_id,
        movement_type=payload.type,
        quantity=payload.quantity,
        description=payload.description,
        unit_price=payload.unit_price,
    )
