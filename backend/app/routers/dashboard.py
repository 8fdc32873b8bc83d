"""
Dashboard endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from stockapp.dto import DashboardStatsDto
from stockapp.services import DashboardService

from ..database import get_db
from ..dependencies import get_dashboard_service

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStatsDto)
def dashboard_stats(
    db: Session = Depends(get_db),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.get_stats(db)
