"""
Dashboard statistics with a cache-aside read.
"""

from typing import Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from stockapp.cache import CacheKeys, RedisCache
from stockapp.dto import DashboardStatsDto
from stockapp.logging import get_logger
from stockapp.repositories import (
    CategoryRepository,
    LocationRepository,
    ProductRepository,
    StockMovementRepository,
)

logger = get_logger("dashboard")


def compute_dashboard_stats(session: Session) -> DashboardStatsDto:
    """Aggregate the dashboard numbers from the primary store."""
    products = ProductRepository(session)
    quantity, value = products.stock_totals()
    return DashboardStatsDto(
        total_products=products.count(),
        total_categories=CategoryRepository(session).count(),
        total_locations=LocationRepository(session).count(),
        total_stock_movements=StockMovementRepository(session).count(),
        low_stock_products=products.low_stock_count(),
        total_stock_quantity=quantity,
        total_stock_value=value,
    )


class DashboardService:
    def __init__(self, cache: RedisCache, ttl: Optional[int] = None):
        self.cache = cache
        self.ttl = ttl

    def get_stats(self, session: Session) -> DashboardStatsDto:
        cached = self.cache.get_json(CacheKeys.DASHBOARD_STATS)
        if cached is not None:
            try:
                return DashboardStatsDto.model_validate(cached)
            except ValidationError as e:
                logger.warning("cache_entry_invalid", key=CacheKeys.DASHBOARD_STATS, error=str(e))

        stats = compute_dashboard_stats(session)
        self.cache.set_json(CacheKeys.DASHBOARD_STATS, stats.model_dump(mode="json"), ttl=self.ttl)
        return stats


__all__ = ["DashboardService", "compute_dashboard_stats"]
