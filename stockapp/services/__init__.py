"""
Application services.

Read side: the cache-aside read path and dashboard stats.
Write side: per-entity services that commit and queue post-commit
side effects, plus the search reindex.
"""

from .catalog_service import CategoryService, LocationService
from .dashboard_service import DashboardService, compute_dashboard_stats
from .product_attribute_service import ProductAttributeService
from .product_service import ProductService
from .read_path import ReadPathOrchestrator, check_cancelled
from .reindex_service import ReindexService, ReindexSummary
from .stock_movement_service import StockMovementService

__all__ = [
    "ReadPathOrchestrator",
    "check_cancelled",
    "DashboardService",
    "compute_dashboard_stats",
    "ProductService",
    "StockMovementService",
    "ProductAttributeService",
    "CategoryService",
    "LocationService",
    "ReindexService",
    "ReindexSummary",
]
