"""
Cache key management.

Centralized cache key definitions. List keys are written by the read path
and rebuilt with the same functions by the sweeper, so the format must
stay stable within a deployment.
"""

from datetime import date
from typing import Optional


class CacheKeys:
    """
    Centralized cache key definitions.

    Naming convention: {collection}:list:{param}:{value}:...

    Examples:
        - products:list:page:1:size:10:cat:0:loc:0:search:
        - stockmovements:list:page:2:size:20:search:vida:start:2024-01-01:end:
        - dashboard:stats
    """

    PREFIX_PRODUCTS = "products"
    PREFIX_STOCK_MOVEMENTS = "stockmovements"
    PREFIX_PRODUCT_ATTRIBUTES = "productattributes"

    DASHBOARD_STATS = "dashboard:stats"

    @staticmethod
    def products_list(
        page: int,
        page_size: int,
        category_id: Optional[int] = None,
        location_id: Optional[int] = None,
        search_term: Optional[str] = None,
    ) -> str:
        """Cache key for one page of the product list."""
        return (
            f"products:list:page:{page}:size:{page_size}"
            f":cat:{category_id or 0}:loc:{location_id or 0}"
            f":search:{search_term or ''}"
        )

    @staticmethod
    def stock_movements_list(
        page: int,
        page_size: int,
        search_term: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> str:
        """Cache key for one page of the stock movement list."""
        start = start_date.isoformat() if start_date else ""
        end = end_date.isoformat() if end_date else ""
        return (
            f"stockmovements:list:page:{page}:size:{page_size}"
            f":search:{search_term or ''}:start:{start}:end:{end}"
        )

    @staticmethod
    def product_attributes_list(
        page: int,
        page_size: int,
        product_id: Optional[int] = None,
        search_key: Optional[str] = None,
    ) -> str:
        """Cache key for one page of the product attribute list."""
        return (
            f"productattributes:list:page:{page}:size:{page_size}"
            f":product:{product_id or 0}:search:{search_key or ''}"
        )
