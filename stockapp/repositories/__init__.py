"""
Repository pattern implementations for data access.

Repositories provide a clean abstraction over the primary store and
build the denormalized read models used by the cache and search index.

Usage:
    from stockapp.repositories import ProductRepository
    from stockapp.db import db

    with db.session() as session:
        repo = ProductRepository(session)
        page = repo.list_page(page=1, page_size=10, category_id=3)
"""

from .base import BaseRepository
from .catalog_repository import CategoryRepository, LocationRepository
from .product_attribute_repository import ProductAttributeRepository
from .product_repository import ProductRepository
from .stock_movement_repository import StockMovementRepository

__all__ = [
    "BaseRepository",
    "CategoryRepository",
    "LocationRepository",
    "ProductRepository",
    "ProductAttributeRepository",
    "StockMovementRepository",
]
