"""
SQLAlchemy models for StockApp.

Single source of truth for all primary-store entities.

Usage:
    from stockapp.models import Product, Category, StockMovement
"""

from .base import Base, utcnow
from .catalog import Category, Location
from .product import Product, ProductAttribute
from .stock_movement import StockMovement, StockMovementType

__all__ = [
    # Base
    "Base",
    "utcnow",
    # Catalog
    "Category",
    "Location",
    # Product
    "Product",
    "ProductAttribute",
    # Stock
    "StockMovement",
    "StockMovementType",
]
