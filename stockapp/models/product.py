"""
Product-related SQLAlchemy models.
"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utcnow

if TYPE_CHECKING:
    from .catalog import Category, Location
    from .stock_movement import StockMovement


class Product(Base):
    """
    Stock-keeping product.

    Stock quantity is only changed through stock movements after creation.
    """
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    stock_code: Mapped[str] = mapped_column(String(16), unique=True, index=True)
    description: Mapped[str] = mapped_column(Text, default="")
    stock_quantity: Mapped[int] = mapped_column(Integer, default=0)
    low_stock_threshold: Mapped[int] = mapped_column(Integer, default=5)
    image_path: Mapped[Optional[str]] = mapped_column(String(512))
    current_purchase_price: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), default=0)
    current_sale_price: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id"), index=True)
    location_id: Mapped[Optional[int]] = mapped_column(ForeignKey("locations.id"), index=True)

    # Relationships
    category: Mapped["Category"] = relationship("Category", back_populates="products")
    location: Mapped[Optional["Location"]] = relationship("Location", back_populates="products")
    attributes: Mapped[List["ProductAttribute"]] = relationship(
        "ProductAttribute", back_populates="product", cascade="all, delete-orphan"
    )
    stock_movements: Mapped[List["StockMovement"]] = relationship(
        "StockMovement", back_populates="product", cascade="all, delete-orphan"
    )


class ProductAttribute(Base):
    """Free-form key/value attribute attached to a product."""
    __tablename__ = "product_attributes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="CASCADE"), index=True)
    key: Mapped[str] = mapped_column(String(255))
    value: Mapped[str] = mapped_column(String(1024))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    product: Mapped["Product"] = relationship("Product", back_populates="attributes")
