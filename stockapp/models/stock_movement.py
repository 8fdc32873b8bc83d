"""
Stock movement model.
"""

import enum
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utcnow

if TYPE_CHECKING:
    from .catalog import Category
    from .product import Product


class StockMovementType(str, enum.Enum):
    IN = "In"
    OUT = "Out"


class StockMovement(Base):
    """
    Incoming or outgoing quantity for a product.

    category_id is copied from the product when the movement is recorded.
    """
    __tablename__ = "stock_movements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="CASCADE"), index=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id"), index=True)
    type: Mapped[StockMovementType] = mapped_column(Enum(StockMovementType, name="stock_movement_type"))
    quantity: Mapped[int] = mapped_column(Integer)
    unit_price: Mapped[Optional[float]] = mapped_column(Numeric(12, 2, asdecimal=False))
    description: Mapped[Optional[str]] = mapped_column(String(1024))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)

    product: Mapped["Product"] = relationship("Product", back_populates="stock_movements")
    category: Mapped["Category"] = relationship("Category")
