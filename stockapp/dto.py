"""
Denormalized read models.

These are what list endpoints return, what the cache stores and what the
search index holds as documents: each one carries the joined display
names (category name, location name, product name) so no further join is
needed at read time.
"""

import math
from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field

from stockapp.models import StockMovementType

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of a paginated result."""

    items: List[T] = Field(default_factory=list)
    total_count: int = 0
    page: int = 1
    page_size: int = 10

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total_count / self.page_size)

    @classmethod
    def empty(cls, page: int, page_size: int) -> "Page[T]":
        return cls(items=[], total_count=0, page=page, page_size=page_size)


class CategoryDto(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class LocationDto(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class ProductDto(BaseModel):
    id: int
    name: str
    stock_code: str
    description: str = ""
    stock_quantity: int = 0
    low_stock_threshold: int = 5
    category_id: int
    category_name: str = ""
    location_id: Optional[int] = None
    location_name: Optional[str] = None
    image_path: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    current_purchase_price: float = 0.0
    current_sale_price: float = 0.0


class StockMovementDto(BaseModel):
    id: int
    product_id: int
    product_name: str = ""
    category_id: int
    category_name: str = ""
    type: StockMovementType
    quantity: int
    unit_price: Optional[float] = None
    description: Optional[str] = None
    created_at: datetime
    current_stock_quantity: int = 0
    low_stock_threshold: int = 5

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_value(self) -> float:
        return round((self.unit_price or 0.0) * self.quantity, 2)


class ProductAttributeDto(BaseModel):
    id: int
    product_id: int
    product_name: str = ""
    key: str
    value: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class DashboardStatsDto(BaseModel):
    total_products: int = 0
    total_categories: int = 0
    total_locations: int = 0
    total_stock_movements: int = 0
    low_stock_products: int = 0
    total_stock_quantity: int = 0
    total_stock_value: float = 0.0


def to_document(dto: BaseModel) -> Dict[str, Any]:
    """Serialize a read model into the JSON body stored in the search index."""
    return dto.model_dump(mode="json")


__all__ = [
    "Page",
    "CategoryDto",
    "LocationDto",
    "ProductDto",
    "StockMovementDto",
    "ProductAttributeDto",
    "DashboardStatsDto",
    "to_document",
]
