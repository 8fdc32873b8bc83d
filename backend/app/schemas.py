"""
Pydantic schemas for request and response validation.

List and detail responses reuse the read models from ``stockapp.dto``.
"""

from typing import Optional

from pydantic import BaseModel, Field

from stockapp.models import StockMovementType


class ProductCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    stock_quantity: int = Field(default=0, ge=0)
    low_stock_threshold: int = Field(default=5, ge=0)
    category_id: int
    location_id: Optional[int] = None
    current_purchase_price: float
    current_sale_price: float


class ProductUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    low_stock_threshold: Optional[int] = Field(default=None, ge=0)
    category_id: Optional[int] = None
    location_id: Optional[int] = None
    current_purchase_price: Optional[float] = None
    current_sale_price: Optional[float] = None


class StockMovementCreateRequest(BaseModel):
    product_id: int
    type: StockMovementType
    quantity: int = Field(gt=0)
    description: Optional[str] = None
    unit_price: Optional[float] = Field(default=None, ge=0)


class ProductAttributeCreateRequest(BaseModel):
    product_id: int
    key: str = Field(min_length=1, max_length=255)
    value: str = Field(min_length=1, max_length=1024)


class ProductAttributeUpdateRequest(BaseModel):
    key: str = Field(min_length=1, max_length=255)
    value: str = Field(min_length=1, max_length=1024)


class CategoryRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)


class LocationRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=512)


class DeletedResponse(BaseModel):
    id: int
    status: str = "deleted"


class ReindexResponse(BaseModel):
    message: str
    collection: str
    indexed_count: int
    failed_count: int
    errors: list[str] = Field(default_factory=list)
    total_count: int


class IndexCountsResponse(BaseModel):
    counts: dict[str, int]
