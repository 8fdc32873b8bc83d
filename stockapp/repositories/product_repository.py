"""
Product repository producing denormalized product read models.
"""

import random
import string

from sqlalchemy import func, or_
from sqlalchemy.orm import joinedload

from stockapp.dto import Page, ProductDto
from stockapp.models import Location, Product

from .base import BaseRepository

STOCK_CODE_LETTERS = 3
STOCK_CODE_DIGITS = 3


def product_to_dto(product: Product) -> ProductDto:
    """Build the read model for a product with its category and location loaded."""
    return ProductDto(
        id=product.id,
        name=product.name,
        stock_code=product.stock_code,
        description=product.description or "",
        stock_quantity=product.stock_quantity,
        low_stock_threshold=product.low_stock_threshold,
        category_id=product.category_id,
        category_name=product.category.name if product.category else "",
        location_id=product.location_id,
        location_name=product.location.name if product.location else None,
        image_path=product.image_path,
        created_at=product.created_at,
        updated_at=product.updated_at,
        current_purchase_price=float(product.current_purchase_price or 0),
        current_sale_price=float(product.current_sale_price or 0),
    )


class ProductRepository(BaseRepository[Product]):
    """
    Repository for products.

    List ordering puts the most recently updated or created product first.
    """

    model = Product

    def _base_query(self):
        return self.session.query(Product).options(
            joinedload(Product.category),
            joinedload(Product.location),
        )

    def list_page(
        self,
        page: int = 1,
        page_size: int = 10,
        category_id: int | None = None,
        location_id: int | None = None,
        search_term: str | None = None,
    ) -> Page[ProductDto]:
        """
        Get one page of products.

        Args:
            page: 1-based page number
            page_size: Items per page
            category_id: Only products in this category
            location_id: Only products at this location
            search_term: Case-insensitive substring over name, description,
                stock code and location name

        Returns:
            Page of ProductDto
        """
        conditions = []
        if category_id is not None:
            conditions.append(Product.category_id == category_id)
        if location_id is not None:
            conditions.append(Product.location_id == location_id)
        if search_term and search_term.strip():
            term = search_term.strip().lower()
            conditions.append(
                or_(
                    func.lower(Product.name).contains(term, autoescape=True),
                    func.lower(Product.description).contains(term, autoescape=True),
                    func.lower(Product.stock_code).contains(term, autoescape=True),
                    Product.location.has(func.lower(Location.name).contains(term, autoescape=True)),
                )
            )

        total = self.session.query(func.count(Product.id)).filter(*conditions).scalar() or 0

        products = (
            self._base_query()
            .filter(*conditions)
            .order_by(func.coalesce(Product.updated_at, Product.created_at).desc(), Product.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )

        return Page[ProductDto](
            items=[product_to_dto(p) for p in products],
            total_count=total,
            page=page,
            page_size=page_size,
        )

    def get_dto(self, product_id: int) -> ProductDto | None:
        product = self._base_query().filter(Product.id == product_id).first()
        return product_to_dto(product) if product else None

    def list_all_dtos(self) -> list[ProductDto]:
        """Every product as a read model, for reindexing."""
        return [product_to_dto(p) for p in self._base_query().order_by(Product.id).all()]

    def stock_code_exists(self, stock_code: str) -> bool:
        query = self.session.query(Product).filter(Product.stock_code == stock_code)
        return bool(self.session.query(query.exists()).scalar())

    def generate_stock_code(self, rng: random.Random | None = None) -> str:
        """Generate an unused stock code shaped like ``ABC433``."""
        rng = rng or random.Random()
        while True:
            code = "".join(rng.choice(string.ascii_uppercase) for _ in range(STOCK_CODE_LETTERS))
            code += "".join(rng.choice(string.digits) for _ in range(STOCK_CODE_DIGITS))
            if not self.stock_code_exists(code):
                return code

    def low_stock_count(self) -> int:
        return (
            self.session.query(func.count(Product.id))
            .filter(Product.stock_quantity <= Product.low_stock_threshold)
            .scalar()
            or 0
        )

    def stock_totals(self) -> tuple[int, float]:
        """Total units in stock and their value at current purchase price."""
        quantity, value = self.session.query(
            func.coalesce(func.sum(Product.stock_quantity), 0),
            func.coalesce(func.sum(Product.stock_quantity * Product.current_purchase_price), 0),
        ).one()
        return int(quantity), round(float(value), 2)
