"""
Product write operations.

Each write commits the primary store first. Search indexing, broadcasts
and the dashboard refresh are queued as post-commit hooks, so they run
after the commit and cannot undo it.
"""

from typing import Any, Optional

from sqlalchemy.orm import Session

from stockapp.dto import ProductDto
from stockapp.exceptions import EntityNotFoundError, InvalidInputError
from stockapp.logging import get_logger
from stockapp.models import Category, Location, StockMovement, StockMovementType, utcnow
from stockapp.notifications import ChangeNotifier, post_commit_hooks
from stockapp.repositories import (
    ProductAttributeRepository,
    ProductRepository,
    StockMovementRepository,
)

from .dashboard_service import compute_dashboard_stats

logger = get_logger("services.product")

INITIAL_MOVEMENT_DESCRIPTION = "Initial stock"

UPDATABLE_FIELDS = {
    "name",
    "description",
    "low_stock_threshold",
    "category_id",
    "location_id",
    "current_purchase_price",
    "current_sale_price",
    "image_path",
}


def _validate_price(field: str, value: float) -> None:
    if value is None or value <= 0:
        raise InvalidInputError(f"{field} must be greater than zero")


class ProductService:
    def __init__(self, session: Session, notifier: ChangeNotifier):
        self.session = session
        self.notifier = notifier
        self.repo = ProductRepository(session)

    def _require_category(self, category_id: int) -> None:
        if self.session.get(Category, category_id) is None:
            raise EntityNotFoundError("Category", category_id)

    def _require_location(self, location_id: Optional[int]) -> None:
        if location_id is not None and self.session.get(Location, location_id) is None:
            raise EntityNotFoundError("Location", location_id)

    def _queue_dashboard_refresh(self) -> None:
        stats = compute_dashboard_stats(self.session)
        post_commit_hooks(self.session).add("dashboard_changed", self.notifier.dashboard_changed, stats)

    def get(self, product_id: int) -> ProductDto:
        dto = self.repo.get_dto(product_id)
        if dto is None:
            raise EntityNotFoundError("Product", product_id)
        return dto

    def create(
        self,
        name: str,
        category_id: int,
        current_purchase_price: float,
        current_sale_price: float,
        description: str = "",
        stock_quantity: int = 0,
        low_stock_threshold: int = 5,
        location_id: Optional[int] = None,
        image_path: Optional[str] = None,
    ) -> ProductDto:
        """
        Create a product with a generated stock code.

        A positive starting quantity is recorded as an incoming stock
        movement priced at the purchase price.

        Raises:
            InvalidInputError: A price is zero or negative
            EntityNotFoundError: Category or location does not exist
        """
        _validate_price("Purchase price", current_purchase_price)
        _validate_price("Sale price", current_sale_price)
        if stock_quantity < 0:
            raise InvalidInputError("Stock quantity cannot be negative")
        self._require_category(category_id)
        self._require_location(location_id)

        product = self.repo.create(
            name=name,
            stock_code=self.repo.generate_stock_code(),
            description=description or "",
            stock_quantity=stock_quantity,
            low_stock_threshold=low_stock_threshold,
            category_id=category_id,
            location_id=location_id,
            current_purchase_price=current_purchase_price,
            current_sale_price=current_sale_price,
            image_path=image_path,
            created_at=utcnow(),
        )

        initial_movement = None
        if stock_quantity > 0:
            initial_movement = StockMovement(
                product_id=product.id,
                category_id=category_id,
                type=StockMovementType.IN,
                quantity=stock_quantity,
                unit_price=current_purchase_price,
                description=INITIAL_MOVEMENT_DESCRIPTION,
                created_at=utcnow(),
            )
            self.session.add(initial_movement)
            self.session.flush()

        dto = self.get(product.id)
        hooks = post_commit_hooks(self.session)
        hooks.add("product_saved", self.notifier.product_saved, dto, created=True)
        if initial_movement is not None:
            movement_dto = StockMovementRepository(self.session).get_dto(initial_movement.id)
            hooks.add("stock_movement_saved", self.notifier.stock_movement_saved, movement_dto)
        self._queue_dashboard_refresh()

        self.session.commit()
        logger.info("product_created", product_id=dto.id, stock_code=dto.stock_code)
        return dto

    def update(self, product_id: int, **changes: Any) -> ProductDto:
        """
        Apply a partial update and stamp ``updated_at``.

        Stock quantity is not updatable here; it changes through stock movements.
        """
        product = self.repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError("Product", product_id)

        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise InvalidInputError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        for price_field, label in (
            ("current_purchase_price", "Purchase price"),
            ("current_sale_price", "Sale price"),
        ):
            if price_field in changes:
                _validate_price(label, changes[price_field])
        if "category_id" in changes:
            self._require_category(changes["category_id"])
        if "location_id" in changes:
            self._require_location(changes["location_id"])

        for field, value in changes.items():
            setattr(product, field, value)
        product.updated_at = utcnow()
        self.session.flush()
        # reload relationships so the read model carries the new names
        self.session.expire(product, ["category", "location"])

        dto = self.get(product_id)
        hooks = post_commit_hooks(self.session)
        hooks.add("product_saved", self.notifier.product_saved, dto, created=False)
        self._queue_dashboard_refresh()

        self.session.commit()
        logger.info("product_updated", product_id=product_id, fields=sorted(changes))
        return dto

    def delete(self, product_id: int) -> None:
        """Delete a product together with its stock movements and attributes."""
        product = self.repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError("Product", product_id)

        attribute_ids = ProductAttributeRepository(self.session).ids_for_product(product_id)
        movement_ids = StockMovementRepository(self.session).ids_for_product(product_id)
        # movements and attributes go with the product through the cascade
        self.session.delete(product)
        self.session.flush()

        hooks = post_commit_hooks(self.session)
        hooks.add(
            "product_deleted", self.notifier.product_deleted, product_id, attribute_ids, movement_ids
        )
        self._queue_dashboard_refresh()

        self.session.commit()
        logger.info(
            "product_deleted",
            product_id=product_id,
            attributes=len(attribute_ids),
            movements=len(movement_ids),
        )

    def list_all(self) -> list[ProductDto]:
        return self.repo.list_all_dtos()


__all__ = ["ProductService"]
