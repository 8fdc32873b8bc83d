"""
Stock movement write operations.
"""

from typing import Optional

from sqlalchemy.orm import Session

from stockapp.dto import StockMovementDto
from stockapp.exceptions import EntityNotFoundError, InsufficientStockError, InvalidInputError
from stockapp.logging import get_logger
from stockapp.models import Product, StockMovement, StockMovementType, utcnow
from stockapp.notifications import ChangeNotifier, post_commit_hooks
from stockapp.repositories import ProductRepository, StockMovementRepository

from .dashboard_service import compute_dashboard_stats

logger = get_logger("services.stock_movement")


class StockMovementService:
    def __init__(self, session: Session, notifier: ChangeNotifier):
        self.session = session
        self.notifier = notifier
        self.repo = StockMovementRepository(session)

    def create(
        self,
        product_id: int,
        movement_type: StockMovementType,
        quantity: int,
        description: Optional[str] = None,
        unit_price: Optional[float] = None,
    ) -> StockMovementDto:
        """
        Record a movement and apply it to the product's stock.

        Raises:
            InvalidInputError: Quantity is not positive
            EntityNotFoundError: Product does not exist
            InsufficientStockError: An outgoing quantity exceeds the stock on hand
        """
        if quantity <= 0:
            raise InvalidInputError("Quantity must be greater than zero")

        product = self.session.get(Product, product_id)
        if product is None:
            raise EntityNotFoundError("Product", product_id)

        if movement_type == StockMovementType.OUT and product.stock_quantity < quantity:
            raise InsufficientStockError(product.stock_quantity, quantity)

        movement = StockMovement(
            product_id=product_id,
            category_id=product.category_id,
            type=movement_type,
            quantity=quantity,
            unit_price=unit_price,
            description=description,
            created_at=utcnow(),
        )
        self.session.add(movement)

        if movement_type == StockMovementType.IN:
            product.stock_quantity += quantity
        else:
            product.stock_quantity -= quantity
        product.updated_at = utcnow()
        self.session.flush()

        dto = self.repo.get_dto(movement.id)
        product_dto = ProductRepository(self.session).get_dto(product_id)
        stats = compute_dashboard_stats(self.session)

        hooks = post_commit_hooks(self.session)
        hooks.add("stock_movement_saved", self.notifier.stock_movement_saved, dto)
        hooks.add("product_saved", self.notifier.product_saved, product_dto, created=False)
        hooks.add("dashboard_changed", self.notifier.dashboard_changed, stats)

        self.session.commit()
        logger.info(
            "stock_movement_created",
            movement_id=movement.id,
            product_id=product_id,
            type=movement_type.value,
            quantity=quantity,
            stock_quantity=product.stock_quantity,
        )
        return dto

    def list_all(self) -> list[StockMovementDto]:
        return self.repo.list_all_dtos()
