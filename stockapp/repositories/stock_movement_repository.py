"""
Stock movement repository.
"""

from datetime import date, datetime, time, timedelta

from sqlalchemy import func, or_
from sqlalchemy.orm import joinedload

from stockapp.dto import Page, StockMovementDto
from stockapp.models import Product, StockMovement, StockMovementType

from .base import BaseRepository


def stock_movement_to_dto(movement: StockMovement) -> StockMovementDto:
    product = movement.product
    return StockMovementDto(
        id=movement.id,
        product_id=movement.product_id,
        product_name=product.name if product else "",
        category_id=movement.category_id,
        category_name=movement.category.name if movement.category else "",
        type=movement.type,
        quantity=movement.quantity,
        unit_price=float(movement.unit_price) if movement.unit_price is not None else None,
        description=movement.description,
        created_at=movement.created_at,
        current_stock_quantity=product.stock_quantity if product else 0,
        low_stock_threshold=product.low_stock_threshold if product else 5,
    )


class StockMovementRepository(BaseRepository[StockMovement]):
    """Repository for stock movements, newest first."""

    model = StockMovement

    def _base_query(self):
        return self.session.query(StockMovement).options(
            joinedload(StockMovement.product),
            joinedload(StockMovement.category),
        )

    def list_page(
        self,
        page: int = 1,
        page_size: int = 10,
        product_id: int | None = None,
        category_id: int | None = None,
        movement_type: StockMovementType | None = None,
        search_term: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Page[StockMovementDto]:
        """
        Get one page of stock movements.

        The end date is inclusive up to the end of that day.
        """
        conditions = []
        if product_id is not None:
            conditions.append(StockMovement.product_id == product_id)
        if category_id is not None:
            conditions.append(StockMovement.category_id == category_id)
        if movement_type is not None:
            conditions.append(StockMovement.type == movement_type)
        if start_date is not None:
            conditions.append(StockMovement.created_at >= datetime.combine(start_date, time.min))
        if end_date is not None:
            conditions.append(
                StockMovement.created_at < datetime.combine(end_date + timedelta(days=1), time.min)
            )
        if search_term and search_term.strip():
            term = search_term.strip().lower()
            conditions.append(
                or_(
                    StockMovement.product.has(func.lower(Product.name).contains(term, autoescape=True)),
                    func.lower(StockMovement.description).contains(term, autoescape=True),
                )
            )

        total = self.session.query(func.count(StockMovement.id)).filter(*conditions).scalar() or 0

        movements = (
            self._base_query()
            .filter(*conditions)
            .order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )

        return Page[StockMovementDto](
            items=[stock_movement_to_dto(m) for m in movements],
            total_count=total,
            page=page,
            page_size=page_size,
        )

    def get_dto(self, movement_id: int) -> StockMovementDto | None:
        movement = self._base_query().filter(StockMovement.id == movement_id).first()
        return stock_movement_to_dto(movement) if movement else None

    def list_all_dtos(self) -> list[StockMovementDto]:
        movements = self._base_query().order_by(StockMovement.id).all()
        return [stock_movement_to_dto(m) for m in movements]

    def ids_for_product(self, product_id: int) -> list[int]:
        rows = (
            self.session.query(StockMovement.id)
            .filter(StockMovement.product_id == product_id)
            .all()
        )
        return [row[0] for row in rows]
