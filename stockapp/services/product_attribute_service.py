"""
Product attribute write operations.
"""

from sqlalchemy.orm import Session

from stockapp.dto import ProductAttributeDto
from stockapp.exceptions import EntityNotFoundError, InvalidInputError
from stockapp.logging import get_logger
from stockapp.models import Product, utcnow
from stockapp.notifications import ChangeNotifier, post_commit_hooks
from stockapp.repositories import ProductAttributeRepository

from .dashboard_service import compute_dashboard_stats

logger = get_logger("services.product_attribute")


def _clean(label: str, value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise InvalidInputError(f"{label} cannot be empty")
    return value


class ProductAttributeService:
    def __init__(self, session: Session, notifier: ChangeNotifier):
        self.session = session
        self.notifier = notifier
        self.repo = ProductAttributeRepository(session)

    def get(self, attribute_id: int) -> ProductAttributeDto:
        dto = self.repo.get_dto(attribute_id)
        if dto is None:
            raise EntityNotFoundError("ProductAttribute", attribute_id)
        return dto

    def create(self, product_id: int, key: str, value: str) -> ProductAttributeDto:
        if self.session.get(Product, product_id) is None:
            raise EntityNotFoundError("Product", product_id)

        attribute = self.repo.create(
            product_id=product_id,
            key=_clean("Key", key),
            value=_clean("Value", value),
            created_at=utcnow(),
        )
        dto = self.get(attribute.id)

        hooks = post_commit_hooks(self.session)
        hooks.add("attribute_saved", self.notifier.attribute_saved, dto, created=True)
        hooks.add("dashboard_changed", self.notifier.dashboard_changed, compute_dashboard_stats(self.session))

        self.session.commit()
        logger.info("product_attribute_created", attribute_id=dto.id, product_id=product_id)
        return dto

    def update(self, attribute_id: int, key: str, value: str) -> ProductAttributeDto:
        attribute = self.repo.get_by_id(attribute_id)
        if attribute is None:
            raise EntityNotFoundError("ProductAttribute", attribute_id)

        attribute.key = _clean("Key", key)
        attribute.value = _clean("Value", value)
        attribute.updated_at = utcnow()
        self.session.flush()
        dto = self.get(attribute_id)

        hooks = post_commit_hooks(self.session)
        hooks.add("attribute_saved", self.notifier.attribute_saved, dto, created=False)
        hooks.add("dashboard_changed", self.notifier.dashboard_changed, compute_dashboard_stats(self.session))

        self.session.commit()
        logger.info("product_attribute_updated", attribute_id=attribute_id)
        return dto

    def delete(self, attribute_id: int) -> None:
        if not self.repo.delete(attribute_id):
            raise EntityNotFoundError("ProductAttribute", attribute_id)

        hooks = post_commit_hooks(self.session)
        hooks.add("attribute_deleted", self.notifier.attribute_deleted, attribute_id)
        hooks.add("dashboard_changed", self.notifier.dashboard_changed, compute_dashboard_stats(self.session))

        self.session.commit()
        logger.info("product_attribute_deleted", attribute_id=attribute_id)

    def list_all(self) -> list[ProductAttributeDto]:
        return self.repo.list_all_dtos()
