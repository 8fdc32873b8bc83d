"""
Category and location write operations.

Changes are broadcast but not pushed into product documents; indexed
products keep the old category or location name until a reindex.
"""

from typing import Optional

from sqlalchemy.orm import Session

from stockapp.dto import CategoryDto, LocationDto
from stockapp.exceptions import EntityNotFoundError, InvalidInputError
from stockapp.logging import get_logger
from stockapp.models import Product, utcnow
from stockapp.notifications import ChangeNotifier, Events, post_commit_hooks
from stockapp.repositories import CategoryRepository, LocationRepository

from .dashboard_service import compute_dashboard_stats

logger = get_logger("services.catalog")


def _clean_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise InvalidInputError("Name cannot be empty")
    return name


class CategoryService:
    def __init__(self, session: Session, notifier: ChangeNotifier):
        self.session = session
        self.notifier = notifier
        self.repo = CategoryRepository(session)

    def _queue(self, event_name: str, payload: CategoryDto | int) -> None:
        hooks = post_commit_hooks(self.session)
        hooks.add("category_changed", self.notifier.category_changed, event_name, payload)
        hooks.add("dashboard_changed", self.notifier.dashboard_changed, compute_dashboard_stats(self.session))

    def list_all(self) -> list[CategoryDto]:
        return self.repo.list_dtos()

    def get(self, category_id: int) -> CategoryDto:
        category = self.repo.get_by_id(category_id)
        if category is None:
            raise EntityNotFoundError("Category", category_id)
        return CategoryDto.model_validate(category)

    def create(self, name: str) -> CategoryDto:
        category = self.repo.create(name=_clean_name(name), created_at=utcnow())
        dto = CategoryDto.model_validate(category)
        self._queue(Events.CATEGORY_CREATED, dto)
        self.session.commit()
        logger.info("category_created", category_id=dto.id)
        return dto

    def update(self, category_id: int, name: str) -> CategoryDto:
        category = self.repo.update(category_id, name=_clean_name(name), updated_at=utcnow())
        if category is None:
            raise EntityNotFoundError("Category", category_id)
        dto = CategoryDto.model_validate(category)
        self._queue(Events.CATEGORY_UPDATED, dto)
        self.session.commit()
        logger.info("category_updated", category_id=category_id)
        return dto

    def delete(self, category_id: int) -> None:
        """
        Raises:
            EntityNotFoundError: Category does not exist
            InvalidInputError: Products still belong to the category
        """
        if not self.repo.exists(category_id):
            raise EntityNotFoundError("Category", category_id)
        if self.repo.has_products(category_id):
            raise InvalidInputError("Category still has products and cannot be deleted")

        self.repo.delete(category_id)
        self._queue(Events.CATEGORY_DELETED, category_id)
        self.session.commit()
        logger.info("category_deleted", category_id=category_id)


class LocationService:
    def __init__(self, session: Session, notifier: ChangeNotifier):
        self.session = session
        self.notifier = notifier
        self.repo = LocationRepository(session)

    def _queue(self, event_name: str, payload: LocationDto | int) -> None:
        hooks = post_commit_hooks(self.session)
        hooks.add("location_changed", self.notifier.location_changed, event_name, payload)
        hooks.add("dashboard_changed", self.notifier.dashboard_changed, compute_dashboard_stats(self.session))

    def list_all(self) -> list[LocationDto]:
        return self.repo.list_dtos()

    def get(self, location_id: int) -> LocationDto:
        location = self.repo.get_by_id(location_id)
        if location is None:
            raise EntityNotFoundError("Location", location_id)
        return LocationDto.model_validate(location)

    def create(self, name: str, description: Optional[str] = None) -> LocationDto:
        location = self.repo.create(name=_clean_name(name), description=description, created_at=utcnow())
        dto = LocationDto.model_validate(location)
        self._queue(Events.LOCATION_CREATED, dto)
        self.session.commit()
        logger.info("location_created", location_id=dto.id)
        return dto

    def update(self, location_id: int, name: str, description: Optional[str] = None) -> LocationDto:
        location = self.repo.update(
            location_id, name=_clean_name(name), description=description, updated_at=utcnow()
        )
        if location is None:
            raise EntityNotFoundError("Location", location_id)
        dto = LocationDto.model_validate(location)
        self._queue(Events.LOCATION_UPDATED, dto)
        self.session.commit()
        logger.info("location_updated", location_id=location_id)
        return dto

    def delete(self, location_id: int) -> None:
        """Delete a location; its products are left without one."""
        if not self.repo.exists(location_id):
            raise EntityNotFoundError("Location", location_id)

        detached = (
            self.session.query(Product)
            .filter(Product.location_id == location_id)
            .update({Product.location_id: None}, synchronize_session="fetch")
        )
        self.repo.delete(location_id)
        self._queue(Events.LOCATION_DELETED, location_id)
        self.session.commit()
        logger.info("location_deleted", location_id=location_id, detached_products=detached)


__all__ = ["CategoryService", "LocationService"]
