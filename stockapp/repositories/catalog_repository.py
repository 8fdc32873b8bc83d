"""
Category and location repositories.
"""

from stockapp.dto import CategoryDto, LocationDto
from stockapp.models import Category, Location, Product

from .base import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    model = Category

    def list_dtos(self) -> list[CategoryDto]:
        categories = self.session.query(Category).order_by(Category.name).all()
        return [CategoryDto.model_validate(c) for c in categories]

    def has_products(self, category_id: int) -> bool:
        query = self.session.query(Product).filter(Product.category_id == category_id)
        return bool(self.session.query(query.exists()).scalar())


class LocationRepository(BaseRepository[Location]):
    model = Location

    def list_dtos(self) -> list[LocationDto]:
        locations = self.session.query(Location).order_by(Location.name).all()
        return [LocationDto.model_validate(loc) for loc in locations]
