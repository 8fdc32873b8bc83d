"""Base repository class with common CRUD operations."""

from typing import Generic, TypeVar

from sqlalchemy import func
from sqlalchemy.orm import Session

from stockapp.db import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """
    Base repository providing common CRUD operations.

    Usage:
        class CategoryRepository(BaseRepository[Category]):
            model = Category

        repo = CategoryRepository(session)
        category = repo.get_by_id(1)
    """

    model: type[T]

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, id: int) -> T | None:
        """Get a single record by ID."""
        return self.session.get(self.model, id)

    def get_all(self, limit: int = 100, offset: int = 0) -> list[T]:
        """Get all records with pagination."""
        return (
            self.session.query(self.model)
            .order_by(self.model.id)  # type: ignore[attr-defined]
            .offset(offset)
            .limit(limit)
            .all()
        )

    def create(self, **kwargs) -> T:
        """Create a new record."""
        instance = self.model(**kwargs)
        self.session.add(instance)
        self.session.flush()
        return instance

    def update(self, id: int, **kwargs) -> T | None:
        """Update an existing record."""
        instance = self.get_by_id(id)
        if instance:
            for key, value in kwargs.items():
                if hasattr(instance, key):
                    setattr(instance, key, value)
            self.session.flush()
        return instance

    def delete(self, id: int) -> bool:
        """Delete a record by ID."""
        instance = self.get_by_id(id)
        if instance:
            self.session.delete(instance)
            self.session.flush()
            return True
        return False

    def count(self, **filters) -> int:
        """Get count of records, optionally filtered."""
        query = self.session.query(func.count(self.model.id))  # type: ignore[attr-defined]
        for key, value in filters.items():
            if not hasattr(self.model, key):
                raise ValueError(f"Unknown filter key: {key}")
            query = query.filter(getattr(self.model, key) == value)
        return query.scalar() or 0

    def all_ids(self) -> list[int]:
        """Get every primary key, ascending."""
        rows = self.session.query(self.model.id).order_by(self.model.id).all()  # type: ignore[attr-defined]
        return [row[0] for row in rows]

    def exists(self, id: int) -> bool:
        """Check if a record exists."""
        result = self.session.query(
            self.session.query(self.model).filter(self.model.id == id).exists()  # type: ignore[attr-defined]
        ).scalar()
        return bool(result) if result is not None else False
