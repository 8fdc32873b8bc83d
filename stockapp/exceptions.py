"""
Exception hierarchy for StockApp.

Cache and search failures are handled inside their components and never
surface here; these are the errors a caller is expected to see.
"""


class StockAppError(Exception):
    """Base class for all StockApp errors."""


class EntityNotFoundError(StockAppError):
    """Raised when a primary-store entity does not exist."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with id {entity_id} not found")


class InsufficientStockError(StockAppError):
    """Raised when an outgoing stock movement exceeds the available quantity."""

    def __init__(self, available: int, requested: int):
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock: available {available}, requested {requested}"
        )


class InvalidInputError(StockAppError):
    """Raised when a write is rejected by a business rule (bad price, blank name, ...)."""


class SearchUnavailableError(StockAppError):
    """Raised when an administrative search operation needs a search client that is not configured."""


class IndexSchemaError(StockAppError):
    """Raised when a search collection cannot be created with its mapping."""

    def __init__(self, collection: str, reason: str):
        self.collection = collection
        self.reason = reason
        super().__init__(
            f"Failed to create search collection '{collection}': {reason}. "
            "Check that the search engine has the required analysis plugins."
        )


class OperationCancelledError(StockAppError):
    """Raised when a read operation is cancelled by its caller."""


__all__ = [
    "StockAppError",
    "EntityNotFoundError",
    "InsufficientStockError",
    "InvalidInputError",
    "SearchUnavailableError",
    "IndexSchemaError",
    "OperationCancelledError",
]
