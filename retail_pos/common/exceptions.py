"""Domain errors raised by the stock, order and reporting services."""

from typing import List, Optional


class InventoryError(Exception):
    """Base class for every error the services raise on purpose."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class ValidationError(InventoryError, ValueError):
    """Missing required field, non-positive quantity or other bad input."""


class InsufficientStockError(InventoryError):
    """Requested quantity exceeds what is on hand."""

    def __init__(self, item_name: str, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for {item_name}: only {available} available, {requested} requested"
        )
        self.item_name = item_name
        self.available = available
        self.requested = requested


class NotFoundError(InventoryError):
    """Referenced product, variant, order or contact does not exist."""


class StoreError(InventoryError):
    """The underlying persistence call failed."""
