"""Custom exceptions for the ordering workflow."""

from typing import Optional


class OrderingError(Exception):
    """Base exception for all ordering errors."""

    status_code = 500


class ValidationError(OrderingError):
    """Raised when request input is missing or malformed."""

    status_code = 400

    def __init__(self, message: str, fields: Optional[list] = None):
        self.fields = list(fields or [])
        super().__init__(message)


class NotFoundError(OrderingError):
    """Raised when a referenced product or order does not exist."""

    status_code = 404


class StockError(OrderingError):
    """Raised when a product cannot cover the requested quantity."""

    status_code = 400

    def __init__(self, product_id: str, name: str, available: int):
        self.product_id = product_id
        self.name = name
        self.available = available
        super().__init__(f"Only {available} units available for {name}")


class TransientStoreError(OrderingError):
    """Raised when store contention persists after every retry."""

    status_code = 503

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Store busy, gave up after {attempts} attempts. Please retry.")


class PersistenceInvariantError(OrderingError):
    """Raised when persisted state contradicts what was just written."""

    status_code = 500
