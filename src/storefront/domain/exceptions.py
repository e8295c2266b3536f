"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the application handlers and the CLI can catch them uniformly and turn
them into user-facing notifications.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or payload schema was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class CartLimitError(DomainException):
    """A cart mutation was rejected before touching the ledger."""

    title = "Cart Limit"


class OutOfStockError(CartLimitError):
    title = "Out of Stock"


class StockLimitError(CartLimitError):
    title = "Stock Limit Reached"


class PurchaseLimitError(CartLimitError):
    title = "Purchase Limit"


class NetworkError(DomainException):
    """A remote call failed.

    ``message`` is the cleaned server message when the backend sent one,
    otherwise the transport error text.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
