"""
Workshop Exceptions.

All workshop errors derive from ShopError for consistent handling.
Each subclass carries a fixed code; the details travel as keyword arguments.
"""

from typing import Any


class ShopError(Exception):
    """
    Base exception for all Workshop errors.

    Usage:
        raise ShopError('INVALID_STATUS', current='completed', expected='pending')

    Attributes:
        code: Error code (INVALID_INPUT, INSUFFICIENT_STOCK, etc.)
        details: Additional context as keyword arguments
    """

    default_code = "SHOP_ERROR"

    def __init__(self, code: str | None = None, **details: Any):
        self.code = code or self.default_code
        self.details = details
        message = f"{self.code}: {details}" if details else self.code
        super().__init__(message)

    def as_dict(self) -> dict:
        """Return error as dictionary for API responses."""
        return {"code": self.code, **self.details}

    def __str__(self) -> str:
        name = type(self).__name__
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{name}({self.code}: {details_str})"
        return f"{name}({self.code})"


class ValidationError(ShopError):
    """Missing or malformed input."""

    default_code = "INVALID_INPUT"


class NotFoundError(ShopError):
    """Unknown item, ingredient, order or worker."""

    default_code = "NOT_FOUND"


class InsufficientStockError(ShopError):
    """
    Not enough stock to deduct.

    Always raised with item, required and available details.
    """

    default_code = "INSUFFICIENT_STOCK"

    def __init__(self, item: str, required: int, available: int, **details: Any):
        super().__init__(
            None, item=item, required=required, available=available, **details
        )

    @property
    def item(self) -> str:
        return self.details["item"]

    @property
    def required(self) -> int:
        return self.details["required"]

    @property
    def available(self) -> int:
        return self.details["available"]

    @property
    def shortage(self) -> int:
        return self.required - self.available


class NoRecipeError(ShopError):
    """Assembly or manufacture attempted on an item without a recipe."""

    default_code = "NO_RECIPE"


class AlreadySettledError(ShopError):
    """Settlement or cancellation attempted on a terminal work order."""

    default_code = "ALREADY_SETTLED"


class AuthorizationError(ShopError):
    """The actor's role does not allow the action."""

    default_code = "FORBIDDEN"


class ImmutableEntryError(ShopError):
    """Ledger entries are write-once."""

    default_code = "IMMUTABLE_ENTRY"


# Common detail keys
# item: item name (snapshot) the error refers to
# required / available: integer quantities for stock shortages
# order: work order code
# status: current work order status
# role: actor role refused by an authorization check
