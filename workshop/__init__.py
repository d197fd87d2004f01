"""
Django Workshop - Inventory ledger and work-order engine.

Tracks stock of raw materials and finished goods, builds finished goods
from recipes, and hands material to workers through work orders that end
as produced or sold.

Usage:
    from workshop import shop, ShopError

    order = shop.issue(rahul, widget, 10, WorkOrderKind.ASSEMBLY)

    try:
        shop.settle(order, proof={"photo": photo_b64})
    except ShopError as e:
        print(e.as_dict())

Every stock change writes exactly one ledger entry.
"""

from workshop.exceptions import (
    AlreadySettledError,
    AuthorizationError,
    InsufficientStockError,
    NoRecipeError,
    NotFoundError,
    ShopError,
    ValidationError,
)


def __getattr__(name):
    """Lazy import to avoid AppRegistryNotReady errors."""
    if name in ("shop", "Shop"):
        from workshop.service import Shop

        return Shop
    if name in ("Requirement", "Proof", "DashboardSummary"):
        from workshop import results

        return getattr(results, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "shop",
    "Shop",
    "ShopError",
    "ValidationError",
    "NotFoundError",
    "InsufficientStockError",
    "NoRecipeError",
    "AlreadySettledError",
    "AuthorizationError",
    "Requirement",
    "Proof",
    "DashboardSummary",
]
__version__ = "0.1.0"
