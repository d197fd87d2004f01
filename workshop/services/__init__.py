"""
Workshop Services.

Business logic that spans more than one model:
- catalog: create items, edit recipes, list items
- ledger: record, query, delete ledger entries
- stock: the single path that changes item quantities
- recipes: expand recipes and check ingredient stock
- orders: issue, settle and cancel work orders (kinds: per-kind handlers)
- manufacturing: immediate in-house builds
"""

from workshop.services.catalog import ShopCatalog
from workshop.services.ledger import ShopLedger
from workshop.services.manufacturing import ShopManufacturing
from workshop.services.orders import ShopOrders
from workshop.services.recipes import ShopRecipes
from workshop.services.stock import ShopStock

__all__ = [
    "ShopCatalog",
    "ShopLedger",
    "ShopManufacturing",
    "ShopOrders",
    "ShopRecipes",
    "ShopStock",
]
