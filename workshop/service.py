"""
Workshop Service - Thin facade over the service mixins.

Usage:
    from workshop import shop, ShopError

    # Catalog
    screw = shop.create_item("Screw", quantity=100, unit_price=2)
    widget = shop.create_item("Widget", ItemCategory.FINISHED_GOOD, unit_price=100)
    shop.set_recipe(widget, [{"ingredient": screw, "quantity": 2}])

    # Work orders
    order = shop.issue(rahul, widget, 10, WorkOrderKind.ASSEMBLY)
    shop.settle(order)

    # Reports
    shop.revenue(client_name="Acme")
    shop.dashboard()
"""

from workshop.reports import ShopReports
from workshop.services import (
    ShopCatalog,
    ShopLedger,
    ShopManufacturing,
    ShopOrders,
    ShopRecipes,
    ShopStock,
)


class Shop(
    ShopCatalog,
    ShopLedger,
    ShopStock,
    ShopRecipes,
    ShopOrders,
    ShopManufacturing,
    ShopReports,
):
    """
    Main API for the workshop.

    Every operation is a classmethod on one of the mixins; this class only
    puts them behind one name.
    """
