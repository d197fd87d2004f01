"""
Load demo data for Workshop.

Creates a small workshop:
- Raw materials and finished goods with recipes
- Factory and delivery workers
- Work orders in every state (pending, completed, cancelled)

Everything goes through the workshop service, so the ledger is complete.

Usage:
    python manage.py load_workshop_demo
    python manage.py load_workshop_demo --clear
"""

from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction


RAW_MATERIALS = [
    # (name, code, quantity, unit_price, reorder_level)
    ("Steel Sheet", "7208.51", 400, Decimal("12.50"), 50),
    ("Screw M4", "7318.15", 2000, Decimal("0.20"), 200),
    ("Hinge", "8302.10", 300, Decimal("3.00"), 40),
    ("Paint (litre)", "3208.90", 80, Decimal("9.00"), 10),
    ("Handle", "8302.42", 150, Decimal("2.50"), 20),
]

FINISHED_GOODS = [
    # (name, code, unit_price, recipe)
    (
        "Tool Cabinet",
        "9403.20",
        Decimal("180.00"),
        [("Steel Sheet", 4), ("Screw M4", 24), ("Hinge", 2), ("Paint (litre)", 1), ("Handle", 2)],
    ),
    (
        "Wall Shelf",
        "9403.10",
        Decimal("45.00"),
        [("Steel Sheet", 1), ("Screw M4", 8), ("Paint (litre)", 1)],
    ),
]

WORKERS = [
    # (name, employee_code, role)
    ("Rahul Kumar", "EMP-101", "factory"),
    ("Anita Desai", "EMP-102", "factory"),
    ("Vikram Singh", "EMP-201", "delivery"),
]


class Command(BaseCommand):
    help = "Load demonstration data for the workshop"

    def add_arguments(self, parser):
        parser.add_argument(
            "--clear",
            action="store_true",
            help="Delete existing workshop data before loading",
        )

    def handle(self, *args, **options):
        from workshop.models import (
            Item,
            ItemCategory,
            RecipeLine,
            Transaction,
            Worker,
            WorkOrder,
            WorkOrderKind,
        )
        from workshop.service import Shop

        self.stdout.write("=" * 60)
        self.stdout.write("Loading workshop demo data...")
        self.stdout.write("=" * 60)

        if options["clear"]:
            self.stdout.write("\nClearing existing data...")
            with transaction.atomic():
                Transaction.objects.all().delete()
                WorkOrder.objects.all().delete()
                RecipeLine.objects.all().delete()
                Item.objects.all().delete()
                Worker.objects.all().delete()
            self.stdout.write(self.style.SUCCESS("   Data cleared"))

        if Item.objects.exists():
            self.stdout.write(
                self.style.WARNING("Items already exist; run with --clear to reload.")
            )
            return

        with transaction.atomic():
            items = self._create_catalog(Shop, ItemCategory)
            workers = self._create_workers(Worker)
            self._create_orders(Shop, items, workers, WorkOrderKind)

        summary = Shop.dashboard()
        self.stdout.write("")
        self.stdout.write(self.style.SUCCESS("Demo data loaded"))
        self.stdout.write(f"   Stock value:   {summary.total_stock_value}")
        self.stdout.write(f"   Low stock:     {summary.low_stock_count}")
        self.stdout.write(f"   Pending jobs:  {summary.pending_jobs}")
        self.stdout.write(f"   Revenue:       {summary.total_revenue}")

    def _create_catalog(self, shop, categories) -> dict:
        self.stdout.write("\nCreating items...")
        items = {}

        for name, code, quantity, price, reorder in RAW_MATERIALS:
            items[name] = shop.create_item(
                name,
                categories.RAW_MATERIAL,
                quantity=quantity,
                unit_price=price,
                reorder_level=reorder,
                code=code,
            )
            self.stdout.write(f"   {name}: {quantity}")

        for name, code, price, recipe in FINISHED_GOODS:
            item = shop.create_item(
                name, categories.FINISHED_GOOD, unit_price=price, reorder_level=5, code=code
            )
            shop.set_recipe(
                item,
                [{"ingredient": items[ingredient], "quantity": qty} for ingredient, qty in recipe],
            )
            items[name] = item
            self.stdout.write(f"   {name}: recipe with {len(recipe)} ingredients")

        return items

    def _create_workers(self, worker_model) -> dict:
        self.stdout.write("\nCreating workers...")
        workers = {}
        for name, code, role in WORKERS:
            workers[name] = worker_model.objects.create(name=name, employee_code=code, role=role)
            self.stdout.write(f"   {code} {name} ({role})")
        return workers

    def _create_orders(self, shop, items, workers, kinds) -> None:
        self.stdout.write("\nCreating work orders...")

        cabinet = items["Tool Cabinet"]
        shelf = items["Wall Shelf"]
        rahul = workers["Rahul Kumar"]
        anita = workers["Anita Desai"]
        vikram = workers["Vikram Singh"]

        # Built in-house so there is stock to sell
        shop.manufacture(shelf, 10)

        built = shop.issue(rahul, cabinet, 5, kinds.ASSEMBLY)
        shop.complete(built, proof={"photo": "demo", "location": {"lat": 12.97, "lng": 77.59}})

        shop.issue(anita, shelf, 8, kinds.ASSEMBLY)

        sold = shop.issue(vikram, cabinet, 3, kinds.SALES, client_name="Acme Hardware")
        shop.deliver(sold, proof={"photo": "demo"})

        shop.issue(vikram, shelf, 4, kinds.SALES, client_name="City Stores")

        returned = shop.issue(vikram, shelf, 2, kinds.SALES, client_name="Walk-in")
        shop.cancel(returned, "Client did not show up")

        for order in shop.list_orders():
            self.stdout.write(f"   {order.code}: {order.kind} {order.quantity}x {order.item_name} [{order.status}]")
