"""
Tests for reporting (workshop.reports).
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from workshop import shop
from workshop.models import Direction, EntryKind, Item, ItemCategory, Worker, WorkOrderKind
from workshop.protocols.identity import Role


@pytest.fixture
def vikram(db):
    return Worker.objects.create(name="Vikram", employee_code="EMP-201", role=Role.DELIVERY)


@pytest.fixture
def screw(db):
    return shop.create_item("Screw", quantity=100, unit_price=2)


@pytest.fixture
def bolt(db):
    return shop.create_item("Bolt", quantity=50, unit_price=3)


@pytest.fixture
def widget(db):
    return shop.create_item(
        "Widget", ItemCategory.FINISHED_GOOD, quantity=10, unit_price=100, code="W-1"
    )


def sell(worker, item, quantity, client):
    order = shop.issue(worker, item, quantity, WorkOrderKind.SALES, client_name=client)
    shop.deliver(order)
    return order


# ═══════════════════════════════════════════════════════════════════
# Revenue
# ═══════════════════════════════════════════════════════════════════


class TestRevenue:
    def test_empty(self, db):
        assert shop.revenue() == Decimal("0")

    def test_quantity_times_snapshotted_price(self, vikram, widget):
        sell(vikram, widget, 5, "Acme")

        assert shop.revenue() == Decimal("500")

    def test_price_change_does_not_rewrite_history(self, vikram, widget):
        sell(vikram, widget, 2, "Acme")
        Item.objects.filter(pk=widget.pk).update(unit_price=Decimal("150"))
        sell(vikram, widget, 1, "Acme")

        assert shop.revenue() == Decimal("350")

    def test_pending_sales_not_counted(self, vikram, widget):
        shop.issue(vikram, widget, 5, WorkOrderKind.SALES, client_name="Acme")
        assert shop.revenue() == 0

    def test_stock_moves_are_not_revenue(self, widget):
        shop.adjust(widget, -3, "Damaged")
        assert shop.revenue() == 0

    def test_by_client(self, vikram, widget):
        sell(vikram, widget, 5, "Acme")
        sell(vikram, widget, 2, "Globex")

        assert shop.revenue(client_name="Acme") == Decimal("500")
        assert shop.revenue(client_name="Globex") == Decimal("200")
        assert shop.revenue(client_name="Initech") == 0

    def test_by_date(self, vikram, widget):
        sell(vikram, widget, 5, "Acme")
        today = timezone.localdate()

        assert shop.revenue(date_from=today, date_to=today) == Decimal("500")
        assert shop.revenue(date_from=today + timedelta(days=1)) == 0
        assert shop.revenue(date_to=today - timedelta(days=1)) == 0


# ═══════════════════════════════════════════════════════════════════
# Dashboard
# ═══════════════════════════════════════════════════════════════════


class TestDashboard:
    def test_empty(self, db):
        summary = shop.dashboard()

        assert summary.total_stock_value == 0
        assert summary.low_stock_count == 0
        assert summary.pending_jobs == 0
        assert summary.total_revenue == 0

    def test_figures(self, vikram, screw, bolt, widget):
        sell(vikram, widget, 5, "Acme")
        shop.issue(vikram, widget, 1, WorkOrderKind.SALES)

        summary = shop.dashboard()

        # 100 x 2 + 50 x 3 + 4 x 100
        assert summary.total_stock_value == Decimal("750")
        assert summary.low_stock_count == 1
        assert summary.pending_jobs == 1
        assert summary.total_revenue == Decimal("500")

    def test_as_dict(self, screw):
        assert shop.dashboard().as_dict() == {
            "total_stock_value": Decimal("200"),
            "low_stock_count": 0,
            "pending_jobs": 0,
            "total_revenue": Decimal("0"),
        }


# ═══════════════════════════════════════════════════════════════════
# Flat reports
# ═══════════════════════════════════════════════════════════════════


class TestTransactionReport:
    def test_rows(self, vikram, widget):
        order = sell(vikram, widget, 2, "Acme")

        rows = shop.transaction_report(item=widget)

        assert [row["kind"] for row in rows] == [
            EntryKind.SALE,
            EntryKind.DISPATCH,
            EntryKind.MANUAL,
        ]
        sale = rows[0]
        assert sale["item"] == "Widget"
        assert sale["code"] == "W-1"
        assert sale["direction"] == Direction.OUT
        assert sale["quantity"] == 2
        assert sale["value"] == Decimal("200")
        assert sale["order"] == order.code
        assert sale["assignee"] == "Vikram"
        assert sale["client"] == "Acme"
        assert sale["has_proof"] is False
        assert sale["actor"] == "system"

    def test_entries_without_order(self, screw):
        (row,) = shop.transaction_report(item=screw)

        assert row["order"] == ""
        assert row["client"] == ""
        assert row["reason"] == "Opening balance"

    def test_filters(self, screw, widget):
        shop.adjust(screw, -1, "x", kind=EntryKind.MATERIAL_USE)
        rows = shop.transaction_report(kind=EntryKind.MATERIAL_USE)
        assert [row["item"] for row in rows] == ["Screw"]


class TestStockReport:
    def test_rows(self, screw, widget):
        shop.adjust(widget, -5, "x")

        rows = shop.stock_report()

        assert [row["item"] for row in rows] == ["Screw", "Widget"]
        assert rows[0]["value"] == Decimal("200")
        assert rows[0]["low_stock"] is False
        assert rows[1]["quantity"] == 5
        assert rows[1]["low_stock"] is True

    def test_by_category(self, screw, widget):
        rows = shop.stock_report(ItemCategory.FINISHED_GOOD)
        assert [row["item"] for row in rows] == ["Widget"]


class TestSalesByClient:
    def test_grouped_largest_first(self, vikram, widget):
        sell(vikram, widget, 1, "Globex")
        sell(vikram, widget, 3, "Acme")
        sell(vikram, widget, 1, "Globex")

        assert shop.sales_by_client() == [
            {"client": "Acme", "total": Decimal("300"), "entries": 1},
            {"client": "Globex", "total": Decimal("200"), "entries": 2},
        ]
