"""
Concurrent stock deduction on real threads.

Each thread gets its own database connection; a barrier releases them
together so both deductions race for the same row.
"""

import threading

import pytest
from django.db import connection

from workshop import shop
from workshop.exceptions import InsufficientStockError
from workshop.models import Item, ItemCategory, Transaction, Worker, WorkOrder, WorkOrderKind

pytestmark = pytest.mark.django_db(transaction=True)


@pytest.fixture(autouse=True)
def shared_database(transactional_db):
    if connection.vendor == "sqlite" and connection.is_in_memory_db():
        pytest.skip("threads cannot share an in-memory database")


def run_together(*calls):
    """Run each call on its own thread, released at once. Returns outcomes in call order."""
    barrier = threading.Barrier(len(calls))
    outcomes = [None] * len(calls)

    def worker(index, call):
        try:
            barrier.wait(timeout=10)
            outcomes[index] = call()
        except Exception as exc:
            outcomes[index] = exc
        finally:
            connection.close()

    threads = [
        threading.Thread(target=worker, args=(index, call)) for index, call in enumerate(calls)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert not any(thread.is_alive() for thread in threads)
    return outcomes


def ledger_balance(item) -> int:
    return sum(entry.signed_quantity for entry in item.transactions.stock_moves())


class TestConcurrentDeduction:
    @pytest.fixture
    def screw(self):
        return shop.create_item("Screw", quantity=8, unit_price=2)

    def test_one_of_two_deductions_wins(self, screw):
        outcomes = run_together(
            lambda: shop.adjust(screw.pk, -5, "First"),
            lambda: shop.adjust(screw.pk, -5, "Second"),
        )

        failures = [o for o in outcomes if isinstance(o, InsufficientStockError)]
        entries = [o for o in outcomes if isinstance(o, Transaction)]
        assert len(failures) == 1, outcomes
        assert len(entries) == 1, outcomes
        assert failures[0].available == 3

        screw.refresh_from_db()
        assert screw.quantity == 3
        assert ledger_balance(screw) == 3

    def test_deductions_that_fit_both_apply(self, screw):
        outcomes = run_together(
            lambda: shop.adjust(screw.pk, -3, "First"),
            lambda: shop.adjust(screw.pk, -4, "Second"),
        )

        assert all(isinstance(o, Transaction) for o in outcomes), outcomes
        screw.refresh_from_db()
        assert screw.quantity == 1
        assert ledger_balance(screw) == 1


class TestConcurrentIssue:
    def test_one_sales_order_for_the_last_units(self):
        widget = shop.create_item("Widget", ItemCategory.FINISHED_GOOD, quantity=10)
        rahul = Worker.objects.create(name="Rahul", role="delivery")
        vikram = Worker.objects.create(name="Vikram", role="delivery")

        outcomes = run_together(
            lambda: shop.issue(rahul, widget, 6, WorkOrderKind.SALES),
            lambda: shop.issue(vikram, widget, 6, WorkOrderKind.SALES),
        )

        assert sum(isinstance(o, WorkOrder) for o in outcomes) == 1, outcomes
        assert sum(isinstance(o, InsufficientStockError) for o in outcomes) == 1, outcomes
        assert WorkOrder.objects.count() == 1

        widget = Item.objects.get(pk=widget.pk)
        assert widget.quantity == 4
        assert ledger_balance(widget) == 4
