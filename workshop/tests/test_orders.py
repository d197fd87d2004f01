"""
Tests for the work order engine (workshop.services.orders, workshop.services.kinds).
"""

import re

import pytest

from workshop import shop
from workshop.exceptions import (
    AlreadySettledError,
    AuthorizationError,
    InsufficientStockError,
    NoRecipeError,
    NotFoundError,
    ValidationError,
)
from workshop.models import (
    Direction,
    EntryKind,
    ItemCategory,
    Transaction,
    Worker,
    WorkOrder,
    WorkOrderKind,
    WorkOrderStatus,
)
from workshop.protocols.identity import Actor, Role
from workshop.results import Proof
from workshop.signals import order_cancelled, order_issued, order_settled


# ═══════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════


@pytest.fixture
def rahul(db):
    return Worker.objects.create(name="Rahul", employee_code="EMP-101")


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
def widget(db, screw, bolt):
    item = shop.create_item(
        "Widget", ItemCategory.FINISHED_GOOD, quantity=10, unit_price=100, code="W-1"
    )
    shop.set_recipe(
        item,
        [{"ingredient": screw, "quantity": 2}, {"ingredient": bolt, "quantity": 1}],
    )
    return item


def quantity_of(item) -> int:
    item.refresh_from_db()
    return item.quantity


def rahul_actor(worker) -> Actor:
    return Actor(actor_id=worker.pk, role=worker.role, name=worker.name)


# ═══════════════════════════════════════════════════════════════════
# Issue
# ═══════════════════════════════════════════════════════════════════


class TestIssueAssembly:
    def test_commits_ingredients(self, rahul, widget, screw, bolt):
        order = shop.issue(rahul, widget, 10, WorkOrderKind.ASSEMBLY)

        assert order.status == WorkOrderStatus.PENDING
        assert order.kind == WorkOrderKind.ASSEMBLY
        assert order.quantity == 10
        assert quantity_of(screw) == 80
        assert quantity_of(bolt) == 40
        assert quantity_of(widget) == 10

        entries = Transaction.objects.filter(work_order=order).order_by("pk")
        assert [(e.item_id, e.direction, e.quantity, e.kind) for e in entries] == [
            (screw.pk, Direction.OUT, 20, EntryKind.MATERIAL_USE),
            (bolt.pk, Direction.OUT, 10, EntryKind.MATERIAL_USE),
        ]
        assert entries[0].reason == "Given to Rahul to build 10 x Widget"

    def test_snapshots(self, rahul, widget):
        order = shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)

        assert order.assignee_name == "Rahul"
        assert order.assignee_code == "EMP-101"
        assert order.item_name == "Widget"
        assert order.item_code == "W-1"
        assert order.created_by == "system"
        assert order.assigned_at is not None

    def test_requirements_stored(self, rahul, widget, screw):
        order = shop.issue(rahul, widget, 3, WorkOrderKind.ASSEMBLY)

        order.refresh_from_db()
        assert order.requirements[0] == {
            "ingredient_id": screw.pk,
            "ingredient_name": "Screw",
            "required": 6,
        }

    def test_code_format(self, rahul, widget):
        first = shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)
        second = shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)

        assert re.fullmatch(r"JOB-\d{4}-\d{5}", first.code)
        assert int(second.code[-5:]) == int(first.code[-5:]) + 1

    def test_insufficient_ingredient(self, rahul, widget, screw, bolt):
        with pytest.raises(InsufficientStockError) as exc:
            shop.issue(rahul, widget, 51, WorkOrderKind.ASSEMBLY)

        assert exc.value.item == "Screw"
        assert exc.value.required == 102
        assert not WorkOrder.objects.exists()
        assert quantity_of(screw) == 100
        assert quantity_of(bolt) == 50

    def test_no_recipe(self, rahul, screw):
        with pytest.raises(NoRecipeError):
            shop.issue(rahul, screw, 1, WorkOrderKind.ASSEMBLY)
        assert not WorkOrder.objects.exists()


class TestIssueSales:
    def test_deducts_item(self, vikram, widget):
        order = shop.issue(vikram, widget, 4, WorkOrderKind.SALES, client_name="Acme")

        assert quantity_of(widget) == 6
        assert order.client_name == "Acme"

        entry = Transaction.objects.get(work_order=order)
        assert entry.kind == EntryKind.DISPATCH
        assert entry.direction == Direction.OUT
        assert entry.quantity == 4
        assert entry.reason == "In transit to Vikram"

    def test_insufficient_stock(self, vikram, widget):
        with pytest.raises(InsufficientStockError) as exc:
            shop.issue(vikram, widget, 11, WorkOrderKind.SALES)

        assert exc.value.item == "Widget"
        assert exc.value.required == 11
        assert exc.value.available == 10
        assert not WorkOrder.objects.exists()
        assert quantity_of(widget) == 10

    def test_checks_stock_added_after_load(self, vikram, widget):
        shop.adjust(widget.pk, 5, "Restock")

        # widget still holds the quantity it was loaded with
        order = shop.issue(vikram, widget, 15, WorkOrderKind.SALES)

        assert order.quantity == 15
        assert quantity_of(widget) == 0

    def test_checks_stock_removed_after_load(self, vikram, widget):
        shop.adjust(widget.pk, -8, "Damaged")

        with pytest.raises(InsufficientStockError) as exc:
            shop.issue(vikram, widget, 5, WorkOrderKind.SALES)

        assert exc.value.available == 2
        assert not WorkOrder.objects.exists()
        assert quantity_of(widget) == 2


class TestIssueValidation:
    @pytest.mark.parametrize("quantity", [0, -1, 2.5, None])
    def test_invalid_quantity(self, rahul, widget, quantity):
        with pytest.raises(ValidationError):
            shop.issue(rahul, widget, quantity, WorkOrderKind.ASSEMBLY)

    def test_unknown_kind(self, rahul, widget):
        with pytest.raises(ValidationError):
            shop.issue(rahul, widget, 1, "REPAIR")

    def test_unknown_worker(self, widget):
        with pytest.raises(NotFoundError):
            shop.issue(4242, widget, 1, WorkOrderKind.ASSEMBLY)

    def test_inactive_worker(self, rahul, widget):
        rahul.is_active = False
        rahul.save()

        with pytest.raises(ValidationError):
            shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)

    def test_unknown_item(self, rahul):
        with pytest.raises(NotFoundError):
            shop.issue(rahul, 4242, 1, WorkOrderKind.ASSEMBLY)

    def test_worker_by_primary_key(self, rahul, widget):
        order = shop.issue(rahul.pk, widget.pk, 1, WorkOrderKind.ASSEMBLY)
        assert order.assigned_to == rahul

    def test_requires_admin(self, rahul, widget, screw):
        with pytest.raises(AuthorizationError):
            shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY, actor=rahul_actor(rahul))

        assert not WorkOrder.objects.exists()
        assert quantity_of(screw) == 100


# ═══════════════════════════════════════════════════════════════════
# Settle
# ═══════════════════════════════════════════════════════════════════


class TestCompleteAssembly:
    def test_credits_item(self, rahul, widget):
        order = shop.issue(rahul, widget, 10, WorkOrderKind.ASSEMBLY)

        settled = shop.settle(order)

        assert settled.status == WorkOrderStatus.COMPLETED
        assert settled.completed_at is not None
        assert quantity_of(widget) == 20

        entry = Transaction.objects.get(work_order=order, kind=EntryKind.PRODUCTION)
        assert entry.direction == Direction.IN
        assert entry.quantity == 10
        assert entry.reason == "Finished by Rahul"

    def test_proof_stored(self, rahul, widget):
        order = shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)

        shop.complete(
            order, proof={"photo": "base64data", "location": {"lat": 12.97, "lng": 77.59}}
        )

        order.refresh_from_db()
        assert order.proof_photo == "base64data"
        assert order.location == {"lat": 12.97, "lng": 77.59}
        assert order.has_proof

    def test_proof_object(self, rahul, widget):
        order = shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)
        shop.complete(order, proof=Proof(photo="p"))

        order.refresh_from_db()
        assert order.proof_photo == "p"
        assert order.location is None

    def test_invalid_proof(self, rahul, widget):
        order = shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)
        with pytest.raises(ValidationError):
            shop.complete(order, proof="not a proof")

    def test_half_location_rejected(self, rahul, widget):
        order = shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)

        with pytest.raises(ValidationError) as exc:
            shop.complete(order, proof={"photo": "p", "location": {"lat": 12.97}})

        assert exc.value.details["field"] == "location"
        order.refresh_from_db()
        assert order.status == WorkOrderStatus.PENDING
        assert order.location is None
        assert quantity_of(widget) == 10

    def test_by_code(self, rahul, widget):
        order = shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)
        assert shop.settle(order.code).status == WorkOrderStatus.COMPLETED

    def test_double_settle(self, rahul, widget):
        order = shop.issue(rahul, widget, 10, WorkOrderKind.ASSEMBLY)
        shop.settle(order)
        entries = Transaction.objects.count()

        with pytest.raises(AlreadySettledError) as exc:
            shop.settle(order)

        assert exc.value.details["status"] == WorkOrderStatus.COMPLETED
        assert quantity_of(widget) == 20
        assert Transaction.objects.count() == entries

    def test_unknown_order(self, db):
        with pytest.raises(NotFoundError):
            shop.settle(99999)
        with pytest.raises(NotFoundError):
            shop.complete("JOB-1999-00001")


class TestDeliverSales:
    def test_records_sale_without_moving_stock(self, vikram, widget):
        order = shop.issue(vikram, widget, 5, WorkOrderKind.SALES, client_name="Acme")

        settled = shop.settle(order, proof={"photo": "p"})

        assert settled.status == WorkOrderStatus.COMPLETED
        assert quantity_of(widget) == 5

        sale = Transaction.objects.get(work_order=order, kind=EntryKind.SALE)
        assert sale.direction == Direction.OUT
        assert sale.quantity == 5
        assert sale.reason == "Sold to Acme (via Vikram)"
        assert sale.value == 500

    def test_client_given_at_delivery(self, vikram, widget):
        order = shop.issue(vikram, widget, 1, WorkOrderKind.SALES)

        settled = shop.deliver(order, client_name="Globex")

        assert settled.client_name == "Globex"
        assert Transaction.objects.get(kind=EntryKind.SALE).reason == "Sold to Globex (via Vikram)"

    def test_client_name_stripped(self, vikram, widget):
        order = shop.issue(vikram, widget, 1, WorkOrderKind.SALES)

        settled = shop.deliver(order, client_name="  Globex ")

        settled.refresh_from_db()
        assert settled.client_name == "Globex"
        assert Transaction.objects.get(kind=EntryKind.SALE).reason == "Sold to Globex (via Vikram)"
        assert shop.revenue(client_name="Globex") == 100

    def test_client_required(self, vikram, widget):
        order = shop.issue(vikram, widget, 1, WorkOrderKind.SALES)

        with pytest.raises(ValidationError):
            shop.deliver(order)

        order.refresh_from_db()
        assert order.status == WorkOrderStatus.PENDING
        assert not Transaction.objects.filter(kind=EntryKind.SALE).exists()

    def test_complete_rejected(self, vikram, widget):
        order = shop.issue(vikram, widget, 1, WorkOrderKind.SALES, client_name="Acme")

        with pytest.raises(ValidationError):
            shop.complete(order)

        order.refresh_from_db()
        assert order.status == WorkOrderStatus.PENDING

    def test_double_deliver(self, vikram, widget):
        order = shop.issue(vikram, widget, 1, WorkOrderKind.SALES, client_name="Acme")
        shop.deliver(order)

        with pytest.raises(AlreadySettledError):
            shop.deliver(order)
        assert Transaction.objects.filter(kind=EntryKind.SALE).count() == 1


class TestDeliverAssembly:
    def test_direct_from_job_work(self, rahul, widget):
        order = shop.issue(rahul, widget, 3, WorkOrderKind.ASSEMBLY, client_name="Acme")

        shop.deliver(order)

        assert quantity_of(widget) == 10
        kinds = list(
            Transaction.objects.filter(work_order=order)
            .exclude(kind=EntryKind.MATERIAL_USE)
            .order_by("pk")
            .values_list("kind", "direction", "quantity")
        )
        assert kinds == [
            (EntryKind.PRODUCTION, Direction.IN, 3),
            (EntryKind.DISPATCH, Direction.OUT, 3),
            (EntryKind.SALE, Direction.OUT, 3),
        ]
        assert shop.revenue(client_name="Acme") == 300


# ═══════════════════════════════════════════════════════════════════
# Cancel
# ═══════════════════════════════════════════════════════════════════


class TestCancel:
    def test_assembly_returns_ingredients(self, rahul, widget, screw, bolt):
        order = shop.issue(rahul, widget, 10, WorkOrderKind.ASSEMBLY)

        cancelled = shop.cancel(order, "Machine down")

        assert cancelled.status == WorkOrderStatus.CANCELLED
        assert cancelled.cancelled_at is not None
        assert cancelled.metadata["cancel_reason"] == "Machine down"
        assert quantity_of(screw) == 100
        assert quantity_of(bolt) == 50

        reversals = Transaction.objects.filter(work_order=order, kind=EntryKind.REVERSAL)
        assert sorted((e.item_id, e.quantity) for e in reversals) == sorted(
            [(screw.pk, 20), (bolt.pk, 10)]
        )
        assert all(e.direction == Direction.IN for e in reversals)

    def test_sales_returns_item(self, vikram, widget):
        order = shop.issue(vikram, widget, 4, WorkOrderKind.SALES)
        shop.cancel(order)
        assert quantity_of(widget) == 10

    def test_uses_committed_entries_not_current_recipe(self, rahul, widget, screw, bolt):
        order = shop.issue(rahul, widget, 5, WorkOrderKind.ASSEMBLY)
        shop.set_recipe(widget, [{"ingredient": screw, "quantity": 7}])

        shop.cancel(order)

        assert quantity_of(screw) == 100
        assert quantity_of(bolt) == 50

    def test_terminal_orders(self, rahul, widget):
        order = shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)
        shop.settle(order)

        with pytest.raises(AlreadySettledError):
            shop.cancel(order)

    def test_settle_after_cancel(self, rahul, widget):
        order = shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)
        shop.cancel(order)

        with pytest.raises(AlreadySettledError):
            shop.settle(order)

    def test_requires_admin(self, rahul, widget):
        order = shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)

        with pytest.raises(AuthorizationError):
            shop.cancel(order, actor=rahul_actor(rahul))

        order.refresh_from_db()
        assert order.status == WorkOrderStatus.PENDING


# ═══════════════════════════════════════════════════════════════════
# Authorization on settlement
# ═══════════════════════════════════════════════════════════════════


class TestSettlePermissions:
    def test_assignee_can_settle(self, rahul, widget):
        order = shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)

        settled = shop.complete(order, actor=rahul_actor(rahul))

        assert settled.metadata["settled_by"] == f"worker:{rahul.pk}"
        entry = Transaction.objects.get(work_order=order, kind=EntryKind.PRODUCTION)
        assert entry.actor == f"worker:{rahul.pk}"

    def test_other_worker_cannot_settle(self, rahul, vikram, widget):
        order = shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)

        with pytest.raises(AuthorizationError):
            shop.complete(order, actor=rahul_actor(vikram))

        order.refresh_from_db()
        assert order.status == WorkOrderStatus.PENDING

    def test_admin_can_settle_any(self, rahul, widget):
        order = shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)
        admin = Actor(actor_id=None, role=Role.ADMIN, name="maria")

        assert shop.complete(order, actor=admin).status == WorkOrderStatus.COMPLETED


# ═══════════════════════════════════════════════════════════════════
# Queries
# ═══════════════════════════════════════════════════════════════════


class TestListOrders:
    def test_pending_first_then_newest(self, rahul, widget):
        done = shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)
        shop.settle(done)
        older = shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)
        newer = shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)

        assert list(shop.list_orders()) == [newer, older, done]

    def test_non_admin_sees_own_orders(self, rahul, vikram, widget):
        mine = shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)
        shop.issue(vikram, widget, 1, WorkOrderKind.SALES)

        assert list(shop.list_orders(actor=rahul_actor(rahul))) == [mine]
        assert shop.list_orders(actor=Actor(None, Role.ADMIN)).count() == 2

    def test_filters(self, rahul, vikram, widget):
        shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)
        sale = shop.issue(vikram, widget, 1, WorkOrderKind.SALES)

        assert list(shop.list_orders(kind=WorkOrderKind.SALES)) == [sale]
        assert shop.list_orders(status=WorkOrderStatus.COMPLETED).count() == 0

    def test_get_order(self, rahul, widget):
        order = shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)

        assert shop.get_order(order.pk) == order
        assert shop.get_order(order.code) == order

        with pytest.raises(NotFoundError):
            shop.get_order("JOB-0000-00000")


# ═══════════════════════════════════════════════════════════════════
# Signals
# ═══════════════════════════════════════════════════════════════════


class TestOrderSignals:
    @pytest.fixture
    def received(self):
        calls = []

        def receiver(sender, signal, **kwargs):
            calls.append((signal, kwargs))

        signals = [order_issued, order_settled, order_cancelled]
        for signal in signals:
            signal.connect(receiver)
        yield calls
        for signal in signals:
            signal.disconnect(receiver)

    def test_lifecycle(self, rahul, widget, received, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            first = shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)
        with django_capture_on_commit_callbacks(execute=True):
            shop.settle(first)
        with django_capture_on_commit_callbacks(execute=True):
            second = shop.issue(rahul, widget, 1, WorkOrderKind.ASSEMBLY)
        with django_capture_on_commit_callbacks(execute=True):
            shop.cancel(second, "No longer needed")

        assert [signal for signal, _ in received] == [
            order_issued,
            order_settled,
            order_issued,
            order_cancelled,
        ]
        assert received[0][1]["work_order"].pk == first.pk
        assert received[0][1]["actor"] == "system"
        assert received[3][1]["reason"] == "No longer needed"

    def test_not_sent_when_issue_fails(self, rahul, widget, received, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            with pytest.raises(InsufficientStockError):
                shop.issue(rahul, widget, 1000, WorkOrderKind.ASSEMBLY)

        assert received == []
