"""
Work order kinds.

Each kind is one handler that owns the whole protocol for that kind of order:
what must be true before issuing, which stock is committed at issuance,
what settlement writes, and how a cancellation is reversed.

    ASSEMBLY: ingredients are handed over at issuance; the finished item is
              credited when the assignee completes the job.
    SALES:    finished goods are handed over at issuance; delivery records
              the sale (revenue) without moving stock again.

Handlers never open transactions or check permissions; ShopOrders runs
them inside its unit of work.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from workshop.exceptions import InsufficientStockError, ValidationError
from workshop.models import (
    Direction,
    EntryKind,
    Item,
    Transaction,
    WorkOrder,
    WorkOrderKind,
)
from workshop.protocols.identity import Actor
from workshop.results import Proof, Requirement
from workshop.services.ledger import ShopLedger
from workshop.services.recipes import ShopRecipes
from workshop.services.stock import ShopStock

logger = logging.getLogger(__name__)


class OrderKindHandler:
    """Base protocol shared by every kind."""

    kind: str = ""
    default_settlement: str = "complete"

    def check_feasibility(self, item: Item, quantity: int) -> list[Requirement]:
        """Validate without writing anything. Raise on the first problem."""
        raise NotImplementedError

    def commit(
        self,
        order: WorkOrder,
        requirements: list[Requirement],
        actor: Actor | None = None,
    ) -> None:
        """Deduct the stock handed over at issuance."""
        raise NotImplementedError

    def complete(
        self,
        order: WorkOrder,
        proof: Proof | None = None,
        client_name: str | None = None,
        actor: Actor | None = None,
    ) -> None:
        raise ValidationError(
            order=order.code, kind=order.kind, message="cannot be completed, deliver it instead"
        )

    def deliver(
        self,
        order: WorkOrder,
        proof: Proof | None = None,
        client_name: str | None = None,
        actor: Actor | None = None,
    ) -> None:
        raise NotImplementedError

    def reverse(self, order: WorkOrder, actor: Actor | None = None) -> list[Transaction]:
        """
        Put back whatever the order took out of stock.

        Works from the order's own ledger entries rather than the current
        recipe, so a recipe edited after issuance does not change what is
        returned.
        """
        net: dict[int, int] = defaultdict(int)
        for entry in order.transactions.stock_moves():
            net[entry.item_id] += entry.signed_quantity

        entries = []
        for item_id, balance in sorted(net.items()):
            if balance >= 0:
                continue
            entries.append(
                ShopStock.adjust(
                    item_id,
                    -balance,
                    f"Cancelled {order.code}: returned by {order.assignee_name}",
                    kind=EntryKind.REVERSAL,
                    work_order=order,
                    actor=actor,
                )
            )
        return entries

    @staticmethod
    def _client(order: WorkOrder, client_name: str | None) -> str:
        client = (client_name or order.client_name or "").strip()
        if not client:
            raise ValidationError(
                order=order.code, field="client_name", message="is required to deliver"
            )
        return client

    def _record_sale(
        self, order: WorkOrder, reason: str, actor: Actor | None = None
    ) -> Transaction:
        """Revenue entry: OUT, kind SALE, no stock change."""
        return ShopLedger.record(
            order.item,
            Direction.OUT,
            order.quantity,
            reason,
            kind=EntryKind.SALE,
            work_order=order,
            actor=actor,
        )


class AssemblyHandler(OrderKindHandler):
    """Build the item from its recipe."""

    kind = WorkOrderKind.ASSEMBLY
    default_settlement = "complete"

    def check_feasibility(self, item, quantity):
        return ShopRecipes.validate_sufficiency(item, quantity)

    def commit(self, order, requirements, actor=None):
        for req in requirements:
            ShopStock.adjust(
                req.ingredient_id,
                -req.required,
                f"Given to {order.assignee_name} to build {order.quantity} x {order.item_name}",
                kind=EntryKind.MATERIAL_USE,
                work_order=order,
                actor=actor,
            )
        order.metadata["requirements"] = [req.as_dict() for req in requirements]
        order.save(update_fields=["metadata", "updated_at"])

    def complete(self, order, proof=None, client_name=None, actor=None):
        ShopStock.adjust(
            order.item_id,
            order.quantity,
            f"Finished by {order.assignee_name}",
            kind=EntryKind.PRODUCTION,
            work_order=order,
            actor=actor,
        )

    def deliver(self, order, proof=None, client_name=None, actor=None):
        """
        Built goods go straight from the assignee to a client.

        Credits the build, hands it over and records the sale: net stock
        change is zero, but all three facts are in the ledger.
        """
        client = self._client(order, client_name)
        self.complete(order, proof=proof, actor=actor)
        ShopStock.adjust(
            order.item_id,
            -order.quantity,
            f"Delivered to {client} by {order.assignee_name}",
            kind=EntryKind.DISPATCH,
            work_order=order,
            actor=actor,
        )
        self._record_sale(order, f"Sold to {client} (direct from job work)", actor=actor)


class SalesHandler(OrderKindHandler):
    """Hand finished goods to the assignee to sell or deliver."""

    kind = WorkOrderKind.SALES
    default_settlement = "deliver"

    def check_feasibility(self, item, quantity):
        # Live row, not the caller's instance: settlements credit by item_id.
        available = Item.objects.values_list("quantity", flat=True).get(pk=item.pk)
        if available < quantity:
            raise InsufficientStockError(item=item.name, required=quantity, available=available)
        return []

    def commit(self, order, requirements, actor=None):
        ShopStock.adjust(
            order.item_id,
            -order.quantity,
            f"In transit to {order.assignee_name}",
            kind=EntryKind.DISPATCH,
            work_order=order,
            actor=actor,
        )

    def deliver(self, order, proof=None, client_name=None, actor=None):
        # Stock already left at issuance; this is the revenue record only.
        client = self._client(order, client_name)
        self._record_sale(order, f"Sold to {client} (via {order.assignee_name})", actor=actor)


HANDLERS: dict[str, OrderKindHandler] = {
    WorkOrderKind.ASSEMBLY: AssemblyHandler(),
    WorkOrderKind.SALES: SalesHandler(),
}


def handler_for(kind: str) -> OrderKindHandler:
    try:
        return HANDLERS[kind]
    except KeyError:
        raise ValidationError(field="kind", value=kind)
