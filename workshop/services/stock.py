"""
Stock service -- the only code path that changes Item.quantity.

Every change is a conditional UPDATE (quantity = quantity + delta, only
where the result stays non-negative) followed by exactly one ledger entry,
both inside one atomic block.
"""

import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from workshop.exceptions import InsufficientStockError, NotFoundError
from workshop.models import Direction, EntryKind, Item, Transaction, WorkOrder
from workshop.permissions import require_admin
from workshop.protocols.identity import Actor
from workshop.services.ledger import ShopLedger, resolve_item
from workshop.validators import to_quantity

logger = logging.getLogger(__name__)


def _apply_delta(item_id: int, delta: int) -> None:
    """
    Apply delta to an item's quantity in a single UPDATE.

    The WHERE clause refuses any change that would go negative, so two
    concurrent deductions cannot both pass a stale check.
    """
    qs = Item.objects.filter(pk=item_id)
    if delta < 0:
        qs = qs.filter(quantity__gte=-delta)

    updated = qs.update(quantity=F("quantity") + delta, updated_at=timezone.now())
    if updated:
        return

    available = Item.objects.filter(pk=item_id).values_list("quantity", "name").first()
    if available is None:
        raise NotFoundError(item=item_id)

    quantity, name = available
    raise InsufficientStockError(item=name, required=-delta, available=quantity)


class ShopStock:
    """Stock mutation operations."""

    @classmethod
    def adjust(
        cls,
        item,
        signed_delta,
        reason: str,
        kind: str = EntryKind.MANUAL,
        work_order: WorkOrder | None = None,
        actor: Actor | None = None,
    ) -> Transaction:
        """
        Change an item's quantity by signed_delta and record it.

        Raises:
            ValidationError: delta is zero or not a whole number
            NotFoundError: item does not exist
            InsufficientStockError: the deduction would go below zero

        Returns:
            The ledger entry written for the change. When an Item instance is
            passed, its quantity is refreshed in place.
        """
        delta = to_quantity(signed_delta, "delta", signed=True)
        item_id = item.pk if isinstance(item, Item) else resolve_item(item).pk

        with transaction.atomic():
            _apply_delta(item_id, delta)

            current = Item.objects.get(pk=item_id)
            entry = ShopLedger.record(
                current,
                Direction.IN if delta > 0 else Direction.OUT,
                abs(delta),
                reason,
                kind=kind,
                work_order=work_order,
                actor=actor,
            )

            transaction.on_commit(lambda: cls._emit_stock_adjusted(current, delta, entry))

        if isinstance(item, Item):
            item.quantity = current.quantity
            item.updated_at = current.updated_at

        logger.info(
            f"Stock {current.name}: {delta:+d} → {current.quantity} ({reason})",
            extra={
                "item": current.pk,
                "delta": delta,
                "quantity": current.quantity,
                "kind": kind,
                "work_order": work_order.code if work_order else None,
            },
        )

        return entry

    @classmethod
    def adjust_stock(
        cls,
        item,
        adjustment,
        reason: str = "",
        actor: Actor | None = None,
    ) -> Transaction:
        """Manual stock correction (admin only)."""
        require_admin(actor, "adjust_stock")
        return cls.adjust(
            item, adjustment, reason or "Manual Update", kind=EntryKind.MANUAL, actor=actor
        )

    @staticmethod
    def _emit_stock_adjusted(item: Item, delta: int, entry: Transaction) -> None:
        from workshop.signals import stock_adjusted

        stock_adjusted.send(sender=Item, item=item, delta=delta, entry=entry)
