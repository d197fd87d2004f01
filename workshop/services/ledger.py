"""
Ledger service -- record, query, recent, delete.

The ledger is append-only. record() is normally called by the stock
mutator, in the same atomic block as the quantity change; the work order
engine calls it directly only for revenue (SALE) entries, which do not
move stock.
"""

import logging
from datetime import date, datetime

from django.db import transaction

from workshop.conf import get_setting
from workshop.exceptions import NotFoundError, ValidationError
from workshop.models import Direction, EntryKind, Item, Transaction, WorkOrder
from workshop.models.ledger import REASON_MAX_LENGTH
from workshop.permissions import actor_label, require_admin
from workshop.protocols.identity import Actor
from workshop.validators import to_quantity

logger = logging.getLogger(__name__)


def resolve_item(item) -> Item:
    """Accept an Item or its primary key."""
    if isinstance(item, Item):
        return item
    try:
        return Item.objects.get(pk=item)
    except (Item.DoesNotExist, ValueError, TypeError):
        raise NotFoundError(item=item)


class ShopLedger:
    """
    Ledger operations.

    query() returns a QuerySet: lazy, and restartable by iterating again.
    """

    @classmethod
    def record(
        cls,
        item,
        direction: str,
        quantity,
        reason: str,
        kind: str = EntryKind.MANUAL,
        work_order: WorkOrder | None = None,
        actor: Actor | None = None,
    ) -> Transaction:
        """
        Append one ledger entry.

        quantity must be a positive whole number; direction carries the sign.
        """
        quantity = to_quantity(quantity)

        if direction not in Direction.values:
            raise ValidationError(field="direction", value=direction)
        if kind not in EntryKind.values:
            raise ValidationError(field="kind", value=kind)

        reason = reason or "Manual Update"
        if len(reason) > REASON_MAX_LENGTH:
            raise ValidationError(field="reason", max_length=REASON_MAX_LENGTH, length=len(reason))

        item = resolve_item(item)

        entry = Transaction.objects.create(
            item=item,
            item_name=item.name,
            item_code=item.code,
            direction=direction,
            quantity=quantity,
            kind=kind,
            reason=reason,
            unit_price=item.unit_price,
            work_order=work_order,
            actor=actor_label(actor),
        )

        logger.debug(
            f"Ledger {entry.direction} {entry.quantity} {entry.item_name}: {entry.reason}",
            extra={
                "entry": entry.pk,
                "item": item.pk,
                "kind": kind,
                "work_order": work_order.code if work_order else None,
            },
        )

        return entry

    @classmethod
    def query(
        cls,
        item=None,
        work_order=None,
        kind: str | None = None,
        direction: str | None = None,
        date_from: date | datetime | None = None,
        date_to: date | datetime | None = None,
    ):
        """
        Ledger entries, most recent first.

        Returns a QuerySet; every iteration runs the query again.
        """
        qs = Transaction.objects.select_related("work_order")

        if item is not None:
            qs = qs.filter(item=item)
        if work_order is not None:
            qs = qs.filter(work_order=work_order)
        if kind:
            qs = qs.filter(kind=kind)
        if direction:
            qs = qs.filter(direction=direction)
        if date_from:
            if isinstance(date_from, datetime):
                qs = qs.filter(created_at__gte=date_from)
            else:
                qs = qs.filter(created_at__date__gte=date_from)
        if date_to:
            if isinstance(date_to, datetime):
                qs = qs.filter(created_at__lte=date_to)
            else:
                qs = qs.filter(created_at__date__lte=date_to)

        return qs.newest_first()

    @classmethod
    def recent(cls, limit: int | None = None):
        """Latest ledger entries (LEDGER_RECENT_LIMIT by default)."""
        limit = limit or get_setting("LEDGER_RECENT_LIMIT")
        return cls.query()[:limit]

    @classmethod
    def delete_entry(cls, entry_id, actor: Actor | None = None) -> None:
        """
        Administrative removal of a ledger entry.

        Does NOT reverse the stock change the entry recorded: afterwards the
        item's quantity and its ledger disagree. This is audit-log cleanup,
        not a correction mechanism; use a manual adjustment to fix stock.
        """
        require_admin(actor, "delete_transaction")

        with transaction.atomic():
            try:
                entry = Transaction.objects.select_related("item").get(pk=entry_id)
            except (Transaction.DoesNotExist, ValueError, TypeError):
                raise NotFoundError(transaction=entry_id)

            snapshot = {
                "entry_id": entry.pk,
                "item": entry.item,
                "direction": entry.direction,
                "quantity": entry.quantity,
                "kind": entry.kind,
                "actor": actor_label(actor),
            }
            entry.delete()

        logger.warning(
            f"Ledger entry {snapshot['entry_id']} deleted by {snapshot['actor']}: "
            f"{snapshot['direction']} {snapshot['quantity']} {snapshot['item'].name} "
            f"({snapshot['kind']}); stock not reversed",
            extra={
                "entry": snapshot["entry_id"],
                "item": snapshot["item"].pk,
                "direction": snapshot["direction"],
                "quantity": snapshot["quantity"],
                "kind": snapshot["kind"],
                "actor": snapshot["actor"],
            },
        )

        from workshop.signals import ledger_entry_deleted

        ledger_entry_deleted.send(sender=Transaction, **snapshot)
