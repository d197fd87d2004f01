"""
Work order service -- issue, settle (complete / deliver), cancel, queries.

Each write operation is one unit of work: the order row, every stock
change and every ledger entry commit together or not at all.

Usage:
    from workshop import shop

    order = shop.issue(rahul, widget, 10, WorkOrderKind.ASSEMBLY)
    shop.settle(order)                    # complete: widget +10

    order = shop.issue(rahul, widget, 5, WorkOrderKind.SALES, client_name="Acme")
    shop.settle(order, proof={"photo": "...", "location": {"lat": 1.0, "lng": 2.0}})
"""

import logging

from django.db import DatabaseError, transaction
from django.db.models import Case, IntegerField, Value, When

from workshop.exceptions import NotFoundError, ShopError, ValidationError
from workshop.models import Worker, WorkOrder, WorkOrderKind, WorkOrderStatus
from workshop.permissions import actor_label, require_admin, require_assignee_or_admin
from workshop.protocols.identity import Actor
from workshop.results import Proof
from workshop.services.kinds import handler_for
from workshop.services.ledger import resolve_item
from workshop.validators import to_quantity

logger = logging.getLogger(__name__)


def _as_proof(proof) -> Proof | None:
    if proof is None or isinstance(proof, Proof):
        return proof
    if isinstance(proof, dict):
        return Proof.from_payload(proof)
    raise ValidationError(field="proof", message="must be a Proof or a dict")


class ShopOrders:
    """Work order lifecycle operations."""

    # ══════════════════════════════════════════════════════════════
    # ISSUANCE
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def issue(
        cls,
        assignee,
        item,
        quantity,
        kind: str = WorkOrderKind.ASSEMBLY,
        client_name: str = "",
        notes: str = "",
        actor: Actor | None = None,
    ) -> WorkOrder:
        """
        Issue a work order and hand over its material.

        Everything is validated before the first write. The order, the stock
        deductions and their ledger entries then commit as one unit.

        Args:
            assignee: Worker (or pk)
            item: target Item (or pk)
            quantity: units to build (ASSEMBLY) or to hand over (SALES)
            kind: WorkOrderKind
            client_name: customer, mostly for SALES

        Raises:
            ValidationError, NotFoundError, NoRecipeError,
            InsufficientStockError, AuthorizationError
        """
        require_admin(actor, "issue")

        quantity = to_quantity(quantity)
        handler = handler_for(kind)
        worker = cls._resolve_worker(assignee)
        item = resolve_item(item)

        requirements = handler.check_feasibility(item, quantity)

        try:
            with transaction.atomic():
                order = WorkOrder.objects.create(
                    assigned_to=worker,
                    assignee_name=worker.name,
                    assignee_code=worker.employee_code,
                    item=item,
                    item_name=item.name,
                    item_code=item.code,
                    quantity=quantity,
                    kind=handler.kind,
                    client_name=(client_name or "").strip(),
                    notes=notes,
                    created_by=actor_label(actor),
                )
                handler.commit(order, requirements, actor=actor)

                transaction.on_commit(lambda: cls._emit("order_issued", order, actor))
        except ShopError:
            # Stock moved between the check and the commit; nothing was kept.
            raise
        except DatabaseError:
            logger.critical(
                f"Issuing {kind} of {quantity} x {item.name} to {worker.name} failed; "
                f"unit of work rolled back",
                exc_info=True,
                extra={
                    "item": item.pk,
                    "worker": worker.pk,
                    "quantity": quantity,
                    "kind": kind,
                    "actor": actor_label(actor),
                },
            )
            raise

        logger.info(
            f"Issued {order.code}: {quantity} x {item.name} to {worker.name} ({order.kind})",
            extra={
                "work_order": order.code,
                "kind": order.kind,
                "item": item.pk,
                "worker": worker.pk,
                "quantity": quantity,
            },
        )

        return order

    # ══════════════════════════════════════════════════════════════
    # SETTLEMENT
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def settle(
        cls,
        order,
        proof=None,
        client_name: str | None = None,
        actor: Actor | None = None,
    ) -> WorkOrder:
        """
        Settle an order the way its kind settles by default.

        ASSEMBLY → complete(), SALES → deliver().
        """
        kind = cls.get_order(order).kind
        action = handler_for(kind).default_settlement
        return cls._settle(order, action, proof, client_name, actor)

    @classmethod
    def complete(cls, order, proof=None, actor: Actor | None = None) -> WorkOrder:
        """Assembly finished: credit the built items."""
        return cls._settle(order, "complete", proof, None, actor)

    @classmethod
    def deliver(
        cls,
        order,
        client_name: str | None = None,
        proof=None,
        actor: Actor | None = None,
    ) -> WorkOrder:
        """Goods handed to the client: record the sale."""
        return cls._settle(order, "deliver", proof, client_name, actor)

    @classmethod
    def _settle(cls, order, action: str, proof, client_name, actor) -> WorkOrder:
        """
        PENDING → COMPLETED under a row lock.

        A second settlement (or a concurrent one) sees COMPLETED and raises
        AlreadySettledError before writing anything.
        """
        proof = _as_proof(proof)

        with transaction.atomic():
            order = cls._lock_order(order)
            require_assignee_or_admin(actor, order, action)
            order.ensure_pending()

            handler = handler_for(order.kind)
            getattr(handler, action)(order, proof=proof, client_name=client_name, actor=actor)
            order.mark_completed(proof, client_name=client_name, settled_by=actor_label(actor))

            transaction.on_commit(lambda: cls._emit("order_settled", order, actor))

        logger.info(
            f"Settled {order.code} ({action}) by {actor_label(actor)}",
            extra={
                "work_order": order.code,
                "kind": order.kind,
                "action": action,
                "client": order.client_name,
            },
        )

        return order

    # ══════════════════════════════════════════════════════════════
    # CANCELLATION
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def cancel(cls, order, reason: str = "", actor: Actor | None = None) -> WorkOrder:
        """
        PENDING → CANCELLED, returning the handed-over stock.

        Compensating REVERSAL entries put back exactly what the order's own
        issuance entries took out.
        """
        require_admin(actor, "cancel")

        with transaction.atomic():
            order = cls._lock_order(order)
            order.ensure_pending()

            entries = handler_for(order.kind).reverse(order, actor=actor)
            order.mark_cancelled(reason, cancelled_by=actor_label(actor))

            transaction.on_commit(
                lambda: cls._emit("order_cancelled", order, actor, reason=reason)
            )

        logger.info(
            f"Reversed {len(entries)} stock movement(s) for {order.code}",
            extra={"work_order": order.code, "entries": [e.pk for e in entries]},
        )

        return order

    # ══════════════════════════════════════════════════════════════
    # QUERIES
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def get_order(cls, order) -> WorkOrder:
        """Accept a WorkOrder, its pk or its code."""
        if isinstance(order, WorkOrder):
            return order
        lookup = {"code": order} if isinstance(order, str) and not order.isdigit() else {"pk": order}
        try:
            return WorkOrder.objects.get(**lookup)
        except (WorkOrder.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(order=order)

    @classmethod
    def list_orders(
        cls,
        actor: Actor | None = None,
        status: str | None = None,
        kind: str | None = None,
    ):
        """
        Orders, pending first, newest first.

        Non-admin actors only see orders assigned to them.
        """
        qs = WorkOrder.objects.select_related("assigned_to", "item")

        if actor is not None and not actor.is_admin:
            qs = qs.filter(assigned_to_id=actor.actor_id)
        if status:
            qs = qs.filter(status=status)
        if kind:
            qs = qs.filter(kind=kind)

        return qs.annotate(
            pending_first=Case(
                When(status=WorkOrderStatus.PENDING, then=Value(0)),
                default=Value(1),
                output_field=IntegerField(),
            )
        ).order_by("pending_first", "-assigned_at", "-pk")

    # ══════════════════════════════════════════════════════════════
    # INTERNALS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def _lock_order(cls, order) -> WorkOrder:
        pk = cls.get_order(order).pk
        return WorkOrder.objects.select_for_update().get(pk=pk)

    @classmethod
    def _resolve_worker(cls, assignee) -> Worker:
        if isinstance(assignee, Worker):
            worker = assignee
        else:
            try:
                worker = Worker.objects.get(pk=assignee)
            except (Worker.DoesNotExist, ValueError, TypeError):
                raise NotFoundError(worker=assignee)

        if not worker.is_active:
            raise ValidationError(worker=worker.name, message="is not active")
        return worker

    @staticmethod
    def _emit(signal_name: str, order: WorkOrder, actor: Actor | None, **extra) -> None:
        from workshop import signals

        getattr(signals, signal_name).send(
            sender=WorkOrder, work_order=order, actor=actor_label(actor), **extra
        )
