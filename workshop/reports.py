"""
Workshop Reports.

Revenue, dashboard figures and flat report rows over the catalog and ledger.
Uses aggregate()/annotate() so totals are computed in SQL.
"""

from datetime import date
from decimal import Decimal
from typing import Any

from django.db.models import (
    Count,
    DecimalField,
    ExpressionWrapper,
    F,
    Q,
    Sum,
)
from django.db.models.functions import Coalesce

from workshop.models import EntryKind, Item, Transaction, WorkOrder, WorkOrderStatus
from workshop.results import DashboardSummary

ZERO = Decimal("0.00")

_line_value = ExpressionWrapper(
    F("quantity") * F("unit_price"),
    output_field=DecimalField(max_digits=18, decimal_places=2),
)


def _sum_value(field_value=_line_value, **filter_kwargs):
    return Coalesce(
        Sum(field_value, **filter_kwargs),
        ZERO,
        output_field=DecimalField(max_digits=18, decimal_places=2),
    )


class ShopReports:
    """Read-only reporting."""

    @classmethod
    def revenue(
        cls,
        date_from: date = None,
        date_to: date = None,
        client_name: str = None,
    ) -> Decimal:
        """
        Revenue recognized by sale entries.

        Sum of quantity x unit price (the price snapshotted at sale time),
        optionally restricted to a date range and to one client.
        """
        qs = Transaction.objects.revenue()

        if date_from:
            qs = qs.filter(created_at__date__gte=date_from)
        if date_to:
            qs = qs.filter(created_at__date__lte=date_to)
        if client_name:
            qs = qs.filter(work_order__client_name=client_name)

        return qs.aggregate(total=_sum_value())["total"]

    @classmethod
    def dashboard(cls) -> DashboardSummary:
        """
        Headline numbers, one query per table.

        Returns:
            DashboardSummary(total_stock_value, low_stock_count,
                             pending_jobs, total_revenue)
        """
        stock = Item.objects.aggregate(
            total_value=_sum_value(),
            low_stock=Count("id", filter=Q(quantity__lt=F("reorder_level"))),
        )
        pending = WorkOrder.objects.filter(status=WorkOrderStatus.PENDING).count()

        return DashboardSummary(
            total_stock_value=stock["total_value"],
            low_stock_count=stock["low_stock"],
            pending_jobs=pending,
            total_revenue=cls.revenue(),
        )

    @classmethod
    def transaction_report(cls, **filters) -> list[dict[str, Any]]:
        """
        Ledger rows for export, newest first.

        Accepts the same filters as Shop.query(): item, work_order, kind,
        direction, date_from, date_to.
        """
        from workshop.services.ledger import ShopLedger

        qs = ShopLedger.query(**filters).select_related("work_order")

        rows = []
        for entry in qs:
            order = entry.work_order
            rows.append(
                {
                    "date": entry.created_at,
                    "item": entry.item_name,
                    "code": entry.item_code,
                    "direction": entry.direction,
                    "kind": entry.kind,
                    "quantity": entry.quantity,
                    "unit_price": entry.unit_price,
                    "value": entry.value,
                    "reason": entry.reason,
                    "order": order.code if order else "",
                    "assignee": order.assignee_name if order else "",
                    "client": order.client_name if order else "",
                    "has_proof": bool(order and order.has_proof),
                    "actor": entry.actor,
                }
            )
        return rows

    @classmethod
    def stock_report(cls, category: str = None) -> list[dict[str, Any]]:
        """Current stock with extended value, by name."""
        qs = Item.objects.all()
        if category:
            qs = qs.filter(category=category)

        rows = qs.annotate(value=_line_value).order_by("name", "pk").values(
            "name",
            "code",
            "category",
            "quantity",
            "reorder_level",
            "unit_price",
            "value",
        )

        return [
            {
                "item": row["name"],
                "code": row["code"],
                "category": row["category"],
                "quantity": row["quantity"],
                "reorder_level": row["reorder_level"],
                "unit_price": row["unit_price"],
                "value": row["value"],
                "low_stock": row["quantity"] < row["reorder_level"],
            }
            for row in rows
        ]

    @classmethod
    def sales_by_client(cls) -> list[dict[str, Any]]:
        """Revenue grouped by client, largest first."""
        rows = (
            Transaction.objects.revenue()
            .values(client=F("work_order__client_name"))
            .annotate(total=_sum_value(), entries=Count("id"))
            .order_by("-total", "client")
        )
        return [
            {"client": row["client"] or "", "total": row["total"], "entries": row["entries"]}
            for row in rows
        ]
