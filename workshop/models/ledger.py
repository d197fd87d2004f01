"""
Transaction model.

Transaction = Immutable ledger entry for one stock-quantity change.

Entries are write-once: they are created by the stock mutator (or, for
revenue records, by the work order engine) and never updated. The only
allowed removal is the administrative delete in workshop.services.ledger.
"""

from decimal import Decimal

from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from workshop.exceptions import ImmutableEntryError

# Fits the longest composed reason: two 200-character names plus wording.
REASON_MAX_LENGTH = 500


class Direction(models.TextChoices):
    """Stock direction."""

    IN = "IN", _("In")
    OUT = "OUT", _("Out")


class EntryKind(models.TextChoices):
    """
    Structured purpose of a ledger entry.

    SALE entries recognize revenue; they never move stock.
    Every other kind moves stock by exactly its signed quantity.
    """

    MANUAL = "manual", _("Manual Adjustment")
    MATERIAL_USE = "material_use", _("Material Use")
    PRODUCTION = "production", _("Production")
    DISPATCH = "dispatch", _("Dispatch")
    REVERSAL = "reversal", _("Reversal")
    SALE = "sale", _("Sale")


STOCK_MOVING_KINDS = [
    EntryKind.MANUAL,
    EntryKind.MATERIAL_USE,
    EntryKind.PRODUCTION,
    EntryKind.DISPATCH,
    EntryKind.REVERSAL,
]


class TransactionQuerySet(models.QuerySet):
    """Ledger queries. Bulk updates are refused."""

    def update(self, **kwargs):
        raise ImmutableEntryError(fields=sorted(kwargs))

    def stock_moves(self):
        return self.filter(kind__in=STOCK_MOVING_KINDS)

    def revenue(self):
        return self.filter(kind=EntryKind.SALE)

    def newest_first(self):
        return self.order_by("-created_at", "-pk")


class Transaction(models.Model):
    """
    Ledger entry.

    quantity is always positive; direction carries the sign.
    item_name, item_code and unit_price are snapshots taken when the
    entry is written.
    """

    item = models.ForeignKey(
        "workshop.Item",
        on_delete=models.PROTECT,
        related_name="transactions",
        verbose_name=_("Item"),
    )
    item_name = models.CharField(
        max_length=200,
        verbose_name=_("Item Name"),
    )
    item_code = models.CharField(
        max_length=50,
        blank=True,
        verbose_name=_("Item Code"),
    )

    direction = models.CharField(
        max_length=3,
        choices=Direction.choices,
        verbose_name=_("Direction"),
    )
    quantity = models.PositiveIntegerField(
        verbose_name=_("Quantity"),
    )
    kind = models.CharField(
        max_length=20,
        choices=EntryKind.choices,
        default=EntryKind.MANUAL,
        db_index=True,
        verbose_name=_("Kind"),
    )
    reason = models.CharField(
        max_length=REASON_MAX_LENGTH,
        default="Manual Update",
        verbose_name=_("Reason"),
    )
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        verbose_name=_("Unit Price"),
        help_text=_("Item price when the entry was written"),
    )

    # Originating work order (optional)
    work_order = models.ForeignKey(
        "workshop.WorkOrder",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="transactions",
        verbose_name=_("Work Order"),
    )

    # Audit
    actor = models.CharField(
        max_length=255,
        blank=True,
        verbose_name=_("Actor"),
        help_text=_("Ex: 'worker:7', 'admin:maria', 'system'"),
    )
    created_at = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        verbose_name=_("Date"),
    )

    objects = TransactionQuerySet.as_manager()

    class Meta:
        db_table = "workshop_transaction"
        verbose_name = _("Transaction")
        verbose_name_plural = _("Transactions")
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["item", "created_at"], name="workshop_tx_item_date_idx"),
            models.Index(fields=["work_order"], name="workshop_tx_work_order_idx"),
            models.Index(fields=["kind", "created_at"], name="workshop_tx_kind_date_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="workshop_transaction_quantity_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.direction} {self.quantity} {self.item_name} ({self.reason})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableEntryError(entry=self.pk)
        super().save(*args, **kwargs)

    @property
    def signed_quantity(self) -> int:
        if self.direction == Direction.IN:
            return self.quantity
        return -self.quantity

    @property
    def moves_stock(self) -> bool:
        return self.kind != EntryKind.SALE

    @property
    def is_revenue(self) -> bool:
        return self.kind == EntryKind.SALE

    @property
    def value(self) -> Decimal:
        return self.quantity * self.unit_price
