"""
WorkOrder model.

WorkOrder = Delegated unit of work (build or deliver) that commits stock
when issued and settles exactly once.

State transitions live on the model; stock movements are coordinated by
workshop.services.orders so they share one unit of work with the order.
"""

import logging
import uuid

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords

from workshop.conf import get_setting
from workshop.exceptions import AlreadySettledError
from workshop.models.sequence import CodeSequence

logger = logging.getLogger(__name__)


class WorkOrderKind(models.TextChoices):
    """What the assignee was given the material for."""

    ASSEMBLY = "ASSEMBLY", _("Assembly")
    SALES = "SALES", _("Sales")


class WorkOrderStatus(models.TextChoices):
    """WorkOrder lifecycle status."""

    PENDING = "PENDING", _("Pending")
    COMPLETED = "COMPLETED", _("Completed")
    CANCELLED = "CANCELLED", _("Cancelled")


TERMINAL_STATUSES = [WorkOrderStatus.COMPLETED, WorkOrderStatus.CANCELLED]


class WorkOrder(models.Model):
    """
    Work order.

    Status: PENDING → COMPLETED
            PENDING → CANCELLED

    Assignee and item names are snapshots taken at issuance.

    Metadata structure:
        {
            'requirements': [
                {'ingredient_id': 3, 'ingredient_name': 'Screw', 'required': 20},
                ...
            ],
            'settled_by': 'worker:7',
            'cancel_reason': 'Returned unsold'
        }
    """

    # UUID for external references
    uuid = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
        verbose_name=_("UUID"),
    )

    # Identification
    code = models.CharField(
        unique=True,
        max_length=50,
        blank=True,
        verbose_name=_("Code"),
        help_text=_("Unique identifier (auto-generated if empty)"),
    )

    # Assignment
    assigned_to = models.ForeignKey(
        "workshop.Worker",
        on_delete=models.PROTECT,
        related_name="work_orders",
        verbose_name=_("Assigned To"),
    )
    assignee_name = models.CharField(
        max_length=200,
        verbose_name=_("Assignee Name"),
    )
    assignee_code = models.CharField(
        max_length=50,
        blank=True,
        verbose_name=_("Assignee Code"),
    )

    # Target item
    item = models.ForeignKey(
        "workshop.Item",
        on_delete=models.PROTECT,
        related_name="work_orders",
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

    quantity = models.PositiveIntegerField(
        verbose_name=_("Quantity"),
    )
    kind = models.CharField(
        max_length=20,
        choices=WorkOrderKind.choices,
        default=WorkOrderKind.ASSEMBLY,
        db_index=True,
        verbose_name=_("Kind"),
    )
    client_name = models.CharField(
        max_length=200,
        blank=True,
        verbose_name=_("Client"),
    )

    # Status
    status = models.CharField(
        max_length=20,
        choices=WorkOrderStatus.choices,
        default=WorkOrderStatus.PENDING,
        db_index=True,
        verbose_name=_("Status"),
    )

    # Dates
    assigned_at = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        verbose_name=_("Assigned At"),
    )
    completed_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_("Completed At"),
    )
    cancelled_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_("Cancelled At"),
    )

    # Proof of settlement (stored verbatim, never interpreted)
    proof_photo = models.TextField(
        blank=True,
        verbose_name=_("Proof Photo"),
        help_text=_("Opaque photo payload (e.g. base64)"),
    )
    proof_lat = models.FloatField(
        null=True,
        blank=True,
        verbose_name=_("Latitude"),
    )
    proof_lng = models.FloatField(
        null=True,
        blank=True,
        verbose_name=_("Longitude"),
    )

    # Flexibility
    metadata = models.JSONField(
        default=dict,
        blank=True,
        verbose_name=_("Metadata"),
    )
    notes = models.TextField(
        blank=True,
        verbose_name=_("Notes"),
    )

    # Audit
    created_by = models.CharField(
        max_length=255,
        blank=True,
        verbose_name=_("Created By"),
        help_text=_("Ex: 'admin:maria', 'system'"),
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name=_("Updated At"),
    )

    # History
    history = HistoricalRecords()

    class Meta:
        db_table = "workshop_work_order"
        verbose_name = _("Work Order")
        verbose_name_plural = _("Work Orders")
        ordering = ["-assigned_at"]
        indexes = [
            models.Index(fields=["status", "assigned_at"], name="workshop_wo_status_idx"),
            models.Index(fields=["assigned_to", "status"], name="workshop_wo_assignee_idx"),
            models.Index(fields=["item", "status"], name="workshop_wo_item_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.code} - {self.quantity}x {self.item_name} ({self.assignee_name})"

    def save(self, *args, **kwargs):
        """Override save to auto-generate code."""
        if not self.code:
            self.code = self._generate_code()
        super().save(*args, **kwargs)

    def _generate_code(self) -> str:
        """JOB-YYYY-NNNNN, prefix from the CODE_PREFIX setting."""
        return CodeSequence.next_code(get_setting("CODE_PREFIX"))

    # ══════════════════════════════════════════════════════════════
    # STATE TRANSITIONS
    # ══════════════════════════════════════════════════════════════

    def ensure_pending(self):
        """Raise AlreadySettledError unless the order can still transition."""
        if self.status in TERMINAL_STATUSES:
            raise AlreadySettledError(order=self.code, status=self.status)

    def attach_proof(self, proof):
        """Store proof verbatim. proof may be None."""
        if proof is None:
            return
        if proof.photo:
            self.proof_photo = proof.photo
        if proof.lat is not None:
            self.proof_lat = proof.lat
            self.proof_lng = proof.lng

    def mark_completed(self, proof=None, client_name: str | None = None, settled_by: str = ""):
        """
        PENDING → COMPLETED.

        Callers are responsible for the stock side of the settlement and
        for holding a row lock on the order.
        """
        self.ensure_pending()

        self.attach_proof(proof)
        if client_name and client_name.strip():
            self.client_name = client_name.strip()
        self.status = WorkOrderStatus.COMPLETED
        self.completed_at = timezone.now()
        if settled_by:
            self.metadata["settled_by"] = settled_by

        self.save(
            update_fields=[
                "status",
                "completed_at",
                "client_name",
                "proof_photo",
                "proof_lat",
                "proof_lng",
                "metadata",
                "updated_at",
            ]
        )

        logger.info(
            f"WorkOrder {self.code} completed",
            extra={
                "work_order": self.code,
                "kind": self.kind,
                "quantity": self.quantity,
                "has_proof": self.has_proof,
            },
        )

    def mark_cancelled(self, reason: str = "", cancelled_by: str = ""):
        """PENDING → CANCELLED."""
        self.ensure_pending()

        self.status = WorkOrderStatus.CANCELLED
        self.cancelled_at = timezone.now()
        if reason:
            self.metadata["cancel_reason"] = reason
            self.notes = f"{self.notes}\n[CANCELLED] {reason}".strip()
        if cancelled_by:
            self.metadata["cancelled_by"] = cancelled_by

        self.save(update_fields=["status", "cancelled_at", "metadata", "notes", "updated_at"])

        logger.info(f"WorkOrder {self.code} cancelled: {reason}")

    # ══════════════════════════════════════════════════════════════
    # PROPERTIES
    # ══════════════════════════════════════════════════════════════

    @property
    def is_pending(self) -> bool:
        return self.status == WorkOrderStatus.PENDING

    @property
    def is_settled(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def has_proof(self) -> bool:
        return bool(self.proof_photo) or self.proof_lat is not None

    @property
    def location(self) -> dict | None:
        """Proof location as {'lat': ..., 'lng': ...}."""
        if self.proof_lat is None or self.proof_lng is None:
            return None
        return {"lat": self.proof_lat, "lng": self.proof_lng}

    @property
    def requirements(self) -> list[dict]:
        """Material requirements committed at issuance (assembly only)."""
        return self.metadata.get("requirements", [])
