"""
Initial migration for Workshop.

Creates:
- Item, RecipeLine (catalog and recipes)
- Worker
- CodeSequence (atomic WorkOrder codes)
- WorkOrder
- Transaction (ledger)
- History tables for Item, Worker and WorkOrder
"""

import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
import simple_history.models
from django.conf import settings
from django.db import migrations, models

import workshop.models.item


ROLE_CHOICES = [("admin", "Admin"), ("factory", "Factory"), ("delivery", "Delivery")]
CATEGORY_CHOICES = [("raw_material", "Raw Material"), ("finished_good", "Finished Good")]
KIND_CHOICES = [("ASSEMBLY", "Assembly"), ("SALES", "Sales")]
STATUS_CHOICES = [
    ("PENDING", "Pending"),
    ("COMPLETED", "Completed"),
    ("CANCELLED", "Cancelled"),
]
HISTORY_TYPE_CHOICES = [("+", "Created"), ("~", "Changed"), ("-", "Deleted")]


def history_fields():
    return [
        ("history_id", models.AutoField(primary_key=True, serialize=False)),
        ("history_date", models.DateTimeField(db_index=True)),
        ("history_change_reason", models.CharField(max_length=100, null=True)),
        ("history_type", models.CharField(choices=HISTORY_TYPE_CHOICES, max_length=1)),
        (
            "history_user",
            models.ForeignKey(
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to=settings.AUTH_USER_MODEL,
            ),
        ),
    ]


def history_options(verbose_name, verbose_name_plural):
    return {
        "verbose_name": f"historical {verbose_name}",
        "verbose_name_plural": f"historical {verbose_name_plural}",
        "ordering": ("-history_date", "-history_id"),
        "get_latest_by": ("history_date", "history_id"),
    }


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        # ══════════════════════════════════════════════════════════════
        # ITEM
        # ══════════════════════════════════════════════════════════════
        migrations.CreateModel(
            name="Item",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "uuid",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, unique=True, verbose_name="UUID"
                    ),
                ),
                (
                    "code",
                    models.CharField(
                        blank=True,
                        help_text="External or customs code (optional)",
                        max_length=50,
                        verbose_name="Code",
                    ),
                ),
                ("name", models.CharField(max_length=200, verbose_name="Name")),
                (
                    "category",
                    models.CharField(
                        choices=CATEGORY_CHOICES,
                        db_index=True,
                        default="raw_material",
                        max_length=20,
                        verbose_name="Category",
                    ),
                ),
                (
                    "quantity",
                    models.IntegerField(
                        default=0,
                        editable=False,
                        help_text="Changed only through stock adjustments",
                        verbose_name="Quantity",
                    ),
                ),
                (
                    "reorder_level",
                    models.PositiveIntegerField(
                        default=workshop.models.item.default_reorder_level,
                        help_text="Low stock alert below this quantity",
                        verbose_name="Reorder Level",
                    ),
                ),
                (
                    "unit_price",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        help_text="Cost for raw materials, selling price for finished goods",
                        max_digits=12,
                        verbose_name="Unit Price",
                    ),
                ),
                ("notes", models.TextField(blank=True, verbose_name="Notes")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
            ],
            options={
                "verbose_name": "Item",
                "verbose_name_plural": "Items",
                "db_table": "workshop_item",
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["name"], name="workshop_item_name_idx"),
                    models.Index(
                        fields=["category", "name"], name="workshop_item_cat_name_idx"
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gte", 0)),
                        name="workshop_item_quantity_non_negative",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("code", ""), _negated=True),
                        fields=("code",),
                        name="workshop_item_unique_code",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="RecipeLine",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "ingredient_name",
                    models.CharField(
                        help_text="Name at the time the recipe was edited",
                        max_length=200,
                        verbose_name="Ingredient Name",
                    ),
                ),
                (
                    "quantity_required",
                    models.PositiveIntegerField(
                        help_text="Quantity per one unit built", verbose_name="Quantity Required"
                    ),
                ),
                ("position", models.PositiveSmallIntegerField(default=0, verbose_name="Position")),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="recipe_lines",
                        to="workshop.item",
                        verbose_name="Item",
                    ),
                ),
                (
                    "ingredient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="used_in",
                        to="workshop.item",
                        verbose_name="Ingredient",
                    ),
                ),
            ],
            options={
                "verbose_name": "Recipe Line",
                "verbose_name_plural": "Recipe Lines",
                "db_table": "workshop_recipe_line",
                "ordering": ["item", "position", "id"],
                "indexes": [
                    models.Index(
                        fields=["item", "position"], name="workshop_recipe_item_pos_idx"
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("item", "ingredient"),
                        name="workshop_recipe_line_unique_ingredient",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("quantity_required__gt", 0)),
                        name="workshop_recipe_line_quantity_positive",
                    ),
                ],
            },
        ),
        # ══════════════════════════════════════════════════════════════
        # WORKER
        # ══════════════════════════════════════════════════════════════
        migrations.CreateModel(
            name="Worker",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("name", models.CharField(max_length=200, verbose_name="Name")),
                (
                    "employee_code",
                    models.CharField(
                        blank=True, help_text="Ex: EMP-101", max_length=50, verbose_name="Employee Code"
                    ),
                ),
                (
                    "role",
                    models.CharField(
                        choices=ROLE_CHOICES,
                        db_index=True,
                        default="factory",
                        max_length=20,
                        verbose_name="Role",
                    ),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                (
                    "user",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="worker",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="User",
                    ),
                ),
            ],
            options={
                "verbose_name": "Worker",
                "verbose_name_plural": "Workers",
                "db_table": "workshop_worker",
                "ordering": ["name"],
            },
        ),
        # ══════════════════════════════════════════════════════════════
        # CODE SEQUENCE
        # ══════════════════════════════════════════════════════════════
        migrations.CreateModel(
            name="CodeSequence",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("prefix", models.CharField(max_length=50, unique=True, verbose_name="Prefix")),
                ("last_value", models.PositiveIntegerField(default=0, verbose_name="Last value")),
            ],
            options={
                "verbose_name": "Code Sequence",
                "verbose_name_plural": "Code Sequences",
                "db_table": "workshop_code_sequence",
            },
        ),
        # ══════════════════════════════════════════════════════════════
        # WORK ORDER
        # ══════════════════════════════════════════════════════════════
        migrations.CreateModel(
            name="WorkOrder",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "uuid",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, unique=True, verbose_name="UUID"
                    ),
                ),
                (
                    "code",
                    models.CharField(
                        blank=True,
                        help_text="Unique identifier (auto-generated if empty)",
                        max_length=50,
                        unique=True,
                        verbose_name="Code",
                    ),
                ),
                ("assignee_name", models.CharField(max_length=200, verbose_name="Assignee Name")),
                (
                    "assignee_code",
                    models.CharField(blank=True, max_length=50, verbose_name="Assignee Code"),
                ),
                ("item_name", models.CharField(max_length=200, verbose_name="Item Name")),
                ("item_code", models.CharField(blank=True, max_length=50, verbose_name="Item Code")),
                ("quantity", models.PositiveIntegerField(verbose_name="Quantity")),
                (
                    "kind",
                    models.CharField(
                        choices=KIND_CHOICES,
                        db_index=True,
                        default="ASSEMBLY",
                        max_length=20,
                        verbose_name="Kind",
                    ),
                ),
                ("client_name", models.CharField(blank=True, max_length=200, verbose_name="Client")),
                (
                    "status",
                    models.CharField(
                        choices=STATUS_CHOICES,
                        db_index=True,
                        default="PENDING",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                (
                    "assigned_at",
                    models.DateTimeField(
                        db_index=True,
                        default=django.utils.timezone.now,
                        verbose_name="Assigned At",
                    ),
                ),
                ("completed_at", models.DateTimeField(blank=True, null=True, verbose_name="Completed At")),
                ("cancelled_at", models.DateTimeField(blank=True, null=True, verbose_name="Cancelled At")),
                (
                    "proof_photo",
                    models.TextField(
                        blank=True,
                        help_text="Opaque photo payload (e.g. base64)",
                        verbose_name="Proof Photo",
                    ),
                ),
                ("proof_lat", models.FloatField(blank=True, null=True, verbose_name="Latitude")),
                ("proof_lng", models.FloatField(blank=True, null=True, verbose_name="Longitude")),
                ("metadata", models.JSONField(blank=True, default=dict, verbose_name="Metadata")),
                ("notes", models.TextField(blank=True, verbose_name="Notes")),
                (
                    "created_by",
                    models.CharField(
                        blank=True,
                        help_text="Ex: 'admin:maria', 'system'",
                        max_length=255,
                        verbose_name="Created By",
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                (
                    "assigned_to",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="work_orders",
                        to="workshop.worker",
                        verbose_name="Assigned To",
                    ),
                ),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="work_orders",
                        to="workshop.item",
                        verbose_name="Item",
                    ),
                ),
            ],
            options={
                "verbose_name": "Work Order",
                "verbose_name_plural": "Work Orders",
                "db_table": "workshop_work_order",
                "ordering": ["-assigned_at"],
                "indexes": [
                    models.Index(
                        fields=["status", "assigned_at"], name="workshop_wo_status_idx"
                    ),
                    models.Index(
                        fields=["assigned_to", "status"], name="workshop_wo_assignee_idx"
                    ),
                    models.Index(fields=["item", "status"], name="workshop_wo_item_idx"),
                ],
            },
        ),
        # ══════════════════════════════════════════════════════════════
        # LEDGER
        # ══════════════════════════════════════════════════════════════
        migrations.CreateModel(
            name="Transaction",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("item_name", models.CharField(max_length=200, verbose_name="Item Name")),
                ("item_code", models.CharField(blank=True, max_length=50, verbose_name="Item Code")),
                (
                    "direction",
                    models.CharField(
                        choices=[("IN", "In"), ("OUT", "Out")], max_length=3, verbose_name="Direction"
                    ),
                ),
                ("quantity", models.PositiveIntegerField(verbose_name="Quantity")),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("manual", "Manual Adjustment"),
                            ("material_use", "Material Use"),
                            ("production", "Production"),
                            ("dispatch", "Dispatch"),
                            ("reversal", "Reversal"),
                            ("sale", "Sale"),
                        ],
                        db_index=True,
                        default="manual",
                        max_length=20,
                        verbose_name="Kind",
                    ),
                ),
                (
                    "reason",
                    models.CharField(default="Manual Update", max_length=500, verbose_name="Reason"),
                ),
                (
                    "unit_price",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        help_text="Item price when the entry was written",
                        max_digits=12,
                        verbose_name="Unit Price",
                    ),
                ),
                (
                    "actor",
                    models.CharField(
                        blank=True,
                        help_text="Ex: 'worker:7', 'admin:maria', 'system'",
                        max_length=255,
                        verbose_name="Actor",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        db_index=True, default=django.utils.timezone.now, verbose_name="Date"
                    ),
                ),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="workshop.item",
                        verbose_name="Item",
                    ),
                ),
                (
                    "work_order",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="workshop.workorder",
                        verbose_name="Work Order",
                    ),
                ),
            ],
            options={
                "verbose_name": "Transaction",
                "verbose_name_plural": "Transactions",
                "db_table": "workshop_transaction",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(
                        fields=["item", "created_at"], name="workshop_tx_item_date_idx"
                    ),
                    models.Index(fields=["work_order"], name="workshop_tx_work_order_idx"),
                    models.Index(
                        fields=["kind", "created_at"], name="workshop_tx_kind_date_idx"
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0)),
                        name="workshop_transaction_quantity_positive",
                    ),
                ],
            },
        ),
        # ══════════════════════════════════════════════════════════════
        # HISTORY
        # ══════════════════════════════════════════════════════════════
        migrations.CreateModel(
            name="HistoricalItem",
            fields=[
                (
                    "id",
                    models.BigIntegerField(
                        auto_created=True, blank=True, db_index=True, verbose_name="ID"
                    ),
                ),
                (
                    "uuid",
                    models.UUIDField(
                        db_index=True, default=uuid.uuid4, editable=False, verbose_name="UUID"
                    ),
                ),
                (
                    "code",
                    models.CharField(
                        blank=True,
                        help_text="External or customs code (optional)",
                        max_length=50,
                        verbose_name="Code",
                    ),
                ),
                ("name", models.CharField(max_length=200, verbose_name="Name")),
                (
                    "category",
                    models.CharField(
                        choices=CATEGORY_CHOICES,
                        db_index=True,
                        default="raw_material",
                        max_length=20,
                        verbose_name="Category",
                    ),
                ),
                (
                    "quantity",
                    models.IntegerField(
                        default=0,
                        editable=False,
                        help_text="Changed only through stock adjustments",
                        verbose_name="Quantity",
                    ),
                ),
                (
                    "reorder_level",
                    models.PositiveIntegerField(
                        default=workshop.models.item.default_reorder_level,
                        help_text="Low stock alert below this quantity",
                        verbose_name="Reorder Level",
                    ),
                ),
                (
                    "unit_price",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        help_text="Cost for raw materials, selling price for finished goods",
                        max_digits=12,
                        verbose_name="Unit Price",
                    ),
                ),
                ("notes", models.TextField(blank=True, verbose_name="Notes")),
                (
                    "created_at",
                    models.DateTimeField(blank=True, editable=False, verbose_name="created at"),
                ),
                (
                    "updated_at",
                    models.DateTimeField(blank=True, editable=False, verbose_name="updated at"),
                ),
                *history_fields(),
            ],
            options=history_options("Item", "Items"),
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        migrations.CreateModel(
            name="HistoricalWorker",
            fields=[
                (
                    "id",
                    models.BigIntegerField(
                        auto_created=True, blank=True, db_index=True, verbose_name="ID"
                    ),
                ),
                ("name", models.CharField(max_length=200, verbose_name="Name")),
                (
                    "employee_code",
                    models.CharField(
                        blank=True, help_text="Ex: EMP-101", max_length=50, verbose_name="Employee Code"
                    ),
                ),
                (
                    "role",
                    models.CharField(
                        choices=ROLE_CHOICES,
                        db_index=True,
                        default="factory",
                        max_length=20,
                        verbose_name="Role",
                    ),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                (
                    "created_at",
                    models.DateTimeField(blank=True, editable=False, verbose_name="created at"),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        db_constraint=False,
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="User",
                    ),
                ),
                *history_fields(),
            ],
            options=history_options("Worker", "Workers"),
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        migrations.CreateModel(
            name="HistoricalWorkOrder",
            fields=[
                (
                    "id",
                    models.BigIntegerField(
                        auto_created=True, blank=True, db_index=True, verbose_name="ID"
                    ),
                ),
                (
                    "uuid",
                    models.UUIDField(
                        db_index=True, default=uuid.uuid4, editable=False, verbose_name="UUID"
                    ),
                ),
                (
                    "code",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Unique identifier (auto-generated if empty)",
                        max_length=50,
                        verbose_name="Code",
                    ),
                ),
                ("assignee_name", models.CharField(max_length=200, verbose_name="Assignee Name")),
                (
                    "assignee_code",
                    models.CharField(blank=True, max_length=50, verbose_name="Assignee Code"),
                ),
                ("item_name", models.CharField(max_length=200, verbose_name="Item Name")),
                ("item_code", models.CharField(blank=True, max_length=50, verbose_name="Item Code")),
                ("quantity", models.PositiveIntegerField(verbose_name="Quantity")),
                (
                    "kind",
                    models.CharField(
                        choices=KIND_CHOICES,
                        db_index=True,
                        default="ASSEMBLY",
                        max_length=20,
                        verbose_name="Kind",
                    ),
                ),
                ("client_name", models.CharField(blank=True, max_length=200, verbose_name="Client")),
                (
                    "status",
                    models.CharField(
                        choices=STATUS_CHOICES,
                        db_index=True,
                        default="PENDING",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                (
                    "assigned_at",
                    models.DateTimeField(
                        db_index=True,
                        default=django.utils.timezone.now,
                        verbose_name="Assigned At",
                    ),
                ),
                ("completed_at", models.DateTimeField(blank=True, null=True, verbose_name="Completed At")),
                ("cancelled_at", models.DateTimeField(blank=True, null=True, verbose_name="Cancelled At")),
                (
                    "proof_photo",
                    models.TextField(
                        blank=True,
                        help_text="Opaque photo payload (e.g. base64)",
                        verbose_name="Proof Photo",
                    ),
                ),
                ("proof_lat", models.FloatField(blank=True, null=True, verbose_name="Latitude")),
                ("proof_lng", models.FloatField(blank=True, null=True, verbose_name="Longitude")),
                ("metadata", models.JSONField(blank=True, default=dict, verbose_name="Metadata")),
                ("notes", models.TextField(blank=True, verbose_name="Notes")),
                (
                    "created_by",
                    models.CharField(
                        blank=True,
                        help_text="Ex: 'admin:maria', 'system'",
                        max_length=255,
                        verbose_name="Created By",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(blank=True, editable=False, verbose_name="Updated At"),
                ),
                (
                    "assigned_to",
                    models.ForeignKey(
                        blank=True,
                        db_constraint=False,
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to="workshop.worker",
                        verbose_name="Assigned To",
                    ),
                ),
                (
                    "item",
                    models.ForeignKey(
                        blank=True,
                        db_constraint=False,
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to="workshop.item",
                        verbose_name="Item",
                    ),
                ),
                *history_fields(),
            ],
            options=history_options("Work Order", "Work Orders"),
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
    ]
