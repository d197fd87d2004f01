"""
Workshop API Serializers.

Model serializers are read-only views of the rows; writes go through the
input serializers and then the service layer, never through save().
"""

from rest_framework import serializers

from workshop.models import (
    Direction,
    EntryKind,
    Item,
    ItemCategory,
    RecipeLine,
    Transaction,
    Worker,
    WorkOrder,
    WorkOrderKind,
)


class RecipeLineSerializer(serializers.ModelSerializer):
    """Serializer for RecipeLine model."""

    class Meta:
        model = RecipeLine
        fields = ["ingredient", "ingredient_name", "quantity_required", "position"]
        read_only_fields = fields


class ItemSerializer(serializers.ModelSerializer):
    """Serializer for Item model."""

    recipe = RecipeLineSerializer(source="recipe_lines", many=True, read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)
    stock_value = serializers.DecimalField(max_digits=18, decimal_places=2, read_only=True)

    class Meta:
        model = Item
        fields = [
            "id",
            "uuid",
            "code",
            "name",
            "category",
            "quantity",
            "reorder_level",
            "unit_price",
            "is_low_stock",
            "stock_value",
            "recipe",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ItemCreateSerializer(serializers.Serializer):
    """Input for creating an item."""

    name = serializers.CharField(max_length=200)
    category = serializers.ChoiceField(
        choices=ItemCategory.choices, default=ItemCategory.RAW_MATERIAL
    )
    quantity = serializers.IntegerField(min_value=0, default=0)
    reorder_level = serializers.IntegerField(min_value=0, required=False)
    unit_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, default=0
    )
    code = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class RecipeLineInputSerializer(serializers.Serializer):
    ingredient = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1)


class RecipeInputSerializer(serializers.Serializer):
    """Input for replacing a recipe."""

    lines = RecipeLineInputSerializer(many=True, allow_empty=True)


class StockAdjustSerializer(serializers.Serializer):
    """Input for a manual stock correction."""

    adjustment = serializers.IntegerField(help_text="Signed change, e.g. 50 or -3")
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")

    def validate_adjustment(self, value):
        if value == 0:
            raise serializers.ValidationError("Adjustment cannot be zero.")
        return value


class TransactionSerializer(serializers.ModelSerializer):
    """Serializer for Transaction model."""

    work_order_code = serializers.SerializerMethodField()
    value = serializers.DecimalField(max_digits=18, decimal_places=2, read_only=True)

    class Meta:
        model = Transaction
        fields = [
            "id",
            "item",
            "item_name",
            "item_code",
            "direction",
            "kind",
            "quantity",
            "reason",
            "unit_price",
            "value",
            "work_order",
            "work_order_code",
            "actor",
            "created_at",
        ]
        read_only_fields = fields

    def get_work_order_code(self, obj) -> str:
        return obj.work_order.code if obj.work_order_id else ""


class TransactionFilterSerializer(serializers.Serializer):
    """Query-string filters for the ledger."""

    item = serializers.IntegerField(required=False)
    kind = serializers.ChoiceField(choices=EntryKind.choices, required=False)
    direction = serializers.ChoiceField(choices=Direction.choices, required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)


class WorkerSerializer(serializers.ModelSerializer):
    """Serializer for Worker model."""

    class Meta:
        model = Worker
        fields = ["id", "name", "employee_code", "role", "is_active"]
        read_only_fields = fields


class WorkOrderSerializer(serializers.ModelSerializer):
    """Serializer for WorkOrder model."""

    has_proof = serializers.BooleanField(read_only=True)
    location = serializers.DictField(read_only=True, allow_null=True)
    requirements = serializers.ListField(read_only=True)

    class Meta:
        model = WorkOrder
        fields = [
            "uuid",
            "code",
            "kind",
            "status",
            "assigned_to",
            "assignee_name",
            "assignee_code",
            "item",
            "item_name",
            "item_code",
            "quantity",
            "client_name",
            "requirements",
            "has_proof",
            "proof_photo",
            "location",
            "assigned_at",
            "completed_at",
            "cancelled_at",
            "created_by",
            "notes",
        ]
        read_only_fields = fields


class WorkOrderIssueSerializer(serializers.Serializer):
    """Input for issuing a work order."""

    assignee = serializers.IntegerField(help_text="Worker id")
    item = serializers.IntegerField(help_text="Item id")
    quantity = serializers.IntegerField(min_value=1)
    kind = serializers.ChoiceField(choices=WorkOrderKind.choices)
    client_name = serializers.CharField(
        max_length=200, required=False, allow_blank=True, default=""
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class ProofSerializer(serializers.Serializer):
    photo = serializers.CharField(required=False, allow_blank=True, default="")
    location = serializers.DictField(
        child=serializers.FloatField(), required=False, default=dict
    )


class WorkOrderSettleSerializer(serializers.Serializer):
    """Input for complete / deliver."""

    client_name = serializers.CharField(
        max_length=200, required=False, allow_blank=True, allow_null=True, default=None
    )
    proof = ProofSerializer(required=False, allow_null=True, default=None)


class WorkOrderCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
