"""
Item and RecipeLine models.

Item = Stocked raw material or finished good.
RecipeLine = One ingredient of an item's recipe (BOM), quantity per unit built.

The quantity field is only ever changed through the stock mutator
(workshop.services.stock), which pairs every change with a ledger entry.
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords

from workshop.conf import get_setting


def default_reorder_level() -> int:
    return get_setting("DEFAULT_REORDER_LEVEL")


class ItemCategory(models.TextChoices):
    """Item category."""

    RAW_MATERIAL = "raw_material", _("Raw Material")
    FINISHED_GOOD = "finished_good", _("Finished Good")


class Item(models.Model):
    """
    Stocked item.

    unit_price is the cost price for raw materials and the selling
    price for finished goods.
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
        max_length=50,
        blank=True,
        verbose_name=_("Code"),
        help_text=_("External or customs code (optional)"),
    )
    name = models.CharField(
        max_length=200,
        verbose_name=_("Name"),
    )
    category = models.CharField(
        max_length=20,
        choices=ItemCategory.choices,
        default=ItemCategory.RAW_MATERIAL,
        db_index=True,
        verbose_name=_("Category"),
    )

    # Stock
    quantity = models.IntegerField(
        default=0,
        editable=False,
        verbose_name=_("Quantity"),
        help_text=_("Changed only through stock adjustments"),
    )
    reorder_level = models.PositiveIntegerField(
        default=default_reorder_level,
        verbose_name=_("Reorder Level"),
        help_text=_("Low stock alert below this quantity"),
    )

    # Pricing
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        verbose_name=_("Unit Price"),
        help_text=_("Cost for raw materials, selling price for finished goods"),
    )

    notes = models.TextField(
        blank=True,
        verbose_name=_("Notes"),
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("created at"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("updated at"))

    # History
    history = HistoricalRecords()

    class Meta:
        db_table = "workshop_item"
        verbose_name = _("Item")
        verbose_name_plural = _("Items")
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="workshop_item_name_idx"),
            models.Index(fields=["category", "name"], name="workshop_item_cat_name_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gte=0),
                name="workshop_item_quantity_non_negative",
            ),
            models.UniqueConstraint(
                fields=["code"],
                condition=~Q(code=""),
                name="workshop_item_unique_code",
            ),
        ]

    def clean(self):
        super().clean()
        if not (self.name or "").strip():
            raise ValidationError({"name": _("Name is required.")})
        if self.unit_price is not None and self.unit_price < 0:
            raise ValidationError({"unit_price": _("Must not be negative.")})

    def save(self, *args, **kwargs):
        """
        Save catalog fields without ever writing quantity on an update.

        An instance loaded before a stock adjustment would otherwise put its
        old quantity back. New rows are inserted as usual.
        """
        if not self._state.adding and self.pk is not None:
            fields = kwargs.get("update_fields")
            if fields is None:
                fields = [f.name for f in self._meta.concrete_fields if not f.primary_key]
            kwargs["update_fields"] = [name for name in fields if name != "quantity"]
            self.quantity = Item.objects.values_list("quantity", flat=True).get(pk=self.pk)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        if self.code:
            return f"{self.name} ({self.code})"
        return self.name

    @property
    def is_finished_good(self) -> bool:
        return self.category == ItemCategory.FINISHED_GOOD

    @property
    def is_low_stock(self) -> bool:
        return self.quantity < self.reorder_level

    @property
    def stock_value(self) -> Decimal:
        return self.quantity * self.unit_price

    @property
    def has_recipe(self) -> bool:
        return self.recipe_lines.exists()

    def get_recipe(self) -> list["RecipeLine"]:
        """Recipe lines in recipe order."""
        return list(self.recipe_lines.select_related("ingredient").order_by("position", "id"))


class RecipeLine(models.Model):
    """
    Ingredient of an item's recipe.

    ingredient_name is a snapshot taken when the recipe is edited, so old
    recipes stay readable after an ingredient is renamed.
    """

    item = models.ForeignKey(
        Item,
        on_delete=models.CASCADE,
        related_name="recipe_lines",
        verbose_name=_("Item"),
    )
    ingredient = models.ForeignKey(
        Item,
        on_delete=models.PROTECT,
        related_name="used_in",
        verbose_name=_("Ingredient"),
    )
    ingredient_name = models.CharField(
        max_length=200,
        verbose_name=_("Ingredient Name"),
        help_text=_("Name at the time the recipe was edited"),
    )
    quantity_required = models.PositiveIntegerField(
        verbose_name=_("Quantity Required"),
        help_text=_("Quantity per one unit built"),
    )
    position = models.PositiveSmallIntegerField(
        default=0,
        verbose_name=_("Position"),
    )

    class Meta:
        db_table = "workshop_recipe_line"
        verbose_name = _("Recipe Line")
        verbose_name_plural = _("Recipe Lines")
        ordering = ["item", "position", "id"]
        indexes = [
            models.Index(fields=["item", "position"], name="workshop_recipe_item_pos_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["item", "ingredient"],
                name="workshop_recipe_line_unique_ingredient",
            ),
            models.CheckConstraint(
                condition=Q(quantity_required__gt=0),
                name="workshop_recipe_line_quantity_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.quantity_required}x {self.ingredient_name}"
