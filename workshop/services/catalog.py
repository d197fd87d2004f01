"""
Catalog service -- create items, edit recipes, list items.

The catalog never writes ledger entries itself: an opening quantity on
create_item() goes through the stock service like any other change.
"""

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F

from workshop.conf import get_setting
from workshop.exceptions import NotFoundError, ValidationError
from workshop.models import EntryKind, Item, ItemCategory, RecipeLine
from workshop.permissions import actor_label, require_admin
from workshop.protocols.identity import Actor
from workshop.services.ledger import resolve_item
from workshop.services.stock import ShopStock
from workshop.validators import to_price, to_quantity

logger = logging.getLogger(__name__)


class ShopCatalog:
    """Item catalog operations."""

    @classmethod
    def create_item(
        cls,
        name: str,
        category: str = ItemCategory.RAW_MATERIAL,
        quantity=0,
        reorder_level=None,
        unit_price=Decimal("0"),
        code: str = "",
        notes: str = "",
        actor: Actor | None = None,
    ) -> Item:
        """
        Add an item to the catalog.

        A non-zero opening quantity is booked as a manual IN entry.

        Example:
            screw = shop.create_item("Screw", quantity=100, unit_price=2)
            widget = shop.create_item("Widget", ItemCategory.FINISHED_GOOD, unit_price=100)
        """
        require_admin(actor, "create_item")

        name = (name or "").strip()
        if not name:
            raise ValidationError(field="name", message="is required")
        if category not in ItemCategory.values:
            raise ValidationError(field="category", value=category)

        opening = 0
        if quantity not in (None, 0, "0", ""):
            opening = to_quantity(quantity)

        if reorder_level is None:
            reorder_level = get_setting("DEFAULT_REORDER_LEVEL")
        elif reorder_level != 0:
            reorder_level = to_quantity(reorder_level, "reorder_level")

        code = (code or "").strip()

        with transaction.atomic():
            if code and Item.objects.filter(code=code).exists():
                raise ValidationError(field="code", value=code, message="already in use")

            item = Item.objects.create(
                name=name,
                category=category,
                reorder_level=reorder_level,
                unit_price=to_price(unit_price),
                code=code,
                notes=notes,
            )

            if opening:
                ShopStock.adjust(
                    item, opening, "Opening balance", kind=EntryKind.MANUAL, actor=actor
                )

        logger.info(
            f"Created item {item.name}",
            extra={
                "item": item.pk,
                "category": item.category,
                "quantity": item.quantity,
                "actor": actor_label(actor),
            },
        )

        return item

    @classmethod
    def set_recipe(cls, item, lines: list[dict], actor: Actor | None = None) -> list[RecipeLine]:
        """
        Replace an item's recipe wholesale.

        Args:
            item: Item (or pk) to edit
            lines: [{"ingredient": <Item or pk>, "quantity": 2}, ...] in recipe order

        Ingredient names are snapshotted now. An empty list clears the recipe.

        Raises:
            NotFoundError: item or an ingredient does not exist
            ValidationError: bad quantity, duplicate ingredient or self-reference
        """
        require_admin(actor, "set_recipe")

        item = resolve_item(item)

        resolved = []
        seen = set()
        for index, line in enumerate(lines or []):
            try:
                ingredient_ref = line["ingredient"]
            except (KeyError, TypeError):
                raise ValidationError(line=index, field="ingredient", message="is required")

            try:
                ingredient = resolve_item(ingredient_ref)
            except NotFoundError:
                raise NotFoundError(item=item.name, ingredient=ingredient_ref)
            quantity = to_quantity(line.get("quantity"), f"lines[{index}].quantity")

            if ingredient.pk == item.pk:
                raise ValidationError(line=index, message="item cannot be its own ingredient")
            if ingredient.pk in seen:
                raise ValidationError(line=index, ingredient=ingredient.name, message="duplicated")
            seen.add(ingredient.pk)

            resolved.append((ingredient, quantity))

        with transaction.atomic():
            item.recipe_lines.all().delete()
            created = RecipeLine.objects.bulk_create(
                [
                    RecipeLine(
                        item=item,
                        ingredient=ingredient,
                        ingredient_name=ingredient.name,
                        quantity_required=quantity,
                        position=position,
                    )
                    for position, (ingredient, quantity) in enumerate(resolved)
                ]
            )

        logger.info(
            f"Recipe for {item.name} set: {len(created)} ingredient(s)",
            extra={
                "item": item.pk,
                "ingredients": [ingredient.pk for ingredient, _ in resolved],
                "actor": actor_label(actor),
            },
        )

        return created

    @classmethod
    def get_item(cls, item_id) -> Item:
        return resolve_item(item_id)

    @classmethod
    def list_items(cls, category: str | None = None):
        """All items ordered by name."""
        qs = Item.objects.prefetch_related("recipe_lines")
        if category:
            qs = qs.filter(category=category)
        return qs.order_by("name", "pk")

    @classmethod
    def low_stock(cls):
        """Items below their reorder level."""
        return Item.objects.filter(quantity__lt=F("reorder_level")).order_by("name", "pk")

    @classmethod
    def list_workers(cls):
        """Workers orders can be assigned to (everyone but admins)."""
        from workshop.models import Worker

        return Worker.objects.assignable().order_by("name")
