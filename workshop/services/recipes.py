"""
Recipe resolution.

Given a finished good and a build quantity, expands its recipe into the
ingredient quantities needed and checks them against live stock.

Usage:
    from workshop.services.recipes import ShopRecipes

    for req in ShopRecipes.expand(widget, 10):
        print(f"{req.ingredient_name}: {req.required}")

    ShopRecipes.validate_sufficiency(widget, 10)  # raises on first shortage
"""

from __future__ import annotations

import logging

from workshop.exceptions import InsufficientStockError, NoRecipeError
from workshop.models import Item
from workshop.results import Requirement
from workshop.validators import to_quantity

logger = logging.getLogger(__name__)


class ShopRecipes:
    """Recipe expansion and sufficiency checks. Read-only."""

    @classmethod
    def expand(cls, item: Item, build_quantity) -> list[Requirement]:
        """
        Ingredient requirements for building build_quantity units.

        One Requirement per recipe line, in recipe order:
        required = quantity_required * build_quantity.
        """
        build_quantity = to_quantity(build_quantity)

        return [
            Requirement(
                ingredient_id=line.ingredient_id,
                ingredient_name=line.ingredient_name,
                required=line.quantity_required * build_quantity,
            )
            for line in item.get_recipe()
        ]

    @classmethod
    def validate_sufficiency(cls, item: Item, build_quantity) -> list[Requirement]:
        """
        Check that every ingredient is in stock.

        Fails fast: raises InsufficientStockError for the FIRST short
        ingredient in recipe order, not a report of all of them.

        Raises:
            NoRecipeError: item has no recipe
            InsufficientStockError: an ingredient is short

        Returns:
            The expanded requirements, for the caller to commit.
        """
        requirements = cls.expand(item, build_quantity)
        if not requirements:
            raise NoRecipeError(item=item.name)

        live = dict(
            Item.objects.filter(
                pk__in=[req.ingredient_id for req in requirements]
            ).values_list("pk", "quantity")
        )

        for req in requirements:
            available = live.get(req.ingredient_id, 0)
            if available < req.required:
                logger.info(
                    f"Cannot build {build_quantity} x {item.name}: "
                    f"need {req.required} {req.ingredient_name}, have {available}",
                    extra={
                        "item": item.pk,
                        "ingredient": req.ingredient_id,
                        "required": req.required,
                        "available": available,
                    },
                )
                raise InsufficientStockError(
                    item=req.ingredient_name,
                    required=req.required,
                    available=available,
                )

        return requirements
