"""
In-house manufacturing.

Builds finished goods straight away, without a work order: the ingredients
are consumed and the finished good is credited in the same unit of work.
"""

import logging

from django.db import transaction

from workshop.models import EntryKind, Transaction
from workshop.permissions import actor_label, require_admin
from workshop.protocols.identity import Actor
from workshop.services.ledger import resolve_item
from workshop.services.recipes import ShopRecipes
from workshop.services.stock import ShopStock
from workshop.validators import to_quantity

logger = logging.getLogger(__name__)


class ShopManufacturing:
    """Immediate builds."""

    @classmethod
    def manufacture(cls, item, quantity, actor: Actor | None = None) -> list[Transaction]:
        """
        Build quantity units of item from its recipe.

        Raises:
            NoRecipeError: item has no recipe
            InsufficientStockError: first short ingredient, nothing written

        Returns:
            The ledger entries written: one per ingredient, then the credit.
        """
        require_admin(actor, "manufacture")

        item = resolve_item(item)
        quantity = to_quantity(quantity)
        requirements = ShopRecipes.validate_sufficiency(item, quantity)

        entries = []
        with transaction.atomic():
            for req in requirements:
                entries.append(
                    ShopStock.adjust(
                        req.ingredient_id,
                        -req.required,
                        f"Used to manufacture {quantity} x {item.name}",
                        kind=EntryKind.MATERIAL_USE,
                        actor=actor,
                    )
                )
            entries.append(
                ShopStock.adjust(
                    item,
                    quantity,
                    "Manufactured in-house",
                    kind=EntryKind.PRODUCTION,
                    actor=actor,
                )
            )

        logger.info(
            f"Manufactured {quantity} x {item.name}",
            extra={
                "item": item.pk,
                "quantity": quantity,
                "ingredients": [req.as_dict() for req in requirements],
                "actor": actor_label(actor),
            },
        )

        return entries
