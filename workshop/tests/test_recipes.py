"""
Tests for recipe resolution (workshop.services.recipes).
"""

import pytest

from workshop import shop
from workshop.exceptions import InsufficientStockError, NoRecipeError, ValidationError
from workshop.models import ItemCategory, Transaction
from workshop.results import Requirement


@pytest.fixture
def screw(db):
    return shop.create_item("Screw", quantity=100)


@pytest.fixture
def bolt(db):
    return shop.create_item("Bolt", quantity=50)


@pytest.fixture
def widget(db, screw, bolt):
    item = shop.create_item("Widget", ItemCategory.FINISHED_GOOD, unit_price=100)
    shop.set_recipe(
        item,
        [{"ingredient": screw, "quantity": 2}, {"ingredient": bolt, "quantity": 1}],
    )
    return item


class TestExpand:
    def test_multiplies_per_unit_quantities(self, widget, screw, bolt):
        assert shop.expand(widget, 10) == [
            Requirement(ingredient_id=screw.pk, ingredient_name="Screw", required=20),
            Requirement(ingredient_id=bolt.pk, ingredient_name="Bolt", required=10),
        ]

    def test_recipe_order(self, db, screw, bolt):
        gadget = shop.create_item("Gadget", ItemCategory.FINISHED_GOOD)
        shop.set_recipe(
            gadget,
            [{"ingredient": bolt, "quantity": 3}, {"ingredient": screw, "quantity": 1}],
        )

        assert [req.ingredient_name for req in shop.expand(gadget, 1)] == ["Bolt", "Screw"]

    def test_no_recipe_expands_to_nothing(self, screw):
        assert shop.expand(screw, 5) == []

    @pytest.mark.parametrize("quantity", [0, -2, 1.5])
    def test_invalid_build_quantity(self, widget, quantity):
        with pytest.raises(ValidationError):
            shop.expand(widget, quantity)

    def test_as_dict(self, widget, screw):
        assert shop.expand(widget, 1)[0].as_dict() == {
            "ingredient_id": screw.pk,
            "ingredient_name": "Screw",
            "required": 2,
        }


class TestValidateSufficiency:
    def test_sufficient(self, widget):
        requirements = shop.validate_sufficiency(widget, 25)
        assert [req.required for req in requirements] == [50, 25]

    def test_exact_stock_is_enough(self, widget):
        shop.validate_sufficiency(widget, 50)

    def test_first_shortage_in_recipe_order(self, widget, screw, bolt):
        """Both ingredients are short; only the first one is reported."""
        shop.adjust(bolt, -45, "x")

        with pytest.raises(InsufficientStockError) as exc:
            shop.validate_sufficiency(widget, 60)

        assert exc.value.item == "Screw"
        assert exc.value.required == 120
        assert exc.value.available == 100

    def test_second_ingredient_short(self, widget, bolt):
        shop.adjust(bolt, -45, "x")

        with pytest.raises(InsufficientStockError) as exc:
            shop.validate_sufficiency(widget, 10)

        assert exc.value.item == "Bolt"
        assert exc.value.required == 10
        assert exc.value.available == 5

    def test_no_recipe(self, screw):
        with pytest.raises(NoRecipeError):
            shop.validate_sufficiency(screw, 1)

    def test_read_only(self, widget, screw):
        before = Transaction.objects.count()
        shop.validate_sufficiency(widget, 10)

        screw.refresh_from_db()
        assert screw.quantity == 100
        assert Transaction.objects.count() == before
