"""
Input coercion shared by the services.

Quantities are whole units everywhere in the workshop.
"""

from decimal import Decimal, InvalidOperation

from workshop.exceptions import ValidationError


def to_quantity(value, field: str = "quantity", *, signed: bool = False) -> int:
    """
    Coerce value to an integer quantity.

    Accepts ints, integral Decimals/floats and numeric strings.
    Unless signed=True the result must be positive.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(field=field, value=value, message="must be a whole number")

    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(field=field, value=value, message="must be a whole number")

    if not number.is_finite() or number != number.to_integral_value():
        raise ValidationError(field=field, value=value, message="must be a whole number")

    quantity = int(number)
    if signed:
        if quantity == 0:
            raise ValidationError(field=field, value=value, message="must not be zero")
    elif quantity <= 0:
        raise ValidationError(field=field, value=value, message="must be greater than zero")
    return quantity


def to_price(value, field: str = "unit_price") -> Decimal:
    """Coerce value to a non-negative Decimal price."""
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(field=field, value=value, message="must be a number")
    if not price.is_finite() or price < 0:
        raise ValidationError(field=field, value=value, message="must not be negative")
    return price
