"""Money arithmetic for checkout.

All calculations run on ``Decimal``; aggregates store the results as floats
that are already rounded to the cent.
"""

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal

TAX_RATE = Decimal("0.02")
ADVANCE_RATE = Decimal("0.17")
SHIPPING_FEE = Decimal("0.00")
TOLERANCE = Decimal("0.01")

CENT = Decimal("0.01")
UNIT = Decimal("1")


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so that 0.1 becomes Decimal("0.1"), not its binary expansion
    return Decimal(str(value))


def round_cents(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def tax_for(subtotal) -> Decimal:
    return round_cents(to_decimal(subtotal) * TAX_RATE)


def advance_for(subtotal) -> Decimal:
    """Upfront part of a cash-on-delivery order, in whole currency units."""
    return (to_decimal(subtotal) * ADVANCE_RATE).quantize(UNIT, rounding=ROUND_FLOOR).quantize(CENT)


def within_tolerance(a, b, tolerance: Decimal = TOLERANCE) -> bool:
    return abs(round_cents(a) - round_cents(b)) <= tolerance
