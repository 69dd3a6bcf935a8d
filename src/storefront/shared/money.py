"""Rounding rules for currency amounts and ratings.

Every currency figure the shop computes (line totals, subtotals, discounts,
order totals, discounted prices) goes through ``round_currency`` so that a
cart summary and the order built from it always agree to the cent.
"""

from decimal import ROUND_HALF_UP, Decimal

_CENT = Decimal("0.01")
_TENTH = Decimal("0.1")


def _quantize(value, step):
    return float(Decimal(str(value)).quantize(step, rounding=ROUND_HALF_UP))


def round_currency(value) -> float:
    """Round to two decimals, half-up."""
    return _quantize(value or 0, _CENT)


def round_rating(value) -> float:
    """Round to one decimal, half-up."""
    return _quantize(value or 0, _TENTH)


def percentage_of(amount, percent) -> float:
    return round_currency(Decimal(str(amount)) * Decimal(str(percent)) / Decimal(100))
