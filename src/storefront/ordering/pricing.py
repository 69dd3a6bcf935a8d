"""Price summary shared by cart summaries and order creation.

Both go through ``price_lines`` so that an order always carries exactly the
totals its cart showed.
"""

from dataclasses import asdict, dataclass

from storefront.shared.money import round_currency


@dataclass(frozen=True)
class PriceSummary:
    items_count: int
    subtotal: float
    discount_amount: float
    total: float

    def to_dict(self):
        return asdict(self)


def line_total(unit_price, quantity):
    return round_currency(unit_price * quantity)


def price_lines(lines, coupon=None) -> PriceSummary:
    """Summarize ``(unit_price, quantity)`` pairs, applying a coupon if given."""
    lines = list(lines)
    items_count = sum(quantity for _, quantity in lines)
    subtotal = round_currency(sum(unit_price * quantity for unit_price, quantity in lines))
    discount_amount = coupon.calculate_discount(subtotal) if coupon is not None else 0.0
    total = round_currency(max(0.0, subtotal - discount_amount))
    return PriceSummary(
        items_count=items_count,
        subtotal=subtotal,
        discount_amount=discount_amount,
        total=total,
    )
