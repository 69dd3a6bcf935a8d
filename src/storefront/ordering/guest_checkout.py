"""Guest checkout: orders from shoppers without an account.

Items are priced from the live catalogue rather than a cart. Stock and coupon
rules are the same as for registered customers; a guest's coupon use is
recorded against their e-mail address.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String, Text
from protean.utils.globals import current_domain

from storefront.coupons.engine import customer_key_for, find_coupon, redeem, validate_coupon
from storefront.domain import storefront
from storefront.ordering import stock
from storefront.ordering.cart_management import max_line_quantity
from storefront.ordering.checkout import coupon_snapshot, pricing_for, snapshot_item
from storefront.ordering.order import GuestOrder, ShippingAddress
from storefront.ordering.pricing import price_lines
from storefront.shared.errors import EmptyCart, QuantityExceeded

logger = structlog.get_logger(__name__)


@storefront.command(part_of="GuestOrder")
class PlaceGuestOrder:
    guest_name = String(required=True, max_length=100)
    guest_email = String(required=True, max_length=254)
    guest_phone = String(required=True, max_length=30)
    items = Text(required=True)  # JSON: [{product_id, size, quantity}]
    shipping_address = Text(required=True)  # JSON object
    payment_method = String(max_length=20)
    coupon_code = String(max_length=20)
    notes = String(max_length=500)


def _requested_lines(raw_items):
    lines = json.loads(raw_items) if raw_items else []
    if not lines:
        raise EmptyCart("Order must contain at least one item")

    limit = max_line_quantity()
    for line in lines:
        quantity = int(line.get("quantity", 1))
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if quantity > limit:
            raise QuantityExceeded(f"Maximum {limit} items allowed per product")
        line["quantity"] = quantity
    return lines


@storefront.command_handler(part_of=GuestOrder)
class PlaceGuestOrderHandler:
    @handle(PlaceGuestOrder)
    def place_guest_order(self, command):
        lines = _requested_lines(command.items)

        quantities = {}
        for line in lines:
            key = str(line["product_id"])
            quantities[key] = quantities.get(key, 0) + line["quantity"]

        products = stock.load_products(quantities.keys())
        stock.ensure_available(products, quantities)

        items = []
        for line in lines:
            product = products[str(line["product_id"])]
            size = product.resolve_size(line.get("size"))
            items.append(snapshot_item(product, size, line["quantity"], product.effective_price))

        priced = [(item["unit_price"], item["quantity"]) for item in items]

        customer_key = customer_key_for(guest_email=command.guest_email)
        coupon = None
        if command.coupon_code:
            coupon = find_coupon(command.coupon_code)
            validate_coupon(coupon, customer_key, price_lines(priced).subtotal).raise_if_invalid()

        summary = price_lines(priced, coupon)
        order = GuestOrder.place(
            guest_name=command.guest_name,
            guest_email=command.guest_email,
            guest_phone=command.guest_phone,
            items=items,
            shipping_address=ShippingAddress(**json.loads(command.shipping_address)),
            pricing=pricing_for(summary),
            payment_method=command.payment_method,
            coupon=coupon_snapshot(coupon, summary),
            notes=command.notes,
        )

        stock.reserve(products, quantities)
        if coupon is not None:
            redeem(coupon, customer_key, order_id=str(order.id))

        current_domain.repository_for(GuestOrder).add(order)

        logger.info(
            "Guest order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            total=summary.total,
        )
        return str(order.id)
