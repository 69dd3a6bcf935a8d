"""Checkout: turns a customer's cart into a pending Order.

Everything is validated before anything is written: the cart must hold items,
every product must exist with enough stock for all of its lines, and an
applied coupon must still be valid for the cart subtotal. The order, the
stock decrements, the coupon redemption and the emptied cart are then written
in the handler's single unit of work.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.coupons.engine import customer_key_for, redeem, validate_coupon
from storefront.domain import storefront
from storefront.ordering import stock
from storefront.ordering.cart import Cart
from storefront.ordering.cart_management import applied_coupon
from storefront.ordering.order import AppliedCoupon, Order, OrderPricing, ShippingAddress
from storefront.ordering.pricing import price_lines
from storefront.shared.errors import EmptyCart

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    shipping_address = Text(required=True)  # JSON object
    payment_method = String(required=True, max_length=20)
    notes = String(max_length=500)


def snapshot_item(product, size, quantity, unit_price):
    images = product.image_urls
    return {
        "product_id": str(product.id),
        "title": product.title,
        "image": images[0] if images else None,
        "size": size,
        "quantity": quantity,
        "unit_price": unit_price,
    }


def coupon_snapshot(coupon, summary):
    if coupon is None:
        return None
    return AppliedCoupon(
        coupon_id=coupon.id,
        code=coupon.code,
        discount_percent=coupon.discount_percent,
        discount_amount=summary.discount_amount,
    )


def pricing_for(summary):
    return OrderPricing(
        subtotal=summary.subtotal,
        discount_amount=summary.discount_amount,
        total=summary.total,
    )


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart_repo = current_domain.repository_for(Cart)
        cart = cart_repo.find_for_customer(command.customer_id)
        if cart is None or cart.is_empty:
            raise EmptyCart("Cart is empty")

        quantities = cart.quantities_by_product()
        products = stock.load_products(quantities.keys())
        stock.ensure_available(products, quantities)

        customer_key = customer_key_for(command.customer_id)
        coupon = applied_coupon(cart)
        if coupon is not None:
            subtotal = price_lines(cart.lines()).subtotal
            validate_coupon(coupon, customer_key, subtotal).raise_if_invalid()

        summary = price_lines(cart.lines(), coupon)
        order = Order.place(
            customer_id=command.customer_id,
            items=[
                snapshot_item(products[str(item.product_id)], item.size, item.quantity, item.unit_price)
                for item in cart.items
            ],
            shipping_address=ShippingAddress(**json.loads(command.shipping_address)),
            payment_method=command.payment_method,
            pricing=pricing_for(summary),
            coupon=coupon_snapshot(coupon, summary),
            notes=command.notes,
        )

        stock.reserve(products, quantities)
        if coupon is not None:
            redeem(coupon, customer_key, order_id=str(order.id))

        cart.clear()
        cart_repo.add(cart)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            customer_id=str(command.customer_id),
            total=summary.total,
        )
        return str(order.id)
