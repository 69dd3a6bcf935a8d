"""Domain events for carts, orders and guest orders."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
@storefront.event(part_of="Cart")
class CartItemAdded:
    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String()
    quantity = Integer(required=True)
    line_quantity = Integer(required=True)


@storefront.event(part_of="Cart")
class CartItemUpdated:
    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)
    size = String()


@storefront.event(part_of="Cart")
class CartItemRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)


@storefront.event(part_of="Cart")
class CartCleared:
    __version__ = 1

    cart_id = Identifier(required=True)


@storefront.event(part_of="Cart")
class CartCouponApplied:
    __version__ = 1

    cart_id = Identifier(required=True)
    coupon_id = Identifier(required=True)
    coupon_code = String(required=True)


@storefront.event(part_of="Cart")
class CartCouponRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    coupon_code = String()


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
@storefront.event(part_of="Order")
class OrderPlaced:
    """A customer checked out their cart."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: [{product_id, size, quantity, unit_price}]
    subtotal = Float(required=True)
    discount_amount = Float(required=True)
    total = Float(required=True)
    coupon_code = String()
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    note = String()
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderTrackingUpdated:
    __version__ = 1

    order_id = Identifier(required=True)
    tracking_number = String(required=True)
    carrier = String(required=True)
    tracking_url = String()


# ---------------------------------------------------------------------------
# Guest orders
# ---------------------------------------------------------------------------
@storefront.event(part_of="GuestOrder")
class GuestOrderPlaced:
    """A shopper without an account placed an order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    guest_email = String(required=True)
    items = Text(required=True)
    total = Float(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="GuestOrder")
class GuestOrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    note = String()
    changed_at = DateTime(required=True)


@storefront.event(part_of="GuestOrder")
class GuestOrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="GuestOrder")
class GuestOrderTrackingUpdated:
    __version__ = 1

    order_id = Identifier(required=True)
    tracking_number = String(required=True)
    carrier = String(required=True)
    tracking_url = String()
