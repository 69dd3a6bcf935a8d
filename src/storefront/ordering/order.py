"""Order and GuestOrder aggregates.

An order is an immutable snapshot of what was bought: titles, sizes and unit
prices are copied from the catalogue at checkout and never refreshed. After
placement only the status, its history, tracking details and the lifecycle
timestamps change (see ``storefront.ordering.lifecycle``).
"""

import json
import re

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from storefront.domain import storefront
from storefront.ordering import lifecycle
from storefront.ordering.events import (
    GuestOrderCancelled,
    GuestOrderPlaced,
    GuestOrderStatusChanged,
    GuestOrderTrackingUpdated,
    OrderCancelled,
    OrderPlaced,
    OrderStatusChanged,
    OrderTrackingUpdated,
)
from storefront.ordering.lifecycle import Carrier, OrderStatus, PaymentMethod
from storefront.ordering.pricing import line_total
from storefront.shared.clock import utcnow

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object
class ShippingAddress:
    """Where the order goes, captured at checkout and never changed afterwards."""

    full_name = String(required=True, max_length=100)
    address_line1 = String(required=True, max_length=200)
    address_line2 = String(max_length=200)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    phone = String(required=True, max_length=30)


@storefront.value_object
class OrderPricing:
    """Totals locked at checkout, computed exactly as the cart summary computes them."""

    subtotal = Float(default=0.0, min_value=0.0)
    discount_amount = Float(default=0.0, min_value=0.0)
    total = Float(default=0.0, min_value=0.0)


@storefront.value_object
class AppliedCoupon:
    """The coupon as it stood when the order was placed."""

    coupon_id = Identifier(required=True)
    code = String(required=True, max_length=20)
    discount_percent = Float(required=True)
    discount_amount = Float(required=True)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    title = String(required=True, max_length=200)
    image = String(max_length=500)
    size = String(max_length=20)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    line_total = Float(required=True, min_value=0.0)


@storefront.entity(part_of="GuestOrder")
class GuestOrderItem:
    product_id = Identifier(required=True)
    title = String(required=True, max_length=200)
    image = String(max_length=500)
    size = String(max_length=20)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    line_total = Float(required=True, min_value=0.0)


def _item_fields(item):
    return {
        "product_id": item["product_id"],
        "title": item["title"],
        "image": item.get("image"),
        "size": item.get("size"),
        "quantity": item["quantity"],
        "unit_price": item["unit_price"],
        "line_total": line_total(item["unit_price"], item["quantity"]),
    }


def _items_json(items):
    return json.dumps(
        [
            {
                "product_id": str(item.product_id),
                "size": item.size,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
            }
            for item in items
        ]
    )


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=30, unique=True)
    customer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress, required=True)
    payment_method = String(required=True, choices=PaymentMethod)
    pricing = ValueObject(OrderPricing, required=True)
    coupon = ValueObject(AppliedCoupon)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    status_history = Text()  # JSON: [{stage, timestamp, note}]
    tracking_number = String(max_length=100)
    carrier = String(choices=Carrier)
    tracking_url = String(max_length=500)
    notes = String(max_length=500)
    shipped_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def place(cls, customer_id, items, shipping_address, payment_method, pricing, coupon=None, notes=None):
        """Create a pending order from priced item snapshots.

        ``items`` are dicts with product_id, title, image, size, quantity and
        unit_price.
        """
        if not items:
            raise ValidationError({"items": ["An order must contain at least one item"]})

        now = utcnow()
        order = cls(
            order_number=lifecycle.generate_order_number(),
            customer_id=customer_id,
            items=[OrderItem(**_item_fields(item)) for item in items],
            shipping_address=shipping_address,
            payment_method=payment_method,
            pricing=pricing,
            coupon=coupon,
            status=OrderStatus.PENDING.value,
            status_history=json.dumps([lifecycle.history_entry(OrderStatus.PENDING, "Order placed", now)]),
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                customer_id=str(customer_id),
                items=_items_json(order.items),
                subtotal=pricing.subtotal,
                discount_amount=pricing.discount_amount,
                total=pricing.total,
                coupon_code=coupon.code if coupon else None,
                placed_at=now,
            )
        )
        return order

    @property
    def history(self):
        return lifecycle.read_history(self)

    def belongs_to(self, customer_id):
        return str(self.customer_id) == str(customer_id)

    def advance(self, target, note=None):
        """Move forward through the fulfilment stages."""
        target = OrderStatus(target)
        previous, at = lifecycle.change_status(self, target, note)
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous.value,
                new_status=target.value,
                note=note,
                changed_at=at,
            )
        )

    def cancel(self, note=None):
        previous, at = lifecycle.cancel(self, note)
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous.value,
                cancelled_at=at,
            )
        )

    def record_tracking(self, tracking_number, carrier, tracking_url=None, note=None):
        shipped = lifecycle.record_tracking(self, tracking_number, carrier, tracking_url, note)
        self.raise_(
            OrderTrackingUpdated(
                order_id=str(self.id),
                tracking_number=tracking_number,
                carrier=carrier,
                tracking_url=tracking_url,
            )
        )
        if shipped is not None:
            previous, at = shipped
            self.raise_(
                OrderStatusChanged(
                    order_id=str(self.id),
                    order_number=self.order_number,
                    previous_status=previous.value,
                    new_status=OrderStatus.SHIPPED.value,
                    note=note or lifecycle.SHIPPED_WITH_TRACKING_NOTE,
                    changed_at=at,
                )
            )


@storefront.aggregate
class GuestOrder:
    order_number = String(required=True, max_length=30, unique=True)
    guest_name = String(required=True, max_length=100)
    guest_email = String(required=True, max_length=254)
    guest_phone = String(required=True, max_length=30)
    items = HasMany(GuestOrderItem)
    shipping_address = ValueObject(ShippingAddress, required=True)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.CASH.value)
    pricing = ValueObject(OrderPricing, required=True)
    coupon = ValueObject(AppliedCoupon)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    status_history = Text()  # JSON: [{stage, timestamp, note}]
    tracking_number = String(max_length=100)
    carrier = String(choices=Carrier)
    tracking_url = String(max_length=500)
    notes = String(max_length=500)
    shipped_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def guest_email_must_be_valid(self):
        if self.guest_email and not _EMAIL.match(self.guest_email):
            raise ValidationError({"guest_email": ["Please provide a valid email"]})

    @classmethod
    def place(
        cls,
        guest_name,
        guest_email,
        guest_phone,
        items,
        shipping_address,
        pricing,
        payment_method=None,
        coupon=None,
        notes=None,
    ):
        if not items:
            raise ValidationError({"items": ["An order must contain at least one item"]})

        now = utcnow()
        order = cls(
            order_number=lifecycle.generate_guest_order_number(),
            guest_name=guest_name,
            guest_email=(guest_email or "").strip().lower(),
            guest_phone=guest_phone,
            items=[GuestOrderItem(**_item_fields(item)) for item in items],
            shipping_address=shipping_address,
            payment_method=payment_method or PaymentMethod.CASH.value,
            pricing=pricing,
            coupon=coupon,
            status=OrderStatus.PENDING.value,
            status_history=json.dumps([lifecycle.history_entry(OrderStatus.PENDING, "Order placed", now)]),
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            GuestOrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                guest_email=order.guest_email,
                items=_items_json(order.items),
                total=pricing.total,
                placed_at=now,
            )
        )
        return order

    @property
    def history(self):
        return lifecycle.read_history(self)

    def advance(self, target, note=None):
        target = OrderStatus(target)
        previous, at = lifecycle.change_status(self, target, note)
        self.raise_(
            GuestOrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous.value,
                new_status=target.value,
                note=note,
                changed_at=at,
            )
        )

    def cancel(self, note=None):
        previous, at = lifecycle.cancel(self, note)
        self.raise_(
            GuestOrderCancelled(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous.value,
                cancelled_at=at,
            )
        )

    def record_tracking(self, tracking_number, carrier, tracking_url=None, note=None):
        shipped = lifecycle.record_tracking(self, tracking_number, carrier, tracking_url, note)
        self.raise_(
            GuestOrderTrackingUpdated(
                order_id=str(self.id),
                tracking_number=tracking_number,
                carrier=carrier,
                tracking_url=tracking_url,
            )
        )
        if shipped is not None:
            previous, at = shipped
            self.raise_(
                GuestOrderStatusChanged(
                    order_id=str(self.id),
                    order_number=self.order_number,
                    previous_status=previous.value,
                    new_status=OrderStatus.SHIPPED.value,
                    note=note or lifecycle.SHIPPED_WITH_TRACKING_NOTE,
                    changed_at=at,
                )
            )


@storefront.repository(part_of=Order)
class OrderRepository:
    def find_by_number(self, order_number):
        return self._dao.query.filter(order_number=order_number).all().first


@storefront.repository(part_of=GuestOrder)
class GuestOrderRepository:
    def find_by_number(self, order_number):
        return self._dao.query.filter(order_number=order_number).all().first
