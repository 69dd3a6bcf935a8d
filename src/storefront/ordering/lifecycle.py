"""Order status machine, status history and tracking, shared by Order and GuestOrder.

Stages run ``pending -> confirmed -> processing -> shipped -> delivered``. A status
change must move strictly forward along that sequence (skipping stages is
allowed); ``cancelled`` is reachable from pending and confirmed only; delivered
and cancelled orders are frozen.

The helpers work on any aggregate carrying the common order fields
(``status``, ``status_history``, the tracking fields and the timestamps) and
return what changed so the aggregate can raise its own events.
"""

import json
import secrets
import string
import time
from datetime import timedelta
from enum import Enum

from storefront.shared.clock import as_utc, utcnow
from storefront.shared.errors import InvalidTransition, NotCancellable


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    CARD = "card"
    PAYPAL = "paypal"
    STRIPE = "stripe"
    CASH = "cash"


class Carrier(Enum):
    FEDEX = "FedEx"
    UPS = "UPS"
    USPS = "USPS"
    DHL = "DHL"
    OTHER = "Other"


STAGES = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
]

CANCELLABLE_STATES = {OrderStatus.PENDING, OrderStatus.CONFIRMED}
TERMINAL_STATES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

SHIPPED_WITH_TRACKING_NOTE = "Order shipped with tracking information"

_ALPHABET = string.ascii_uppercase + string.digits


# ---------------------------------------------------------------------------
# Order numbers
# ---------------------------------------------------------------------------
def _random_code(length):
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def _base36(number):
    digits = string.digits + string.ascii_uppercase
    encoded = ""
    while number:
        number, remainder = divmod(number, 36)
        encoded = digits[remainder] + encoded
    return encoded or "0"


def generate_order_number():
    """``ORD-<last 6 digits of the ms timestamp>-<6 alphanumerics>``."""
    millis = str(int(time.time() * 1000))
    return f"ORD-{millis[-6:]}-{_random_code(6)}"


def generate_guest_order_number():
    """``GO-<base36 ms timestamp>-<5 alphanumerics>``."""
    return f"GO-{_base36(int(time.time() * 1000))}-{_random_code(5)}"


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------
def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    if current in TERMINAL_STATES:
        return False
    if target == OrderStatus.CANCELLED:
        return current in CANCELLABLE_STATES
    return STAGES.index(target) > STAGES.index(current)


def assert_can_transition(current: OrderStatus, target: OrderStatus):
    if not can_transition(current, target):
        raise InvalidTransition(f"Cannot change order status from {current.value} to {target.value}")


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------
def history_entry(stage, note=None, at=None):
    return {
        "stage": stage.value if isinstance(stage, OrderStatus) else stage,
        "timestamp": (at or utcnow()).isoformat(),
        "note": note,
    }


def read_history(order):
    return json.loads(order.status_history) if order.status_history else []


def append_history(order, stage, note=None, at=None):
    history = read_history(order)
    history.append(history_entry(stage, note, at))
    order.status_history = json.dumps(history)


# ---------------------------------------------------------------------------
# State changes
# ---------------------------------------------------------------------------
def change_status(order, target: OrderStatus, note=None):
    """Move ``order`` to ``target`` and record it; returns ``(previous, at)``.

    Cancellation has its own path (``cancel``) because it has its own rules.
    """
    current = OrderStatus(order.status)
    assert_can_transition(current, target)

    now = utcnow()
    order.status = target.value
    append_history(order, target, note, now)
    if target == OrderStatus.SHIPPED and order.shipped_at is None:
        order.shipped_at = now
    if target == OrderStatus.DELIVERED:
        order.delivered_at = now
    order.updated_at = now
    return current, now


def cancel(order, note=None):
    """Cancel a pending or confirmed order; returns ``(previous, at)``."""
    current = OrderStatus(order.status)
    if current not in CANCELLABLE_STATES:
        raise NotCancellable(f"Order cannot be cancelled. Current status: {current.value}")

    now = utcnow()
    order.status = OrderStatus.CANCELLED.value
    order.cancelled_at = now
    append_history(order, OrderStatus.CANCELLED, note or "Order cancelled", now)
    order.updated_at = now
    return current, now


def record_tracking(order, tracking_number, carrier, tracking_url=None, note=None):
    """Store tracking details; an order in processing moves to shipped.

    Returns the ``(previous, at)`` pair of the status change, or None.
    """
    current = OrderStatus(order.status)
    if current in TERMINAL_STATES:
        raise InvalidTransition(f"Cannot add tracking to a {current.value} order")

    order.tracking_number = tracking_number
    order.carrier = carrier
    order.tracking_url = tracking_url
    order.updated_at = utcnow()

    if current == OrderStatus.PROCESSING:
        return change_status(order, OrderStatus.SHIPPED, note or SHIPPED_WITH_TRACKING_NOTE)
    return None


def tracking_details(order, delivery_days=5):
    """Public tracking view of an order."""
    shipped_at = as_utc(order.shipped_at)
    delivered_at = as_utc(order.delivered_at)

    estimated_delivery = None
    if shipped_at is not None and delivered_at is None:
        estimated_delivery = shipped_at + timedelta(days=delivery_days)

    return {
        "order_number": order.order_number,
        "status": order.status,
        "status_history": read_history(order),
        "tracking_number": order.tracking_number,
        "carrier": order.carrier,
        "tracking_url": order.tracking_url,
        "order_date": as_utc(order.created_at),
        "shipped_at": shipped_at,
        "delivered_at": delivered_at,
        "estimated_delivery": estimated_delivery,
    }
