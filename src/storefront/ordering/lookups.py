"""Read side of ordering: tracking, customer and back-office listings, statistics."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.ordering.lifecycle import OrderStatus, tracking_details
from storefront.ordering.order import GuestOrder, Order
from storefront.shared.money import round_currency
from storefront.shared.queries import custom_setting, fetch_all, paginate

REVENUE_STATES = (OrderStatus.SHIPPED.value, OrderStatus.DELIVERED.value)


def _not_found():
    return ObjectNotFoundError({"order": ["Order not found"]})


def track_order(order_number):
    """Public tracking by order number; registered orders first, then guest orders."""
    order = current_domain.repository_for(Order).find_by_number(order_number)
    if order is None:
        order = current_domain.repository_for(GuestOrder).find_by_number(order_number)
    if order is None:
        raise _not_found()
    return tracking_details(order, delivery_days=custom_setting("ESTIMATED_DELIVERY_DAYS", 5))


def get_customer_order(order_id, customer_id):
    """An order, visible only to the customer who placed it."""
    try:
        order = current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise _not_found() from None
    if not order.belongs_to(customer_id):
        raise _not_found()
    return order


def list_customer_orders(customer_id, page=1, limit=None):
    return paginate(
        Order,
        page=page,
        limit=limit or custom_setting("ORDER_PAGE_SIZE", 10),
        customer_id=str(customer_id),
    )


def list_all_orders(status=None, page=1, limit=None):
    filters = {"status": OrderStatus(status).value} if status else {}
    return paginate(
        Order,
        page=page,
        limit=limit or custom_setting("ORDER_PAGE_SIZE", 10),
        **filters,
    )


def order_stats(recent=5):
    """Counts per status, revenue from shipped and delivered orders, latest orders."""
    orders = fetch_all(Order, order_by="-created_at")

    counts = {status.value: 0 for status in OrderStatus}
    revenue = 0.0
    for order in orders:
        counts[order.status] = counts.get(order.status, 0) + 1
        if order.status in REVENUE_STATES:
            revenue += order.pricing.total

    return {
        "total_orders": len(orders),
        "by_status": counts,
        "total_revenue": round_currency(revenue),
        "recent_orders": orders[:recent],
    }


def find_guest_order(order_number):
    order = current_domain.repository_for(GuestOrder).find_by_number(order_number)
    if order is None:
        raise _not_found()
    return order


def list_guest_orders(email):
    return fetch_all(GuestOrder, order_by="-created_at", guest_email=(email or "").strip().lower())
