"""Order cancellation: customer command plus the routine admins reuse.

Cancelling puts every item's quantity back into stock and releases the
coupon redemption, so the customer can use the coupon again.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.coupons.engine import customer_key_for, release
from storefront.domain import storefront
from storefront.ordering import stock
from storefront.ordering.order import GuestOrder, Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    reason = String(max_length=500)


def customer_key_of(order):
    if isinstance(order, GuestOrder):
        return customer_key_for(guest_email=order.guest_email)
    return customer_key_for(customer_id=order.customer_id)


def cancel_and_restock(order, note=None):
    """Cancel ``order``, return its stock and release its coupon."""
    order.cancel(note)
    stock.restore(order.items)
    if order.coupon is not None:
        release(order.coupon.coupon_id, customer_key_of(order))

    logger.info("Order cancelled", order_id=str(order.id), order_number=order.order_number)


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if not order.belongs_to(command.customer_id):
            raise ObjectNotFoundError({"order": ["Order not found"]})

        cancel_and_restock(order, command.reason or "Cancelled by customer")
        repo.add(order)
