"""Back-office fulfillment: status changes and tracking details.

A status change to ``cancelled`` goes through the full cancellation routine
so stock and coupon usage are handed back exactly as when the customer
cancels.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.ordering.cancellation import cancel_and_restock
from storefront.ordering.lifecycle import Carrier, OrderStatus
from storefront.ordering.order import GuestOrder, Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    note = String(max_length=500)


@storefront.command(part_of="Order")
class UpdateOrderTracking:
    order_id = Identifier(required=True)
    tracking_number = String(required=True, max_length=100)
    carrier = String(required=True, choices=Carrier)
    tracking_url = String(max_length=500)
    note = String(max_length=500)


@storefront.command(part_of="GuestOrder")
class UpdateGuestOrderStatus:
    order_number = String(required=True, max_length=30)
    status = String(required=True, choices=OrderStatus)
    note = String(max_length=500)


def apply_status(order, status, note=None):
    target = OrderStatus(status)
    previous = order.status
    if target == OrderStatus.CANCELLED:
        cancel_and_restock(order, note or "Cancelled by administrator")
    else:
        order.advance(target, note)

    logger.info(
        "Order status updated",
        order_number=order.order_number,
        previous_status=previous,
        new_status=target.value,
    )


@storefront.command_handler(part_of=Order)
class FulfilOrderHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        apply_status(order, command.status, command.note)
        repo.add(order)

    @handle(UpdateOrderTracking)
    def update_tracking(self, command):
        if not command.tracking_number.strip():
            raise ValidationError({"tracking_number": ["Tracking number is required"]})

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.record_tracking(
            tracking_number=command.tracking_number.strip(),
            carrier=command.carrier,
            tracking_url=command.tracking_url,
            note=command.note,
        )
        repo.add(order)


@storefront.command_handler(part_of=GuestOrder)
class FulfilGuestOrderHandler:
    @handle(UpdateGuestOrderStatus)
    def update_guest_status(self, command):
        repo = current_domain.repository_for(GuestOrder)
        order = repo.find_by_number(command.order_number)
        if order is None:
            raise ObjectNotFoundError({"order": ["Order not found"]})

        apply_status(order, command.status, command.note)
        repo.add(order)
