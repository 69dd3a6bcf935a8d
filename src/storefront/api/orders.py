"""FastAPI endpoints for orders, guest orders and public tracking."""

import json

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from storefront.api.auth import Principal, current_user, require_admin
from storefront.api.envelope import Envelope, ok
from storefront.api.presenters import guest_order_payload, order_payload, pagination
from storefront.api.schemas import (
    CancelOrderRequest,
    GuestOrdersLookupRequest,
    PlaceGuestOrderRequest,
    PlaceOrderRequest,
    StatusName,
    UpdateOrderStatusRequest,
    UpdateTrackingRequest,
)
from storefront.ordering.cancellation import CancelOrder
from storefront.ordering.checkout import PlaceOrder
from storefront.ordering.fulfillment import UpdateGuestOrderStatus, UpdateOrderStatus, UpdateOrderTracking
from storefront.ordering.guest_checkout import PlaceGuestOrder
from storefront.ordering.lookups import (
    find_guest_order,
    get_customer_order,
    list_all_orders,
    list_customer_orders,
    list_guest_orders,
    order_stats,
    track_order,
)
from storefront.ordering.order import GuestOrder, Order

order_router = APIRouter(prefix="/api/orders", tags=["orders"])
guest_router = APIRouter(prefix="/api/guest", tags=["guest orders"])

_envelope = {"response_model": Envelope, "response_model_exclude_unset": True}


def _load_order(order_id):
    return current_domain.repository_for(Order).get(order_id)


# --- Customer endpoints ---


@order_router.post("", status_code=201, **_envelope)
async def place_order(body: PlaceOrderRequest, user: Principal = Depends(current_user)) -> Envelope:
    command = PlaceOrder(
        customer_id=user.user_id,
        shipping_address=body.shipping_address.model_dump_json(),
        payment_method=body.payment_method,
        notes=body.notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return ok("Order placed successfully", {"order": order_payload(_load_order(order_id))})


@order_router.get("", **_envelope)
async def my_orders(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    user: Principal = Depends(current_user),
) -> Envelope:
    result = list_customer_orders(user.user_id, page=page, limit=limit)
    return ok(
        "Orders retrieved successfully",
        {"orders": [order_payload(order) for order in result.items], "pagination": pagination(result, "orders")},
    )


# --- Back office (must precede /{order_id}) ---


@order_router.get("/admin/all", **_envelope)
async def all_orders(
    status: StatusName | None = None,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    admin: Principal = Depends(require_admin),
) -> Envelope:
    result = list_all_orders(status=status, page=page, limit=limit)
    return ok(
        "Orders retrieved successfully",
        {"orders": [order_payload(order) for order in result.items], "pagination": pagination(result, "orders")},
    )


@order_router.get("/admin/stats", **_envelope)
async def stats(admin: Principal = Depends(require_admin)) -> Envelope:
    summary = order_stats()
    summary["recent_orders"] = [order_payload(order) for order in summary["recent_orders"]]
    return ok("Order statistics retrieved successfully", {"stats": summary})


@order_router.get("/{order_number}/track", **_envelope)
async def track(order_number: str) -> Envelope:
    return ok("Tracking information retrieved successfully", {"tracking": track_order(order_number)})


@order_router.get("/{order_id}", **_envelope)
async def order_detail(order_id: str, user: Principal = Depends(current_user)) -> Envelope:
    return ok("Order retrieved successfully", {"order": order_payload(get_customer_order(order_id, user.user_id))})


@order_router.put("/{order_id}/cancel", **_envelope)
async def cancel_order(
    order_id: str, body: CancelOrderRequest | None = None, user: Principal = Depends(current_user)
) -> Envelope:
    command = CancelOrder(
        order_id=order_id,
        customer_id=user.user_id,
        reason=body.reason if body else None,
    )
    current_domain.process(command, asynchronous=False)
    return ok("Order cancelled successfully", {"order": order_payload(_load_order(order_id))})


@order_router.put("/{order_id}/status", **_envelope)
async def update_status(
    order_id: str, body: UpdateOrderStatusRequest, admin: Principal = Depends(require_admin)
) -> Envelope:
    command = UpdateOrderStatus(order_id=order_id, status=body.status, note=body.note)
    current_domain.process(command, asynchronous=False)
    return ok("Order status updated successfully", {"order": order_payload(_load_order(order_id))})


@order_router.put("/{order_id}/tracking", **_envelope)
async def update_tracking(
    order_id: str, body: UpdateTrackingRequest, admin: Principal = Depends(require_admin)
) -> Envelope:
    command = UpdateOrderTracking(
        order_id=order_id,
        tracking_number=body.tracking_number,
        carrier=body.carrier,
        tracking_url=body.tracking_url,
        note=body.note,
    )
    current_domain.process(command, asynchronous=False)
    return ok("Tracking information updated successfully", {"order": order_payload(_load_order(order_id))})


# --- Guest endpoints ---


@guest_router.post("/order", status_code=201, **_envelope)
async def place_guest_order(body: PlaceGuestOrderRequest) -> Envelope:
    command = PlaceGuestOrder(
        guest_name=body.guest_name,
        guest_email=body.guest_email,
        guest_phone=body.guest_phone,
        items=json.dumps([item.model_dump() for item in body.items]),
        shipping_address=body.shipping_address.model_dump_json(),
        payment_method=body.payment_method,
        coupon_code=body.coupon_code,
        notes=body.notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    order = current_domain.repository_for(GuestOrder).get(order_id)
    return ok("Order placed successfully", {"order": guest_order_payload(order)})


@guest_router.get("/order/{order_number}", **_envelope)
async def guest_order_detail(order_number: str) -> Envelope:
    return ok("Order retrieved successfully", {"order": guest_order_payload(find_guest_order(order_number))})


@guest_router.post("/orders", **_envelope)
async def guest_orders_by_email(body: GuestOrdersLookupRequest) -> Envelope:
    orders = list_guest_orders(body.email)
    return ok("Orders retrieved successfully", {"orders": [guest_order_payload(order) for order in orders]})


@guest_router.put("/order/{order_number}/status", **_envelope)
async def update_guest_status(
    order_number: str, body: UpdateOrderStatusRequest, admin: Principal = Depends(require_admin)
) -> Envelope:
    command = UpdateGuestOrderStatus(order_number=order_number, status=body.status, note=body.note)
    current_domain.process(command, asynchronous=False)
    return ok("Order status updated successfully", {"order": guest_order_payload(find_guest_order(order_number))})
