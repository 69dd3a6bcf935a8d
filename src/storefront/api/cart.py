"""FastAPI endpoints for the shopping cart and coupon administration."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.auth import Principal, current_user, require_admin
from storefront.api.envelope import Envelope, ok
from storefront.api.presenters import cart_payload, coupon_payload
from storefront.api.schemas import (
    AddToCartRequest,
    ApplyCouponRequest,
    CreateCouponRequest,
    UpdateCartItemRequest,
)
from storefront.coupons.coupon import Coupon
from storefront.coupons.management import CreateCoupon, list_coupons
from storefront.ordering.cart_management import (
    AddToCart,
    ApplyCoupon,
    ClearCart,
    RemoveCartItem,
    RemoveCoupon,
    UpdateCartItem,
    view_cart,
)

cart_router = APIRouter(prefix="/api/cart", tags=["cart"])
coupon_router = APIRouter(prefix="/api/coupons", tags=["coupons"])

_envelope = {"response_model": Envelope, "response_model_exclude_unset": True}


def _cart_data(customer_id):
    return {"cart": cart_payload(view_cart(customer_id))}


# --- Cart endpoints ---


@cart_router.get("", **_envelope)
async def get_cart(user: Principal = Depends(current_user)) -> Envelope:
    return ok("Cart retrieved successfully", _cart_data(user.user_id))


@cart_router.post("/add", **_envelope)
async def add_to_cart(body: AddToCartRequest, user: Principal = Depends(current_user)) -> Envelope:
    command = AddToCart(
        customer_id=user.user_id,
        product_id=body.product_id,
        size=body.size,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return ok("Item added to cart successfully", _cart_data(user.user_id))


@cart_router.put("/item/{item_id}", **_envelope)
async def update_cart_item(
    item_id: str, body: UpdateCartItemRequest, user: Principal = Depends(current_user)
) -> Envelope:
    command = UpdateCartItem(
        customer_id=user.user_id,
        item_id=item_id,
        quantity=body.quantity,
        size=body.size,
    )
    current_domain.process(command, asynchronous=False)
    return ok("Cart item updated successfully", _cart_data(user.user_id))


@cart_router.delete("/item/{item_id}", **_envelope)
async def remove_cart_item(item_id: str, user: Principal = Depends(current_user)) -> Envelope:
    current_domain.process(RemoveCartItem(customer_id=user.user_id, item_id=item_id), asynchronous=False)
    return ok("Item removed from cart successfully", _cart_data(user.user_id))


@cart_router.delete("", **_envelope)
async def clear_cart(user: Principal = Depends(current_user)) -> Envelope:
    current_domain.process(ClearCart(customer_id=user.user_id), asynchronous=False)
    return ok("Cart cleared successfully", _cart_data(user.user_id))


@cart_router.post("/coupon", **_envelope)
async def apply_coupon(body: ApplyCouponRequest, user: Principal = Depends(current_user)) -> Envelope:
    current_domain.process(ApplyCoupon(customer_id=user.user_id, code=body.code), asynchronous=False)
    return ok("Coupon applied successfully", _cart_data(user.user_id))


@cart_router.delete("/coupon", **_envelope)
async def remove_coupon(user: Principal = Depends(current_user)) -> Envelope:
    current_domain.process(RemoveCoupon(customer_id=user.user_id), asynchronous=False)
    return ok("Coupon removed successfully", _cart_data(user.user_id))


# --- Coupon administration ---


@coupon_router.post("", status_code=201, **_envelope)
async def create_coupon(body: CreateCouponRequest, admin: Principal = Depends(require_admin)) -> Envelope:
    command = CreateCoupon(
        code=body.code,
        discount_percent=body.discount_percent,
        expiry_date=body.expiry_date,
        minimum_order_amount=body.minimum_order_amount,
        usage_limit=body.usage_limit,
    )
    coupon_id = current_domain.process(command, asynchronous=False)
    coupon = current_domain.repository_for(Coupon).get(coupon_id)
    return ok("Coupon created successfully", {"coupon": coupon_payload(coupon)})


@coupon_router.get("", **_envelope)
async def coupons(admin: Principal = Depends(require_admin)) -> Envelope:
    return ok("Coupons retrieved successfully", {"coupons": [coupon_payload(c) for c in list_coupons()]})
