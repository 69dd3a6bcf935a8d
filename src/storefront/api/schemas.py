"""Pydantic request schemas for the storefront API."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

PaymentMethodName = Literal["card", "paypal", "stripe", "cash"]
StatusName = Literal["pending", "confirmed", "processing", "shipped", "delivered", "cancelled"]
CarrierName = Literal["FedEx", "UPS", "USPS", "DHL", "Other"]
ReviewStatusName = Literal["pending", "approved", "rejected"]


# --- Catalogue ---


class DiscountIn(BaseModel):
    percentage: float = Field(..., ge=0, le=100)
    valid_till: datetime | None = None


class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "title": "Classic Black T-Shirt",
                    "description": "Premium cotton crew-neck tee in black.",
                    "brand": "Acme Apparel",
                    "category_id": "7b0c6f0e-3f0c-4c51-9a55-0d7c2f3c1a10",
                    "price": 29.99,
                    "stock": 25,
                    "images": ["https://cdn.example.com/tshirt-black.jpg"],
                    "sizes": ["s", "m", "l"],
                    "tags": ["Cotton", "Basics"],
                    "discount": {"percentage": 10, "valid_till": "2030-01-01T00:00:00Z"},
                }
            ]
        }
    }

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    brand: str = Field(..., min_length=1, max_length=50)
    category_id: str
    price: float = Field(..., ge=0)
    stock: int = Field(0, ge=0)
    images: list[str] = Field(default_factory=list, max_length=10)
    sizes: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    discount: DiscountIn | None = None


class UpdateProductRequest(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1, max_length=2000)
    brand: str | None = Field(None, min_length=1, max_length=50)
    category_id: str | None = None
    price: float | None = Field(None, ge=0)
    stock: int | None = Field(None, ge=0)
    images: list[str] | None = Field(None, max_length=10)
    sizes: list[str] | None = None
    tags: list[str] | None = None
    discount: DiscountIn | None = None


class CreateCategoryRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Men's Clothing",
                    "description": "Shirts, trousers and jackets",
                    "image": "https://cdn.example.com/categories/mens.jpg",
                }
            ]
        }
    }

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    image: str | None = Field(None, max_length=500)


class UpdateCategoryRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    image: str | None = Field(None, max_length=500)
    is_active: bool | None = None


# --- Coupons ---


class CreateCouponRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "code": "SAVE10",
                    "discount_percent": 10,
                    "expiry_date": "2030-12-31T23:59:59Z",
                    "minimum_order_amount": 100,
                    "usage_limit": 100,
                }
            ]
        }
    }

    code: str = Field(..., pattern=r"^[A-Za-z0-9]{3,20}$")
    discount_percent: float = Field(..., ge=1, le=100)
    expiry_date: datetime
    minimum_order_amount: float = Field(0.0, ge=0)
    usage_limit: int = Field(1, ge=1)


# --- Cart ---


class AddToCartRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [{"product_id": "7b0c6f0e-3f0c-4c51-9a55-0d7c2f3c1a10", "size": "M", "quantity": 2}]
        }
    }

    product_id: str
    size: str | None = Field(None, max_length=20)
    quantity: int = Field(1, ge=1)


class UpdateCartItemRequest(BaseModel):
    quantity: int | None = Field(None, ge=1)
    size: str | None = Field(None, max_length=20)


class ApplyCouponRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=20)


# --- Orders ---


class ShippingAddressIn(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=100)
    address_line1: str = Field(..., min_length=1, max_length=200)
    address_line2: str | None = Field(None, max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=30)


class PlaceOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address": {
                        "full_name": "Sam Rivera",
                        "address_line1": "123 Main St",
                        "city": "Springfield",
                        "state": "IL",
                        "postal_code": "62701",
                        "country": "US",
                        "phone": "+1-555-0100",
                    },
                    "payment_method": "card",
                    "notes": "Leave at the front desk",
                }
            ]
        }
    }

    shipping_address: ShippingAddressIn
    payment_method: PaymentMethodName
    notes: str | None = Field(None, max_length=500)


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


class UpdateOrderStatusRequest(BaseModel):
    status: StatusName
    note: str | None = Field(None, max_length=500)


class UpdateTrackingRequest(BaseModel):
    tracking_number: str = Field(..., min_length=1, max_length=100)
    carrier: CarrierName
    tracking_url: str | None = Field(None, max_length=500)
    note: str | None = Field(None, max_length=500)


class GuestOrderItemIn(BaseModel):
    product_id: str
    size: str | None = Field(None, max_length=20)
    quantity: int = Field(1, ge=1)


class PlaceGuestOrderRequest(BaseModel):
    guest_name: str = Field(..., min_length=1, max_length=100)
    guest_email: str = Field(..., min_length=3, max_length=254)
    guest_phone: str = Field(..., min_length=1, max_length=30)
    items: list[GuestOrderItemIn] = Field(..., min_length=1)
    shipping_address: ShippingAddressIn
    payment_method: PaymentMethodName = "cash"
    coupon_code: str | None = Field(None, max_length=20)
    notes: str | None = Field(None, max_length=500)


class GuestOrdersLookupRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)


# --- Reviews ---


class CreateReviewRequest(BaseModel):
    product_id: str
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=1000)


class UpdateReviewRequest(BaseModel):
    rating: int | None = Field(None, ge=1, le=5)
    comment: str | None = Field(None, min_length=1, max_length=1000)


class ModerateReviewRequest(BaseModel):
    status: ReviewStatusName
    note: str | None = Field(None, max_length=500)
