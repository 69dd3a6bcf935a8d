"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the API's Pydantic request
schemas and the domain's validation rules.
"""

import random
import uuid
from datetime import UTC, datetime, timedelta

from faker import Faker

fake = Faker()

SIZES = ["S", "M", "L", "XL"]


def customer_id() -> str:
    return f"cust-lt-{uuid.uuid4().hex[:8]}"


def valid_phone() -> str:
    area = random.randint(200, 999)
    prefix = random.randint(200, 999)
    line = random.randint(1000, 9999)
    return f"+1-{area}-{prefix}-{line}"


def valid_email() -> str:
    local = fake.user_name()[:20]
    return f"{local}.{uuid.uuid4().hex[:4]}@{fake.free_email_domain()}"


# ---------- Catalogue ----------


def category_name() -> str:
    """Generate a unique category name like 'Casual Footwear 3f2a'."""
    return f"{fake.word().capitalize()} {fake.word().capitalize()} {uuid.uuid4().hex[:4]}"[:100]


def product_data(category_id: str) -> dict:
    """Generate a CreateProductRequest payload."""
    word = fake.word().capitalize()
    data = {
        "title": f"{word} {fake.word().capitalize()} Tee"[:200],
        "description": fake.paragraph(nb_sentences=3)[:2000],
        "brand": fake.company()[:50],
        "category_id": category_id,
        "price": round(random.uniform(9.99, 199.99), 2),
        "stock": random.randint(200, 1000),
        "images": [f"https://cdn.example.com/images/{uuid.uuid4().hex}.jpg"],
        "sizes": SIZES,
        "tags": [fake.word() for _ in range(3)],
    }
    if random.random() < 0.3:
        data["discount"] = {
            "percentage": random.choice([5, 10, 15, 25]),
            "valid_till": (datetime.now(UTC) + timedelta(days=7)).isoformat(),
        }
    return data


# ---------- Coupons ----------


def coupon_data() -> dict:
    """Generate a CreateCouponRequest payload with a unique code."""
    return {
        "code": f"LT{uuid.uuid4().hex[:8].upper()}",
        "discount_percent": random.choice([5, 10, 15, 20]),
        "expiry_date": (datetime.now(UTC) + timedelta(days=30)).isoformat(),
        "minimum_order_amount": 0,
        "usage_limit": 100000,
    }


# ---------- Ordering ----------


def shipping_address() -> dict:
    return {
        "full_name": fake.name()[:100],
        "address_line1": fake.street_address()[:200],
        "city": fake.city()[:100],
        "state": fake.state_abbr(),
        "postal_code": fake.zipcode()[:20],
        "country": "US",
        "phone": valid_phone(),
    }


def cart_item(product_id: str) -> dict:
    return {"product_id": product_id, "size": random.choice(SIZES), "quantity": random.randint(1, 3)}


def checkout_data() -> dict:
    return {
        "shipping_address": shipping_address(),
        "payment_method": random.choice(["card", "paypal", "stripe", "cash"]),
        "notes": fake.sentence()[:500] if random.random() < 0.2 else None,
    }


def guest_order_data(product_ids: list[str], email: str | None = None) -> dict:
    """Generate a PlaceGuestOrderRequest payload for one to three products."""
    chosen = random.sample(product_ids, k=min(len(product_ids), random.randint(1, 3)))
    return {
        "guest_name": fake.name()[:100],
        "guest_email": email or valid_email(),
        "guest_phone": valid_phone(),
        "items": [cart_item(product_id) for product_id in chosen],
        "shipping_address": shipping_address(),
        "payment_method": "cash",
    }


# ---------- Reviews ----------


def review_data(product_id: str) -> dict:
    return {
        "product_id": product_id,
        "rating": random.choices([1, 2, 3, 4, 5], weights=[1, 1, 2, 4, 5])[0],
        "comment": fake.paragraph(nb_sentences=2)[:1000],
    }
