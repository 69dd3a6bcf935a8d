"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own state. IDs returned by creation
endpoints are recorded so follow-up requests can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class CatalogueState:
    """Products and coupons seeded by the back-office user."""

    category_id: str | None = None
    product_ids: list[str] = field(default_factory=list)
    coupon_codes: list[str] = field(default_factory=list)


@dataclass
class ShopperState:
    """Tracks a signed-in customer from browsing to a placed order."""

    customer_id: str | None = None
    product_ids: list[str] = field(default_factory=list)
    cart_item_ids: list[str] = field(default_factory=list)
    order_id: str | None = None
    order_number: str | None = None
    current_status: str | None = None


@dataclass
class GuestState:
    """Tracks a guest checkout and the follow-up lookups."""

    email: str | None = None
    order_number: str | None = None
