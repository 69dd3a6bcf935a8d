"""Storefront domain: catalogue, coupons, carts, orders and reviews.

A single bounded context backing the shop's REST API. Commands are processed
synchronously; every handler runs inside one unit of work so that stock,
coupon redemptions and carts change together or not at all.
"""

import structlog
from protean.domain import Domain

from storefront.utils.logging import configure_logging

configure_logging()

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
