"""Shared BDD fixtures for the coupon workflows."""

from datetime import timedelta

import pytest
from protean import current_domain
from pytest_bdd import given, parsers

from storefront.coupons.engine import customer_key_for, find_coupon, redeem
from storefront.coupons.management import CreateCoupon
from storefront.shared.clock import utcnow


@pytest.fixture()
def error():
    """Container for captured rule violations."""
    return {"exc": None}


@pytest.fixture()
def outcome():
    return {}


@given(
    parsers.cfparse(
        'a coupon "{code}" for {percent:d} percent with a minimum order of {minimum:d} and a usage limit of {limit:d}'
    )
)
def coupon_exists(code, percent, minimum, limit):
    current_domain.process(
        CreateCoupon(
            code=code,
            discount_percent=percent,
            expiry_date=utcnow() + timedelta(days=30),
            minimum_order_amount=minimum,
            usage_limit=limit,
        ),
        asynchronous=False,
    )


@given(parsers.cfparse('customer "{customer_id}" has redeemed "{code}"'))
def customer_redeemed(customer_id, code):
    redeem(find_coupon(code), customer_key_for(customer_id=customer_id))
