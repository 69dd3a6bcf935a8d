"""Shared BDD fixtures and step definitions for the checkout workflow."""

import json
from datetime import timedelta

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then

from storefront.catalogue.category import Category
from storefront.catalogue.management import CreateCategory, CreateProduct
from storefront.catalogue.product import Product
from storefront.coupons.management import CreateCoupon
from storefront.ordering.cart_management import AddToCart, ApplyCoupon
from storefront.ordering.checkout import PlaceOrder
from storefront.shared.clock import utcnow
from storefront.shared.errors import ConflictError

CUSTOMER = "cust-bdd-001"


@pytest.fixture()
def customer_id():
    return CUSTOMER


@pytest.fixture()
def products():
    """Product ids by title."""
    return {}


@pytest.fixture()
def placed():
    return {"order_id": None}


@pytest.fixture()
def error():
    """Container for captured rule violations."""
    return {"exc": None}


def _category_id():
    existing = current_domain.repository_for(Category).find_by_slug("apparel")
    if existing is not None:
        return existing.id
    return current_domain.process(CreateCategory(name="Apparel"), asynchronous=False)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{title}" priced {price:d} with {stock:d} in stock'))
def product_exists(products, title, price, stock):
    products[title] = current_domain.process(
        CreateProduct(
            title=title,
            description=f"{title} for everyday wear",
            brand="Acme",
            category_id=_category_id(),
            price=price,
            stock=stock,
            sizes=json.dumps(["S", "M", "L"]),
        ),
        asynchronous=False,
    )


@given(parsers.cfparse('a coupon "{code}" for {percent:d} percent with a minimum order of {minimum:d}'))
def coupon_exists(code, percent, minimum):
    current_domain.process(
        CreateCoupon(
            code=code,
            discount_percent=percent,
            expiry_date=utcnow() + timedelta(days=30),
            minimum_order_amount=minimum,
            usage_limit=100,
        ),
        asynchronous=False,
    )


@given(parsers.cfparse('the customer adds {quantity:d} of "{title}" in size "{size}"'))
def add_to_cart(customer_id, products, quantity, title, size):
    current_domain.process(
        AddToCart(customer_id=customer_id, product_id=products[title], size=size, quantity=quantity),
        asynchronous=False,
    )


@given(parsers.cfparse('the customer applies coupon "{code}"'))
def apply_coupon(customer_id, code):
    current_domain.process(ApplyCoupon(customer_id=customer_id, code=code), asynchronous=False)


@pytest.fixture()
def place_order(customer_id, placed):
    def _place():
        placed["order_id"] = _checkout(customer_id)

    return _place


def _checkout(customer_id):
    return current_domain.process(
        PlaceOrder(
            customer_id=customer_id,
            shipping_address=json.dumps(
                {
                    "full_name": "Sam Rivera",
                    "address_line1": "123 Main St",
                    "city": "Springfield",
                    "state": "IL",
                    "postal_code": "62701",
                    "country": "US",
                    "phone": "+1-555-0100",
                }
            ),
            payment_method="card",
        ),
        asynchronous=False,
    )


@given("the customer checks out")
def checked_out(place_order):
    place_order()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the request fails with "{code}"'))
def request_fails(error, code):
    assert isinstance(error["exc"], ConflictError)
    assert error["exc"].code == code


@then(parsers.cfparse('"{title}" has {stock:d} in stock'))
def product_stock(products, title, stock):
    assert current_domain.repository_for(Product).get(products[title]).stock == stock
