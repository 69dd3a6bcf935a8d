import json

import pytest
from protean import current_domain

from storefront.ordering.cart_management import AddToCart, ApplyCoupon
from storefront.ordering.checkout import PlaceOrder


@pytest.fixture()
def fill_cart():
    def _fill(customer_id, product_id, quantity=1, size="M"):
        return current_domain.process(
            AddToCart(customer_id=customer_id, product_id=product_id, size=size, quantity=quantity),
            asynchronous=False,
        )

    return _fill


@pytest.fixture()
def apply_coupon():
    def _apply(customer_id, code):
        current_domain.process(ApplyCoupon(customer_id=customer_id, code=code), asynchronous=False)

    return _apply


@pytest.fixture()
def checkout(shipping_address):
    def _checkout(customer_id, payment_method="card", notes=None):
        return current_domain.process(
            PlaceOrder(
                customer_id=customer_id,
                shipping_address=json.dumps(shipping_address),
                payment_method=payment_method,
                notes=notes,
            ),
            asynchronous=False,
        )

    return _checkout
