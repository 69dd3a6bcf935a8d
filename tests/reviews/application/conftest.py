import json

import pytest
from protean import current_domain

from storefront.ordering.cart_management import AddToCart
from storefront.ordering.checkout import PlaceOrder
from storefront.ordering.fulfillment import UpdateOrderStatus
from storefront.reviews.submission import SubmitReview


@pytest.fixture()
def receive_product(shipping_address):
    """Order the product for the customer and mark the order with ``status``."""

    def _receive(customer_id, product_id, status="delivered"):
        current_domain.process(
            AddToCart(customer_id=customer_id, product_id=product_id, size="M", quantity=1),
            asynchronous=False,
        )
        order_id = current_domain.process(
            PlaceOrder(
                customer_id=customer_id,
                shipping_address=json.dumps(shipping_address),
                payment_method="card",
            ),
            asynchronous=False,
        )
        if status != "pending":
            current_domain.process(UpdateOrderStatus(order_id=order_id, status=status), asynchronous=False)
        return order_id

    return _receive


@pytest.fixture()
def submit_review(receive_product):
    def _submit(customer_id, product_id, rating, comment="Nice product", receive=True):
        if receive:
            receive_product(customer_id, product_id)
        return current_domain.process(
            SubmitReview(product_id=product_id, customer_id=customer_id, rating=rating, comment=comment),
            asynchronous=False,
        )

    return _submit
