"""Application tests for customer and back-office cancellation."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError

from storefront.catalogue.management import DeleteProduct
from storefront.catalogue.product import Product
from storefront.coupons.coupon import Coupon
from storefront.coupons.engine import usage_count
from storefront.ordering.cancellation import CancelOrder
from storefront.ordering.fulfillment import UpdateOrderStatus
from storefront.ordering.order import Order
from storefront.shared.errors import NotCancellable


def _cancel(order_id, customer_id="cust-001", reason=None):
    current_domain.process(
        CancelOrder(order_id=order_id, customer_id=customer_id, reason=reason),
        asynchronous=False,
    )


def _set_status(order_id, status):
    current_domain.process(UpdateOrderStatus(order_id=order_id, status=status), asynchronous=False)


class TestCancelOrderCommand:
    def test_cancel_restores_stock(self, make_product, fill_cart, checkout):
        product_id = make_product(stock=10)
        fill_cart("cust-001", product_id, quantity=3)
        order_id = checkout("cust-001")
        assert current_domain.repository_for(Product).get(product_id).stock == 7

        _cancel(order_id, reason="Ordered by mistake")

        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == "cancelled"
        assert order.history[-1]["note"] == "Ordered by mistake"
        assert current_domain.repository_for(Product).get(product_id).stock == 10

    def test_cancel_releases_coupon(self, make_product, make_coupon, fill_cart, apply_coupon, checkout):
        make_coupon(code="ONCE", usage_limit=1)
        product_id = make_product()
        fill_cart("cust-001", product_id)
        apply_coupon("cust-001", "ONCE")
        order_id = checkout("cust-001")

        _cancel(order_id)

        coupon = current_domain.repository_for(Coupon).find_by_code("ONCE")
        assert usage_count(coupon) == 0

    def test_confirmed_order_can_be_cancelled(self, make_product, fill_cart, checkout):
        fill_cart("cust-001", make_product())
        order_id = checkout("cust-001")
        _set_status(order_id, "confirmed")

        _cancel(order_id)
        assert current_domain.repository_for(Order).get(order_id).status == "cancelled"

    def test_shipped_order_cannot_be_cancelled(self, make_product, fill_cart, checkout):
        product_id = make_product(stock=10)
        fill_cart("cust-001", product_id, quantity=2)
        order_id = checkout("cust-001")
        _set_status(order_id, "shipped")

        with pytest.raises(NotCancellable):
            _cancel(order_id)

        assert current_domain.repository_for(Order).get(order_id).status == "shipped"
        assert current_domain.repository_for(Product).get(product_id).stock == 8

    def test_other_customers_order_is_hidden(self, make_product, fill_cart, checkout):
        fill_cart("cust-001", make_product())
        order_id = checkout("cust-001")

        with pytest.raises(ObjectNotFoundError):
            _cancel(order_id, customer_id="cust-002")

    def test_deleted_product_is_skipped_on_restock(self, make_product, fill_cart, checkout):
        kept = make_product(title="Kept", stock=5)
        gone = make_product(title="Gone", stock=5)
        fill_cart("cust-001", kept)
        fill_cart("cust-001", gone)
        order_id = checkout("cust-001")
        current_domain.process(DeleteProduct(product_id=gone), asynchronous=False)

        _cancel(order_id)

        assert current_domain.repository_for(Product).get(kept).stock == 5
        assert current_domain.repository_for(Order).get(order_id).status == "cancelled"


class TestAdminCancellation:
    def test_admin_cancel_restocks(self, make_product, fill_cart, checkout):
        product_id = make_product(stock=10)
        fill_cart("cust-001", product_id, quantity=3)
        order_id = checkout("cust-001")

        _set_status(order_id, "cancelled")

        assert current_domain.repository_for(Product).get(product_id).stock == 10
        order = current_domain.repository_for(Order).get(order_id)
        assert order.history[-1]["note"] == "Cancelled by administrator"
