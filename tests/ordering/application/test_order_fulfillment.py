"""Application tests for status changes, tracking and back-office reads."""

import pytest
from protean import current_domain

from storefront.ordering.fulfillment import UpdateOrderStatus, UpdateOrderTracking
from storefront.ordering.lookups import (
    get_customer_order,
    list_all_orders,
    list_customer_orders,
    order_stats,
    track_order,
)
from storefront.ordering.order import Order
from storefront.shared.errors import InvalidTransition


def _place(make_product, fill_cart, checkout, customer_id="cust-001", price=50.0, quantity=1):
    fill_cart(customer_id, make_product(price=price), quantity=quantity)
    return checkout(customer_id)


def _set_status(order_id, status, note=None):
    current_domain.process(UpdateOrderStatus(order_id=order_id, status=status, note=note), asynchronous=False)


class TestStatusUpdates:
    def test_forward_move_records_history(self, make_product, fill_cart, checkout):
        order_id = _place(make_product, fill_cart, checkout)
        _set_status(order_id, "confirmed", "Payment verified")
        _set_status(order_id, "processing")

        order = current_domain.repository_for(Order).get(order_id)
        assert [entry["stage"] for entry in order.history] == ["pending", "confirmed", "processing"]
        assert order.history[1]["note"] == "Payment verified"

    def test_backward_move_refused(self, make_product, fill_cart, checkout):
        order_id = _place(make_product, fill_cart, checkout)
        _set_status(order_id, "shipped")

        with pytest.raises(InvalidTransition):
            _set_status(order_id, "confirmed")

    def test_tracking_ships_a_processing_order(self, make_product, fill_cart, checkout):
        order_id = _place(make_product, fill_cart, checkout)
        _set_status(order_id, "processing")

        current_domain.process(
            UpdateOrderTracking(order_id=order_id, tracking_number=" 1Z999 ", carrier="UPS"),
            asynchronous=False,
        )

        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == "shipped"
        assert order.tracking_number == "1Z999"
        assert order.shipped_at is not None


class TestLookups:
    def test_public_tracking(self, make_product, fill_cart, checkout):
        order_id = _place(make_product, fill_cart, checkout)
        _set_status(order_id, "shipped")
        order = current_domain.repository_for(Order).get(order_id)

        details = track_order(order.order_number)
        assert details["status"] == "shipped"
        assert details["estimated_delivery"] is not None

    def test_customer_sees_only_own_orders(self, make_product, fill_cart, checkout):
        mine = _place(make_product, fill_cart, checkout, customer_id="cust-001")
        _place(make_product, fill_cart, checkout, customer_id="cust-002")

        page = list_customer_orders("cust-001")
        assert [str(order.id) for order in page.items] == [mine]
        assert str(get_customer_order(mine, "cust-001").id) == mine

    def test_admin_listing_by_status(self, make_product, fill_cart, checkout):
        first = _place(make_product, fill_cart, checkout, customer_id="cust-001")
        _place(make_product, fill_cart, checkout, customer_id="cust-002")
        _set_status(first, "confirmed")

        assert list_all_orders().total == 2
        assert [str(order.id) for order in list_all_orders(status="confirmed").items] == [first]

    def test_stats_count_revenue_from_shipped_and_delivered(self, make_product, fill_cart, checkout):
        shipped = _place(make_product, fill_cart, checkout, customer_id="cust-001", price=40.0)
        delivered = _place(make_product, fill_cart, checkout, customer_id="cust-002", price=60.0)
        _place(make_product, fill_cart, checkout, customer_id="cust-003", price=100.0)
        _set_status(shipped, "shipped")
        _set_status(delivered, "delivered")

        stats = order_stats()
        assert stats["total_orders"] == 3
        assert stats["by_status"]["pending"] == 1
        assert stats["by_status"]["shipped"] == 1
        assert stats["by_status"]["delivered"] == 1
        assert stats["total_revenue"] == 100.0
        assert len(stats["recent_orders"]) == 3
