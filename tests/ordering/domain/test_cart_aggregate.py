"""Tests for the Cart aggregate."""

import pytest
from protean.exceptions import ValidationError

from storefront.ordering.cart import Cart
from storefront.ordering.events import CartCleared, CartCouponApplied, CartItemAdded
from storefront.shared.errors import EmptyCart, InsufficientStock, ItemNotFound, QuantityExceeded


def _make_cart():
    return Cart.create(customer_id="cust-001")


def _add(cart, product_id="prod-001", size="M", quantity=1, unit_price=50.0, available=20, max_quantity=10):
    return cart.add_item(product_id, size, quantity, unit_price, available=available, max_quantity=max_quantity)


class TestAddItem:
    def test_add_item(self):
        cart = _make_cart()
        _add(cart, quantity=2)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2

    def test_add_item_raises_event(self):
        cart = _make_cart()
        _add(cart, quantity=2)
        events = [e for e in cart._events if isinstance(e, CartItemAdded)]
        assert len(events) == 1
        assert events[0].line_quantity == 2

    def test_same_product_and_size_merge(self):
        cart = _make_cart()
        _add(cart, quantity=2)
        _add(cart, quantity=3)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5

    def test_merge_refreshes_unit_price(self):
        cart = _make_cart()
        _add(cart, unit_price=50.0)
        _add(cart, unit_price=45.0)
        assert cart.items[0].unit_price == 45.0

    def test_different_size_is_a_new_line(self):
        cart = _make_cart()
        _add(cart, size="M")
        _add(cart, size="L")
        assert len(cart.items) == 2

    def test_line_cannot_exceed_stock(self):
        cart = _make_cart()
        _add(cart, quantity=3, available=4)
        with pytest.raises(QuantityExceeded) as exc:
            _add(cart, quantity=2, available=4)
        assert str(exc.value) == "Only 4 items available in stock"
        assert cart.items[0].quantity == 3

    def test_line_cannot_exceed_per_product_maximum(self):
        cart = _make_cart()
        with pytest.raises(QuantityExceeded) as exc:
            _add(cart, quantity=11, available=50)
        assert str(exc.value) == "Maximum 10 items allowed per product"

    def test_quantity_must_be_positive(self):
        cart = _make_cart()
        with pytest.raises(ValidationError):
            _add(cart, quantity=0)


class TestUpdateItem:
    def test_update_quantity(self):
        cart = _make_cart()
        item = _add(cart)
        cart.update_item(item.id, available=20, max_quantity=10, quantity=4)
        assert cart.items[0].quantity == 4

    def test_update_beyond_stock(self):
        cart = _make_cart()
        item = _add(cart)
        with pytest.raises(InsufficientStock):
            cart.update_item(item.id, available=3, max_quantity=10, quantity=4)

    def test_size_change_onto_existing_line_merges(self):
        cart = _make_cart()
        medium = _add(cart, size="M", quantity=2)
        _add(cart, size="L", quantity=3)

        merged = cart.update_item(medium.id, available=20, max_quantity=10, size="L")
        assert len(cart.items) == 1
        assert merged.size == "L"
        assert merged.quantity == 5

    def test_unknown_item(self):
        with pytest.raises(ItemNotFound):
            _make_cart().update_item("missing", available=20, max_quantity=10, quantity=2)


class TestRemoveAndClear:
    def test_remove_item(self):
        cart = _make_cart()
        item = _add(cart, product_id="prod-001")
        _add(cart, product_id="prod-002")
        cart.remove_item(item.id)
        assert [str(i.product_id) for i in cart.items] == ["prod-002"]

    def test_clear_drops_items_and_coupon(self):
        cart = _make_cart()
        _add(cart)
        cart.apply_coupon("coupon-1", "SAVE10")
        cart.clear()
        assert cart.is_empty
        assert cart.applied_coupon_code is None
        assert any(isinstance(e, CartCleared) for e in cart._events)


class TestCoupon:
    def test_apply_to_empty_cart(self):
        with pytest.raises(EmptyCart):
            _make_cart().apply_coupon("coupon-1", "SAVE10")

    def test_apply_replaces_previous(self):
        cart = _make_cart()
        _add(cart)
        cart.apply_coupon("coupon-1", "SAVE10")
        cart.apply_coupon("coupon-2", "SAVE20")
        assert cart.applied_coupon_code == "SAVE20"
        assert len([e for e in cart._events if isinstance(e, CartCouponApplied)]) == 2

    def test_remove_coupon(self):
        cart = _make_cart()
        _add(cart)
        cart.apply_coupon("coupon-1", "SAVE10")
        cart.remove_coupon()
        assert cart.applied_coupon_id is None


def test_quantities_by_product_spans_sizes():
    cart = _make_cart()
    _add(cart, size="M", quantity=2)
    _add(cart, size="L", quantity=3)
    _add(cart, product_id="prod-002", quantity=1)
    assert cart.quantities_by_product() == {"prod-001": 5, "prod-002": 1}
