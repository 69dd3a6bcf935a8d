"""Application tests for the cart commands and the cart view."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.catalogue.management import DeleteProduct
from storefront.coupons.coupon import Coupon
from storefront.ordering.cart import Cart
from storefront.ordering.cart_management import (
    AddToCart,
    ApplyCoupon,
    ClearCart,
    RemoveCartItem,
    RemoveCoupon,
    UpdateCartItem,
    view_cart,
)
from storefront.shared.errors import BelowMinimum, EmptyCart, QuantityExceeded

CUSTOMER = "cust-001"


def _add(product_id, quantity=1, size="M", customer_id=CUSTOMER):
    return current_domain.process(
        AddToCart(customer_id=customer_id, product_id=product_id, size=size, quantity=quantity),
        asynchronous=False,
    )


def _cart(customer_id=CUSTOMER):
    return current_domain.repository_for(Cart).find_for_customer(customer_id)


class TestAddToCart:
    def test_first_add_creates_cart(self, make_product):
        product_id = make_product(price=50.0)
        _add(product_id, quantity=2)

        cart = _cart()
        assert len(cart.items) == 1
        assert cart.items[0].unit_price == 50.0

    def test_same_product_and_size_accumulate(self, make_product):
        product_id = make_product()
        _add(product_id, quantity=2, size="m")
        _add(product_id, quantity=3, size="M")

        cart = _cart()
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5

    def test_discounted_price_is_captured(self, make_product):
        product_id = make_product(price=100.0, discount_percentage=10.0)
        _add(product_id)
        assert _cart().items[0].unit_price == 90.0

    def test_size_required(self, make_product):
        product_id = make_product()
        with pytest.raises(ValidationError):
            _add(product_id, size=None)

    def test_unknown_product(self):
        with pytest.raises(ObjectNotFoundError):
            _add("missing-product")

    def test_stock_bounds_line(self, make_product):
        product_id = make_product(stock=3)
        _add(product_id, quantity=2)
        with pytest.raises(QuantityExceeded):
            _add(product_id, quantity=2)
        assert _cart().items[0].quantity == 2


class TestUpdateAndRemove:
    def test_update_quantity(self, make_product):
        product_id = make_product()
        item_id = _add(product_id)
        current_domain.process(
            UpdateCartItem(customer_id=CUSTOMER, item_id=item_id, quantity=4),
            asynchronous=False,
        )
        assert _cart().items[0].quantity == 4

    def test_remove_item(self, make_product):
        item_id = _add(make_product())
        current_domain.process(RemoveCartItem(customer_id=CUSTOMER, item_id=item_id), asynchronous=False)
        assert _cart().is_empty

    def test_clear_without_cart_is_a_no_op(self):
        current_domain.process(ClearCart(customer_id="nobody"), asynchronous=False)
        assert _cart("nobody") is None


class TestCartCoupons:
    def test_apply_coupon_to_empty_cart(self, make_coupon):
        make_coupon()
        with pytest.raises(EmptyCart):
            current_domain.process(ApplyCoupon(customer_id=CUSTOMER, code="SAVE10"), asynchronous=False)

    def test_apply_below_minimum(self, make_product, make_coupon):
        make_coupon(minimum_order_amount=100.0)
        _add(make_product(price=50.0))
        with pytest.raises(BelowMinimum):
            current_domain.process(ApplyCoupon(customer_id=CUSTOMER, code="save10"), asynchronous=False)

    def test_apply_and_remove(self, make_product, make_coupon):
        make_coupon(minimum_order_amount=100.0)
        _add(make_product(price=50.0), quantity=4)

        current_domain.process(ApplyCoupon(customer_id=CUSTOMER, code="save10"), asynchronous=False)
        assert _cart().applied_coupon_code == "SAVE10"

        current_domain.process(RemoveCoupon(customer_id=CUSTOMER), asynchronous=False)
        assert _cart().applied_coupon_code is None


class TestViewCart:
    def test_no_cart_gives_empty_summary(self):
        view = view_cart("nobody")
        assert view.cart is None
        assert view.summary.items_count == 0
        assert view.summary.total == 0.0

    def test_summary_with_coupon(self, make_product, make_coupon):
        make_coupon(minimum_order_amount=100.0)
        _add(make_product(price=50.0), quantity=4)
        current_domain.process(ApplyCoupon(customer_id=CUSTOMER, code="SAVE10"), asynchronous=False)

        view = view_cart(CUSTOMER)
        assert view.summary.to_dict() == {
            "items_count": 4,
            "subtotal": 200.0,
            "discount_amount": 20.0,
            "total": 180.0,
        }
        assert view.coupon.code == "SAVE10"

    def test_deleted_coupon_is_ignored(self, make_product, make_coupon):
        coupon_id = make_coupon()
        _add(make_product(price=50.0), quantity=2)
        current_domain.process(ApplyCoupon(customer_id=CUSTOMER, code="SAVE10"), asynchronous=False)

        repo = current_domain.repository_for(Coupon)
        repo._dao.delete(repo.get(coupon_id))

        view = view_cart(CUSTOMER)
        assert view.coupon is None
        assert view.summary.discount_amount == 0.0

    def test_deleted_product_is_left_out_of_lookup(self, make_product):
        product_id = make_product()
        _add(product_id)
        current_domain.process(DeleteProduct(product_id=product_id), asynchronous=False)

        view = view_cart(CUSTOMER)
        assert view.products == {}
        assert view.summary.items_count == 1
