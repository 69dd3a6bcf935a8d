"""Cart commands and handlers: items, coupons, clearing, and the summary read."""

from dataclasses import dataclass, field

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.coupons.coupon import Coupon
from storefront.coupons.engine import customer_key_for, find_coupon, validate_coupon
from storefront.domain import storefront
from storefront.ordering.cart import Cart
from storefront.ordering.pricing import PriceSummary, price_lines
from storefront.shared.errors import EmptyCart, ItemNotFound
from storefront.shared.queries import custom_setting


@storefront.command(part_of="Cart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(max_length=20)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Cart")
class UpdateCartItem:
    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(min_value=1)
    size = String(max_length=20)


@storefront.command(part_of="Cart")
class RemoveCartItem:
    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ClearCart:
    customer_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ApplyCoupon:
    customer_id = Identifier(required=True)
    code = String(required=True, max_length=20)


@storefront.command(part_of="Cart")
class RemoveCoupon:
    customer_id = Identifier(required=True)


def max_line_quantity():
    return int(custom_setting("CART_MAX_LINE_QUANTITY", 10))


def _load_cart(customer_id, create=False):
    repo = current_domain.repository_for(Cart)
    cart = repo.find_for_customer(customer_id)
    if cart is None and create:
        cart = Cart.create(customer_id=customer_id)
    return cart


def _require_cart(customer_id):
    cart = _load_cart(customer_id)
    if cart is None:
        raise ItemNotFound("Cart not found")
    return cart


@storefront.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = current_domain.repository_for(Product).get(command.product_id)
        size = product.resolve_size(command.size)

        cart = _load_cart(command.customer_id, create=True)
        item = cart.add_item(
            product_id=command.product_id,
            size=size,
            quantity=command.quantity,
            unit_price=product.effective_price,
            available=product.stock or 0,
            max_quantity=max_line_quantity(),
        )
        current_domain.repository_for(Cart).add(cart)
        return str(item.id)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        cart = _require_cart(command.customer_id)
        item = cart.get_line(command.item_id)
        product = current_domain.repository_for(Product).get(item.product_id)

        changes = {}
        if command.quantity is not None:
            changes["quantity"] = command.quantity
        if command.size is not None:
            changes["size"] = product.resolve_size(command.size)

        cart.update_item(
            command.item_id,
            available=product.stock or 0,
            max_quantity=max_line_quantity(),
            **changes,
        )
        current_domain.repository_for(Cart).add(cart)

    @handle(RemoveCartItem)
    def remove_cart_item(self, command):
        cart = _require_cart(command.customer_id)
        cart.remove_item(command.item_id)
        current_domain.repository_for(Cart).add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = _load_cart(command.customer_id)
        if cart is None:
            return
        cart.clear()
        current_domain.repository_for(Cart).add(cart)

    @handle(ApplyCoupon)
    def apply_coupon(self, command):
        cart = _load_cart(command.customer_id)
        if cart is None or cart.is_empty:
            raise EmptyCart("Cart is empty")

        coupon = find_coupon(command.code)
        subtotal = price_lines(cart.lines()).subtotal
        validate_coupon(coupon, customer_key_for(command.customer_id), subtotal).raise_if_invalid()

        cart.apply_coupon(coupon.id, coupon.code)
        current_domain.repository_for(Cart).add(cart)

    @handle(RemoveCoupon)
    def remove_coupon(self, command):
        cart = _require_cart(command.customer_id)
        cart.remove_coupon()
        current_domain.repository_for(Cart).add(cart)


# ---------------------------------------------------------------------------
# Read side
# ---------------------------------------------------------------------------
@dataclass
class CartView:
    cart: Cart | None
    summary: PriceSummary
    coupon: Coupon | None = None
    products: dict = field(default_factory=dict)


def applied_coupon(cart):
    """The cart's coupon, or None when it has none or it has since been deleted."""
    if cart is None or not cart.applied_coupon_id:
        return None
    try:
        return current_domain.repository_for(Coupon).get(cart.applied_coupon_id)
    except ObjectNotFoundError:
        return None


def view_cart(customer_id) -> CartView:
    """The customer's cart with its summary; an empty summary when there is no cart."""
    cart = _load_cart(customer_id)
    if cart is None:
        return CartView(cart=None, summary=price_lines([]))

    coupon = applied_coupon(cart)
    products = {}
    product_repo = current_domain.repository_for(Product)
    for item in cart.items:
        try:
            products[str(item.product_id)] = product_repo.get(item.product_id)
        except ObjectNotFoundError:
            continue

    return CartView(
        cart=cart,
        summary=price_lines(cart.lines(), coupon),
        coupon=coupon,
        products=products,
    )
