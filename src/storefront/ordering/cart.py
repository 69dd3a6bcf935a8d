"""Cart aggregate: one per customer, converted into an Order at checkout.

A cart holds at most one line per (product, size). Adding the same pair again
accumulates quantity and refreshes the line's unit price; a size change that
lands on another line's size merges the two. A coupon can be attached but is
only redeemed when the order is placed.
"""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.domain import storefront
from storefront.ordering.events import (
    CartCleared,
    CartCouponApplied,
    CartCouponRemoved,
    CartItemAdded,
    CartItemRemoved,
    CartItemUpdated,
)
from storefront.shared.clock import utcnow
from storefront.shared.errors import EmptyCart, InsufficientStock, ItemNotFound, QuantityExceeded

_UNSET = object()


def _same_size(left, right):
    return (left or "") == (right or "")


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    size = String(max_length=20)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    added_at = DateTime()


@storefront.aggregate
class Cart:
    customer_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)
    applied_coupon_id = Identifier()
    applied_coupon_code = String(max_length=20)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def one_line_per_product_and_size(self):
        seen = set()
        for item in self.items:
            key = (str(item.product_id), item.size or "")
            if key in seen:
                raise ValidationError({"items": ["A product and size can only appear once in the cart"]})
            seen.add(key)

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id):
        now = utcnow()
        return cls(customer_id=customer_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------
    def find_line(self, product_id, size=None):
        return next(
            (i for i in self.items if str(i.product_id) == str(product_id) and _same_size(i.size, size)),
            None,
        )

    def get_line(self, item_id):
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ItemNotFound("Item not found in cart")
        return item

    def lines(self):
        """``(unit_price, quantity)`` pairs for pricing."""
        return [(item.unit_price, item.quantity) for item in self.items]

    def quantities_by_product(self):
        """Total quantity requested per product across all sizes."""
        totals = {}
        for item in self.items:
            key = str(item.product_id)
            totals[key] = totals.get(key, 0) + item.quantity
        return totals

    @property
    def is_empty(self):
        return not self.items

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, size, quantity, unit_price, available, max_quantity):
        """Add ``quantity`` of a product/size, merging into an existing line.

        ``available`` is the product's live stock and ``max_quantity`` the
        per-line ceiling; both bound the resulting line quantity.
        """
        existing = self.find_line(product_id, size)
        line_quantity = quantity + (existing.quantity if existing else 0)

        if line_quantity > available:
            raise QuantityExceeded(f"Only {available} items available in stock")
        if line_quantity > max_quantity:
            raise QuantityExceeded(f"Maximum {max_quantity} items allowed per product")

        now = utcnow()
        if existing:
            existing.quantity = line_quantity
            existing.unit_price = unit_price
            item = existing
        else:
            item = CartItem(
                product_id=product_id,
                size=size,
                quantity=quantity,
                unit_price=unit_price,
                added_at=now,
            )
            self.add_items(item)

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
                size=size,
                quantity=quantity,
                line_quantity=line_quantity,
            )
        )
        return item

    def update_item(self, item_id, available, max_quantity, quantity=None, size=_UNSET):
        """Change a line's quantity and/or size.

        Moving a line onto a size that already has its own line folds the two
        together.
        """
        item = self.get_line(item_id)
        new_quantity = quantity if quantity is not None else item.quantity
        new_size = item.size if size is _UNSET else size

        target = None
        if not _same_size(new_size, item.size):
            target = self.find_line(item.product_id, new_size)

        final_quantity = new_quantity + (target.quantity if target else 0)
        if final_quantity > available:
            raise InsufficientStock(f"Insufficient stock. Only {available} items available")
        if final_quantity > max_quantity:
            raise QuantityExceeded(f"Maximum {max_quantity} items allowed per product")

        if target is not None:
            target.quantity = final_quantity
            target.unit_price = item.unit_price
            self.remove_items(item)
            item = target
        else:
            item.quantity = new_quantity
            item.size = new_size

        self.updated_at = utcnow()

        self.raise_(
            CartItemUpdated(
                cart_id=str(self.id),
                item_id=str(item.id),
                quantity=item.quantity,
                size=item.size,
            )
        )
        return item

    def remove_item(self, item_id):
        item = self.get_line(item_id)
        self.remove_items(item)
        self.updated_at = utcnow()

        self.raise_(CartItemRemoved(cart_id=str(self.id), item_id=str(item_id)))

    def clear(self):
        """Drop every line and any applied coupon."""
        for item in list(self.items):
            self.remove_items(item)
        self.applied_coupon_id = None
        self.applied_coupon_code = None
        self.updated_at = utcnow()

        self.raise_(CartCleared(cart_id=str(self.id)))

    # -------------------------------------------------------------------
    # Coupon management
    # -------------------------------------------------------------------
    def apply_coupon(self, coupon_id, coupon_code):
        """Attach a validated coupon, replacing any previous one."""
        if self.is_empty:
            raise EmptyCart("Cart is empty")

        self.applied_coupon_id = coupon_id
        self.applied_coupon_code = coupon_code
        self.updated_at = utcnow()

        self.raise_(
            CartCouponApplied(
                cart_id=str(self.id),
                coupon_id=str(coupon_id),
                coupon_code=coupon_code,
            )
        )

    def remove_coupon(self):
        code = self.applied_coupon_code
        self.applied_coupon_id = None
        self.applied_coupon_code = None
        self.updated_at = utcnow()

        self.raise_(CartCouponRemoved(cart_id=str(self.id), coupon_code=code))


@storefront.repository(part_of=Cart)
class CartRepository:
    def find_for_customer(self, customer_id):
        return self._dao.query.filter(customer_id=str(customer_id)).all().first
