"""Business-rule violations raised by the storefront.

All of them are Protean ``ValidationError`` subclasses, so handlers and
aggregates raise them the same way they raise any other rule violation and a
failed command rolls its unit of work back. Each class carries a stable
``code`` (its name) for API clients and the HTTP status it maps to.
"""

from protean.exceptions import ValidationError


class ConflictError(ValidationError):
    """A request that is well-formed but conflicts with current state."""

    field = "request"
    status_code = 400

    def __init__(self, message, field=None):
        self.message = message
        self.field = field or self.field
        super().__init__({self.field: [message]})

    @property
    def code(self):
        return type(self).__name__

    def __str__(self):
        return self.message


# Coupons
class Expired(ConflictError):
    field = "coupon_code"


class LimitReached(ConflictError):
    field = "coupon_code"


class AlreadyUsed(ConflictError):
    field = "coupon_code"


class BelowMinimum(ConflictError):
    field = "coupon_code"


# Carts
class QuantityExceeded(ConflictError):
    field = "quantity"


class ItemNotFound(ConflictError):
    field = "item_id"
    status_code = 404


class EmptyCart(ConflictError):
    field = "cart"


# Orders
class InsufficientStock(ConflictError):
    field = "stock"


class NotCancellable(ConflictError):
    field = "status"


class InvalidTransition(ConflictError):
    field = "status"


# Reviews
class DuplicateReview(ConflictError):
    field = "review"


class PurchaseRequired(ConflictError):
    field = "review"
