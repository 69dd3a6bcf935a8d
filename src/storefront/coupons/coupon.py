"""Coupon aggregate and the redemption ledger.

A coupon never stores who used it. Each use is a ``CouponRedemption`` row
whose ``redemption_key`` (coupon id + customer key) is unique, and the number
of uses is counted from the ledger when it is needed.
"""

import re

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront
from storefront.shared.clock import as_utc, utcnow
from storefront.shared.money import percentage_of

_CODE = re.compile(r"^[A-Z0-9]{3,20}$")


def normalize_code(code):
    return (code or "").strip().upper()


def redemption_key(coupon_id, customer_key):
    return f"{coupon_id}:{customer_key}"


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------
@storefront.event(part_of="Coupon")
class CouponCreated:
    """An administrator issued a new coupon code."""

    __version__ = 1

    coupon_id = Identifier(required=True)
    code = String(required=True)
    discount_percent = Float(required=True)
    expiry_date = DateTime(required=True)
    usage_limit = Integer(required=True)


@storefront.event(part_of="CouponRedemption")
class CouponRedeemed:
    """A customer used a coupon on an order."""

    __version__ = 1

    coupon_id = Identifier(required=True)
    customer_key = String(required=True)
    order_id = Identifier()
    redeemed_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------
@storefront.aggregate
class Coupon:
    code = String(required=True, max_length=20, unique=True)
    discount_percent = Float(required=True, min_value=1.0, max_value=100.0)
    expiry_date = DateTime(required=True)
    minimum_order_amount = Float(default=0.0, min_value=0.0)
    usage_limit = Integer(default=1, min_value=1)
    created_at = DateTime()

    @invariant.post
    def code_must_be_alphanumeric(self):
        if self.code and not _CODE.match(self.code):
            raise ValidationError({"code": ["Coupon code must be 3-20 uppercase letters or digits"]})

    @classmethod
    def issue(cls, code, discount_percent, expiry_date, minimum_order_amount=0.0, usage_limit=1):
        """Create a coupon; the expiry must lie in the future."""
        now = utcnow()
        if expiry_date is None or as_utc(expiry_date) <= now:
            raise ValidationError({"expiry_date": ["Expiry date must be in the future"]})

        coupon = cls(
            code=normalize_code(code),
            discount_percent=discount_percent,
            expiry_date=as_utc(expiry_date),
            minimum_order_amount=minimum_order_amount or 0.0,
            usage_limit=usage_limit or 1,
            created_at=now,
        )
        coupon.raise_(
            CouponCreated(
                coupon_id=coupon.id,
                code=coupon.code,
                discount_percent=coupon.discount_percent,
                expiry_date=coupon.expiry_date,
                usage_limit=coupon.usage_limit,
            )
        )
        return coupon

    def is_expired(self, at=None):
        return as_utc(self.expiry_date) <= (at or utcnow())

    def calculate_discount(self, order_amount):
        """Discount for an order amount; nothing below the minimum."""
        if order_amount < (self.minimum_order_amount or 0.0):
            return 0.0
        return percentage_of(order_amount, self.discount_percent)


@storefront.aggregate
class CouponRedemption:
    coupon_id = Identifier(required=True)
    customer_key = String(required=True, max_length=255)
    redemption_key = String(required=True, max_length=300, unique=True)
    order_id = Identifier()
    redeemed_at = DateTime()

    @classmethod
    def record(cls, coupon_id, customer_key, order_id=None):
        now = utcnow()
        redemption = cls(
            coupon_id=coupon_id,
            customer_key=customer_key,
            redemption_key=redemption_key(coupon_id, customer_key),
            order_id=order_id,
            redeemed_at=now,
        )
        redemption.raise_(
            CouponRedeemed(
                coupon_id=coupon_id,
                customer_key=customer_key,
                order_id=order_id,
                redeemed_at=now,
            )
        )
        return redemption


@storefront.repository(part_of=Coupon)
class CouponRepository:
    def find_by_code(self, code):
        return self._dao.query.filter(code=normalize_code(code)).all().first


@storefront.repository(part_of=CouponRedemption)
class CouponRedemptionRepository:
    def find_for(self, coupon_id, customer_key):
        return self._dao.query.filter(redemption_key=redemption_key(coupon_id, customer_key)).all().first

    def count_for(self, coupon_id):
        return self._dao.query.filter(coupon_id=str(coupon_id)).all().total
