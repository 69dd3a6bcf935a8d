"""Coupon Engine: validation, discount calculation and redemption.

``validate_coupon`` is read-only and reports the first failed rule, checked in
a fixed order: expiry, global usage limit, previous use by the customer,
minimum order amount. ``redeem`` and ``release`` are the only writers of the
redemption ledger and run inside the caller's unit of work.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.coupons.coupon import Coupon, CouponRedemption
from storefront.shared.errors import AlreadyUsed, BelowMinimum, Expired, LimitReached

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CouponCheck:
    valid: bool
    message: str
    reason: type | None = None

    def raise_if_invalid(self):
        if not self.valid:
            raise self.reason(self.message)


_VALID = CouponCheck(valid=True, message="Coupon is valid")


def customer_key_for(customer_id=None, guest_email=None):
    """Ledger key for a registered customer or a guest (by e-mail)."""
    if customer_id:
        return str(customer_id)
    return f"guest:{(guest_email or '').strip().lower()}"


def find_coupon(code) -> Coupon:
    coupon = current_domain.repository_for(Coupon).find_by_code(code)
    if coupon is None:
        raise ObjectNotFoundError({"coupon_code": ["Invalid coupon code"]})
    return coupon


def validate_coupon(coupon: Coupon, customer_key, order_amount) -> CouponCheck:
    """Check whether ``customer_key`` may use ``coupon`` on ``order_amount``."""
    ledger = current_domain.repository_for(CouponRedemption)

    if coupon.is_expired():
        return CouponCheck(valid=False, reason=Expired, message="Coupon has expired")
    if ledger.count_for(coupon.id) >= coupon.usage_limit:
        return CouponCheck(valid=False, reason=LimitReached, message="Coupon usage limit reached")
    if ledger.find_for(coupon.id, customer_key) is not None:
        return CouponCheck(valid=False, reason=AlreadyUsed, message="You have already used this coupon")
    if order_amount < (coupon.minimum_order_amount or 0.0):
        return CouponCheck(
            valid=False,
            reason=BelowMinimum,
            message=f"Minimum order amount of ${coupon.minimum_order_amount:.2f} required",
        )
    return _VALID


def redeem(coupon: Coupon, customer_key, order_id=None) -> CouponRedemption:
    """Record a use of the coupon by the customer."""
    ledger = current_domain.repository_for(CouponRedemption)

    if ledger.find_for(coupon.id, customer_key) is not None:
        raise AlreadyUsed("You have already used this coupon")
    if ledger.count_for(coupon.id) >= coupon.usage_limit:
        raise LimitReached("Coupon usage limit reached")

    redemption = CouponRedemption.record(
        coupon_id=coupon.id,
        customer_key=customer_key,
        order_id=order_id,
    )
    ledger.add(redemption)

    logger.info("Coupon redeemed", coupon_code=coupon.code, customer_key=customer_key, order_id=order_id)
    return redemption


def release(coupon_id, customer_key):
    """Undo a redemption; a missing ledger row is left alone."""
    ledger = current_domain.repository_for(CouponRedemption)
    redemption = ledger.find_for(coupon_id, customer_key)
    if redemption is None:
        logger.warning("No redemption to release", coupon_id=str(coupon_id), customer_key=customer_key)
        return False

    ledger._dao.delete(redemption)
    logger.info("Coupon redemption released", coupon_id=str(coupon_id), customer_key=customer_key)
    return True


def usage_count(coupon: Coupon):
    return current_domain.repository_for(CouponRedemption).count_for(coupon.id)
