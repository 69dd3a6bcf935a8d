"""Coupon administration: command, handler and listing."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Integer, String
from protean.utils.globals import current_domain

from storefront.coupons.coupon import Coupon
from storefront.domain import storefront
from storefront.shared.queries import fetch_all


@storefront.command(part_of="Coupon")
class CreateCoupon:
    code = String(required=True, max_length=20)
    discount_percent = Float(required=True, min_value=1.0, max_value=100.0)
    expiry_date = DateTime(required=True)
    minimum_order_amount = Float(default=0.0, min_value=0.0)
    usage_limit = Integer(default=1, min_value=1)


@storefront.command_handler(part_of=Coupon)
class CreateCouponHandler:
    @handle(CreateCoupon)
    def create_coupon(self, command):
        repo = current_domain.repository_for(Coupon)
        if repo.find_by_code(command.code) is not None:
            raise ValidationError({"code": ["Coupon code already exists"]})

        coupon = Coupon.issue(
            code=command.code,
            discount_percent=command.discount_percent,
            expiry_date=command.expiry_date,
            minimum_order_amount=command.minimum_order_amount,
            usage_limit=command.usage_limit,
        )
        repo.add(coupon)
        return str(coupon.id)


def list_coupons():
    return fetch_all(Coupon, order_by="-created_at")
