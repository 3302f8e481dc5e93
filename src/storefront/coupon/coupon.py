"""Coupon aggregate: promotional codes and their usage ledger.

``usage_count`` is a shared counter: it only moves inside the order
placement unit of work, by exactly one per committed order.
"""

from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String

from storefront.coupon.events import CouponRedeemed
from storefront.domain import storefront
from storefront.utils.timestamps import as_utc


class CouponType(Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


class CouponStatus(Enum):
    VALID = "Valid"
    NOT_FOUND = "NotFound"
    INACTIVE = "Inactive"
    EXPIRED = "Expired"
    LIMIT_REACHED = "LimitReached"


def normalize_code(code):
    return (code or "").strip().upper()


@storefront.aggregate
class Coupon:
    code = String(required=True, max_length=50, unique=True)
    coupon_type = String(required=True, choices=CouponType)
    # Percent for PERCENTAGE coupons, currency units (e.g. dollars) for FIXED
    value = Float(required=True, min_value=0.0)
    is_active = Boolean(default=True)
    expires_at = DateTime(required=True)
    usage_limit = Integer(min_value=0)
    usage_count = Integer(default=0, min_value=0)

    @classmethod
    def create(cls, code, coupon_type, value, expires_at, usage_limit=None, is_active=True):
        coupon_type = CouponType(coupon_type.value if isinstance(coupon_type, CouponType) else coupon_type)
        return cls(
            code=normalize_code(code),
            coupon_type=coupon_type.value,
            value=value,
            is_active=is_active,
            expires_at=expires_at,
            usage_limit=usage_limit,
            usage_count=0,
        )

    def has_headroom(self):
        return self.usage_limit is None or self.usage_count < self.usage_limit

    def status(self, as_of=None):
        as_of = as_of or datetime.now(UTC)
        if not self.is_active:
            return CouponStatus.INACTIVE
        if as_utc(as_of) >= as_utc(self.expires_at):
            return CouponStatus.EXPIRED
        if not self.has_headroom():
            return CouponStatus.LIMIT_REACHED
        return CouponStatus.VALID

    def redeem(self, order_number):
        if not self.has_headroom():
            raise ValidationError({"usage_limit": [f"Coupon {self.code} usage limit reached"]})

        self.usage_count = self.usage_count + 1
        self.raise_(
            CouponRedeemed(
                coupon_id=str(self.id),
                code=self.code,
                order_number=order_number,
                usage_count=self.usage_count,
            )
        )


def discount_cents(coupon_type, value, subtotal_cents):
    """Discount for a subtotal, rounded half-up to whole cents.

    Not clamped to the subtotal; the order total is clamped at zero instead.
    """
    coupon_type = CouponType(coupon_type)
    value = Decimal(str(value))
    if coupon_type == CouponType.PERCENTAGE:
        amount = Decimal(subtotal_cents) * value / Decimal(100)
    else:
        amount = value * Decimal(100)
    return int(amount.quantize(Decimal(1), rounding=ROUND_HALF_UP))
