"""Coupon validator.

Advisory check run before pricing. Usage-limit headroom is checked again
inside the order commit, where the counter is actually incremented.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

import structlog
from protean.utils.globals import current_domain

from storefront.coupon.coupon import Coupon, CouponStatus, CouponType, normalize_code
from storefront.errors import CouponError

logger = structlog.get_logger(__name__)

MESSAGES = {
    CouponStatus.VALID: "Coupon applied",
    CouponStatus.NOT_FOUND: "Invalid coupon code",
    CouponStatus.INACTIVE: "This coupon is no longer active",
    CouponStatus.EXPIRED: "This coupon has expired",
    CouponStatus.LIMIT_REACHED: "Coupon usage limit reached",
}


@dataclass(frozen=True)
class CouponVerdict:
    status: CouponStatus
    code: str
    coupon_id: str | None = None
    coupon_type: CouponType | None = None
    value: float | None = None

    @property
    def is_valid(self) -> bool:
        return self.status == CouponStatus.VALID

    @property
    def message(self) -> str:
        return MESSAGES[self.status]


def find_coupon(code) -> Coupon | None:
    normalized = normalize_code(code)
    if not normalized:
        return None
    matches = current_domain.repository_for(Coupon)._dao.query.filter(code=normalized).all().items
    return matches[0] if matches else None


def validate_coupon(code, as_of=None) -> CouponVerdict:
    normalized = normalize_code(code)
    coupon = find_coupon(normalized)
    if coupon is None:
        return CouponVerdict(status=CouponStatus.NOT_FOUND, code=normalized)

    status = coupon.status(as_of or datetime.now(UTC))
    if status != CouponStatus.VALID:
        return CouponVerdict(status=status, code=normalized, coupon_id=str(coupon.id))

    return CouponVerdict(
        status=status,
        code=normalized,
        coupon_id=str(coupon.id),
        coupon_type=CouponType(coupon.coupon_type),
        value=coupon.value,
    )


def require_valid_coupon(code, as_of=None) -> CouponVerdict:
    verdict = validate_coupon(code, as_of=as_of)
    if not verdict.is_valid:
        logger.warning("Coupon rejected", code=verdict.code, status=verdict.status.value)
        raise CouponError(verdict.status.value, verdict.message, coupon_code=verdict.code)
    return verdict
