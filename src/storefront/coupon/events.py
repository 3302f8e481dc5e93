"""Domain events for the Coupon aggregate."""

from protean.fields import Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Coupon")
class CouponRedeemed:
    """A committed order used the coupon."""

    __version__ = 1

    coupon_id = Identifier(required=True)
    code = String(required=True)
    order_number = String(required=True)
    usage_count = Integer(required=True)
