"""Pricing engine.

Pure integer-cent arithmetic: identical inputs always give an identical
total, which the payment verifier compares against the amount the gateway
actually charged. Conversion from and to decimal currency happens only at
the edges (``to_cents`` / ``from_cents``).

Tax is levied on the pre-discount subtotal.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from storefront.coupon.coupon import discount_cents


@dataclass(frozen=True)
class PricedLine:
    product_id: str
    unit_price_cents: int
    quantity: int

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal_cents: int
    discount_cents: int
    shipping_cents: int
    tax_cents: int
    total_cents: int

    def as_dict(self) -> dict:
        return {
            "subtotal_cents": self.subtotal_cents,
            "discount_cents": self.discount_cents,
            "shipping_cents": self.shipping_cents,
            "tax_cents": self.tax_cents,
            "total_cents": self.total_cents,
        }


def to_cents(amount) -> int:
    """Convert a decimal currency amount (e.g. 19.99) to integer cents, half-up."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(Decimal("0.01"))


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def shipping_for(subtotal_cents, zone_charge_cents, flat_fee_cents, free_threshold_cents) -> int:
    if zone_charge_cents is not None:
        return zone_charge_cents
    if subtotal_cents > free_threshold_cents:
        return 0
    return flat_fee_cents


def compute_pricing(
    lines,
    coupon=None,
    zone_charge_cents=None,
    tax_rate=0.0,
    flat_shipping_cents=6000,
    free_shipping_threshold_cents=100000,
) -> PriceBreakdown:
    """Price a cart.

    Args:
        lines: PricedLine items (unit price taken from the catalogue snapshot).
        coupon: a valid CouponVerdict, or None.
        zone_charge_cents: explicit shipping zone charge; overrides the flat
            fee and the free-shipping threshold.
        tax_rate: percentage applied to the subtotal.
    """
    subtotal = sum(line.line_total_cents for line in lines)

    discount = 0
    if coupon is not None:
        discount = discount_cents(coupon.coupon_type, coupon.value, subtotal)

    shipping = shipping_for(subtotal, zone_charge_cents, flat_shipping_cents, free_shipping_threshold_cents)
    tax = _round_half_up(Decimal(subtotal) * Decimal(str(tax_rate or 0)) / Decimal(100))
    total = max(0, subtotal - discount + shipping + tax)

    return PriceBreakdown(
        subtotal_cents=subtotal,
        discount_cents=discount,
        shipping_cents=shipping,
        tax_cents=tax,
        total_cents=total,
    )
