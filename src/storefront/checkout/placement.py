"""Order placement service: the inbound ``place_order`` operation.

Sequence:
    1. Validate the payload (payment method, contact details, cart lines)
    2. Read product snapshots and run an advisory stock check
    3. Validate the coupon, load tax rate and shipping zone, price the cart
    4. Verify an online payment against the computed total
    5. Allocate an order number
    6. Commit atomically, retrying the whole commit on storage conflicts

Steps 1-5 have no side effects. Checkout failures are returned as a
``PlacementResult`` carrying a typed ``PlacementFailure`` rather than raised.
"""

import json
from dataclasses import dataclass, field

import structlog
from protean.exceptions import ExpectedVersionError, ValidationError
from protean.utils.globals import current_domain

from storefront.catalogue.snapshot import read_product_snapshots
from storefront.checkout.cart_lines import parse_cart_lines
from storefront.checkout.commit import CommitOrder
from storefront.checkout.order_number import generate_order_number
from storefront.checkout.pricing import PriceBreakdown, PricedLine, compute_pricing
from storefront.checkout.settings import load_checkout_terms
from storefront.config import CheckoutSettings, get_settings
from storefront.coupon.validation import CouponVerdict, require_valid_coupon
from storefront.errors import CheckoutError, InvalidCartError, OutOfStockError, TransientCommitError
from storefront.inventory.reservation import reservations_for, reserved_quantities
from storefront.order.order import ContactInfo, PaymentMethod
from storefront.payments.gateway.port import PaymentGateway
from storefront.payments.verification import verify_payment
from storefront.shopper import Shopper

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PlacementFailure:
    code: str
    message: str
    retryable: bool = False
    details: dict = field(default_factory=dict)

    @classmethod
    def from_error(cls, error: CheckoutError) -> "PlacementFailure":
        return cls(code=error.code, message=error.message, retryable=error.retryable, details=dict(error.details))


@dataclass(frozen=True)
class PlacementResult:
    success: bool
    order_number: str | None = None
    order_id: str | None = None
    pricing: PriceBreakdown | None = None
    error: PlacementFailure | None = None


@dataclass(frozen=True)
class PricedCart:
    """A cart priced against live snapshots; ``lines`` are ready to become order lines."""

    lines: list[dict]
    pricing: PriceBreakdown
    snapshots: dict = field(default_factory=dict)
    coupon: CouponVerdict | None = None


def price_cart(cart_lines, coupon_code=None, shipping_zone_id=None, settings: CheckoutSettings | None = None) -> PricedCart:
    """Validate and price a cart without touching any state.

    Shared by order placement and payment intent creation so the amount the
    client is asked to pay is computed exactly as the order total will be.
    """
    settings = settings or get_settings()
    lines = parse_cart_lines(cart_lines, max_quantity=settings.max_line_quantity)
    snapshots = read_product_snapshots(line["product_id"] for line in lines)

    coupon = require_valid_coupon(coupon_code) if coupon_code else None
    terms = load_checkout_terms(shipping_zone_id)

    order_lines = []
    for line in lines:
        snapshot = snapshots[line["product_id"]]
        order_lines.append(
            {
                "product_id": snapshot.id,
                "name": snapshot.name,
                "unit_price_cents": snapshot.unit_price_cents,
                "quantity": line["quantity"],
                "image": snapshot.image,
            }
        )

    pricing = compute_pricing(
        [PricedLine(line["product_id"], line["unit_price_cents"], line["quantity"]) for line in order_lines],
        coupon=coupon,
        zone_charge_cents=terms.zone_charge_cents,
        tax_rate=terms.tax_rate,
        flat_shipping_cents=settings.flat_shipping_cents,
        free_shipping_threshold_cents=settings.free_shipping_threshold_cents,
    )
    return PricedCart(lines=order_lines, pricing=pricing, snapshots=snapshots, coupon=coupon)


def check_stock(lines, snapshots, shopper: Shopper) -> None:
    """Advisory pre-commit stock check for fast feedback.

    Counts the shopper's own reservations as available to them. The binding
    check is repeated inside the commit.
    """
    product_ids = [line["product_id"] for line in lines]
    reserved = reserved_quantities(reservations_for(shopper, product_ids))

    for line in lines:
        snapshot = snapshots[line["product_id"]]
        available = snapshot.available_stock + reserved.get(line["product_id"], 0)
        if line["quantity"] > available:
            raise OutOfStockError(snapshot.id, snapshot.name, line["quantity"], available)


def _payment_method(value) -> PaymentMethod:
    try:
        return PaymentMethod(str(value or "").upper())
    except ValueError:
        raise InvalidCartError("Unsupported payment method", {"payment_method": value}, code="invalid_payment_method")


def _contact(contact) -> ContactInfo:
    try:
        return ContactInfo(**(contact or {}))
    except (ValidationError, TypeError) as exc:
        details = exc.messages if isinstance(exc, ValidationError) else {"contact": [str(exc)]}
        raise InvalidCartError("Invalid contact information", details, code="invalid_contact")


def _commit(command: CommitOrder, retries: int) -> str:
    attempt = 0
    while True:
        attempt += 1
        try:
            return current_domain.process(command, asynchronous=False)
        except (ExpectedVersionError, TransientCommitError) as exc:
            if attempt > retries:
                logger.error("Order commit kept conflicting", order_number=command.order_number, attempts=attempt)
                raise TransientCommitError() from exc
            logger.warning(
                "Order commit conflict, retrying",
                order_number=command.order_number,
                attempt=attempt,
                error=str(exc),
            )


def _place(contact, cart_lines, payment_method, payment_reference, coupon_code, shipping_zone_id, shopper, gateway, settings):
    method = _payment_method(payment_method)
    contact_info = _contact(contact)

    priced = price_cart(cart_lines, coupon_code=coupon_code, shipping_zone_id=shipping_zone_id, settings=settings)
    check_stock(priced.lines, priced.snapshots, shopper)

    paid = False
    reference = None
    if method == PaymentMethod.GATEWAY:
        verified = verify_payment(payment_reference, priced.pricing.total_cents, settings.currency, gateway=gateway)
        paid = True
        reference = verified.reference

    order_number = generate_order_number(
        prefix=settings.order_number_prefix, max_attempts=settings.order_number_attempts
    )

    command = CommitOrder(
        order_number=order_number,
        customer_id=shopper.customer_id,
        session_id=shopper.session_id,
        contact=json.dumps(contact_info.to_dict()),
        lines=json.dumps(priced.lines),
        pricing=json.dumps(priced.pricing.as_dict()),
        currency=settings.currency,
        payment_method=method.value,
        paid=paid,
        payment_reference=reference,
        coupon_id=priced.coupon.coupon_id if priced.coupon else None,
    )
    order_id = _commit(command, settings.commit_retries)
    return PlacementResult(success=True, order_number=order_number, order_id=order_id, pricing=priced.pricing)


def place_order(
    contact,
    cart_lines,
    payment_method,
    payment_reference=None,
    coupon_code=None,
    shipping_zone_id=None,
    shopper: Shopper | None = None,
    gateway: PaymentGateway | None = None,
    settings: CheckoutSettings | None = None,
) -> PlacementResult:
    """Turn a submitted cart into a committed order.

    Args:
        contact: dict with full_name, phone, address and optional email.
        cart_lines: list of ``{"product_id", "quantity"}`` dicts.
        payment_method: ``COD`` or ``GATEWAY``.
        payment_reference: gateway payment reference, required for ``GATEWAY``.
        shopper: identity resolved by the caller; a bare ``Shopper()`` is an
            anonymous guest with no reservations or cart.
    """
    shopper = shopper or Shopper()
    settings = settings or get_settings()
    log = logger.bind(**shopper.as_log_context())
    log.info(
        "Placing order",
        line_count=len(cart_lines or []),
        payment_method=payment_method,
        coupon_code=coupon_code,
    )

    try:
        result = _place(
            contact,
            cart_lines,
            payment_method,
            payment_reference,
            coupon_code,
            shipping_zone_id,
            shopper,
            gateway,
            settings,
        )
    except CheckoutError as exc:
        log.warning("Order placement rejected", code=exc.code, error=exc.message, details=exc.details)
        return PlacementResult(success=False, error=PlacementFailure.from_error(exc))
    except Exception:
        log.exception("Order placement failed unexpectedly")
        raise

    log.info(
        "Order placed",
        order_number=result.order_number,
        order_id=result.order_id,
        total_cents=result.pricing.total_cents,
    )
    return result
