"""Order aggregate (CQRS): an immutable record of what was bought, for how much.

Orders are written exactly once, together with their lines, by the order
placement commit. Lines copy the product name, unit price and image at
checkout time so later catalogue edits never rewrite order history.

All amounts are integer cents.
"""

import json
import re
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, ValueObject

from storefront.domain import storefront
from storefront.order.events import OrderPlaced


class OrderStatus(Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentStatus(Enum):
    PENDING = "PENDING"
    PAID = "PAID"


class PaymentMethod(Enum):
    COD = "COD"
    GATEWAY = "GATEWAY"


_EMAIL_PATTERN = re.compile(r"^[^@\s;,()<>\[\]\\\"]+@[^@\s;,()<>\[\]\\\"]+\.[^@\s;,()<>\[\]\\\".]+$")


@storefront.value_object(part_of="Order")
class ContactInfo:
    """Who to deliver to and how to reach them, as entered at checkout."""

    full_name = String(required=True, max_length=255)
    phone = String(required=True, max_length=30)
    address = String(required=True, max_length=500)
    email = String(max_length=254)

    @invariant.post
    def contact_details_are_usable(self):
        errors = {}
        if len((self.full_name or "").strip()) < 2:
            errors["full_name"] = ["Full name must be at least 2 characters"]
        if len((self.phone or "").strip()) < 11:
            errors["phone"] = ["Phone number must be at least 11 characters"]
        if len((self.address or "").strip()) < 10:
            errors["address"] = ["Address must be at least 10 characters"]
        if self.email and not _EMAIL_PATTERN.match(self.email):
            errors["email"] = ["Valid email is required"]
        if errors:
            raise ValidationError(errors)


@storefront.entity(part_of="Order")
class OrderLine:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price_cents = Integer(required=True, min_value=0)
    quantity = Integer(required=True, min_value=1)
    image = String(max_length=500)

    @property
    def line_total_cents(self):
        return self.unit_price_cents * self.quantity


@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=32, unique=True)
    customer_id = Identifier()  # Null for guest checkout
    contact = ValueObject(ContactInfo)
    lines = HasMany(OrderLine)
    subtotal_cents = Integer(required=True, min_value=0)
    discount_cents = Integer(default=0, min_value=0)
    shipping_cents = Integer(default=0, min_value=0)
    tax_cents = Integer(default=0, min_value=0)
    total_cents = Integer(required=True, min_value=0)
    currency = String(max_length=3, default="usd")
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_method = String(choices=PaymentMethod, required=True)
    payment_reference = String(max_length=255)
    coupon_id = Identifier()
    placed_at = DateTime()

    @classmethod
    def place(
        cls,
        order_number,
        customer_id,
        contact,
        lines,
        pricing,
        payment_method,
        paid=False,
        payment_reference=None,
        coupon_id=None,
        currency="usd",
    ):
        """Build a new order with its lines.

        Args:
            lines: iterable of dicts with product_id, name, unit_price_cents,
                quantity and image.
            pricing: a PriceBreakdown (subtotal/discount/shipping/tax/total cents).
            paid: True once an online payment was verified for the total.
        """
        lines = list(lines)
        if not lines:
            raise ValidationError({"lines": ["An order needs at least one line"]})

        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            contact=contact,
            lines=[OrderLine(**line) for line in lines],
            subtotal_cents=pricing.subtotal_cents,
            discount_cents=pricing.discount_cents,
            shipping_cents=pricing.shipping_cents,
            tax_cents=pricing.tax_cents,
            total_cents=pricing.total_cents,
            currency=currency,
            status=(OrderStatus.PROCESSING if paid else OrderStatus.PENDING).value,
            payment_status=(PaymentStatus.PAID if paid else PaymentStatus.PENDING).value,
            payment_method=PaymentMethod(payment_method).value,
            payment_reference=payment_reference,
            coupon_id=coupon_id,
            placed_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id) if customer_id else None,
                lines=json.dumps(lines),
                total_cents=order.total_cents,
                currency=currency,
                status=order.status,
                payment_status=order.payment_status,
                payment_method=order.payment_method,
                coupon_id=str(coupon_id) if coupon_id else None,
                placed_at=now,
            )
        )
        return order

    @property
    def is_paid(self):
        return self.payment_status == PaymentStatus.PAID.value
