"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """An order and its lines were committed."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier()
    lines = Text(required=True)  # JSON: list of line dicts
    total_cents = Integer(required=True)
    currency = String(max_length=3, required=True)
    status = String(required=True)
    payment_status = String(required=True)
    payment_method = String(required=True)
    coupon_id = Identifier()
    placed_at = DateTime(required=True)
