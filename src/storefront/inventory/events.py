"""Domain events for stock reservations."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="StockReservation")
class StockReserved:
    """Units were provisionally taken out of a product's available stock for a shopper."""

    __version__ = 1

    reservation_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier()
    session_id = String(max_length=255)
    quantity = Integer(required=True)
    total_reserved = Integer(required=True)
    expires_at = DateTime()
