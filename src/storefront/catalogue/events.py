"""Domain events for the Product aggregate."""

from protean.fields import Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class StockAdjusted:
    """Available stock of a product changed by ``delta`` units."""

    __version__ = 1

    product_id = Identifier(required=True)
    delta = Integer(required=True)
    new_stock = Integer(required=True)
    reason = String(max_length=50)
