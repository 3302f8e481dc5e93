"""Product aggregate: the sellable unit and its available stock count.

Catalogue editing lives elsewhere; this context only needs the attributes
copied into order lines (name, price, image) and the ``stock`` counter that
cart reservations and order placement adjust.
"""

from protean.exceptions import ValidationError
from protean.fields import Integer, String

from storefront.catalogue.events import StockAdjusted
from storefront.domain import storefront


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    price_cents = Integer(required=True, min_value=0)
    image = String(max_length=500)
    stock = Integer(default=0, min_value=0)

    @classmethod
    def create(cls, name, price_cents, stock=0, image=None):
        return cls(name=name, price_cents=price_cents, stock=stock, image=image)

    def adjust_stock(self, delta, reason="adjustment"):
        """Add ``delta`` units to stock (negative to remove).

        A removal is only applied when enough stock remains; stock never
        goes below zero.
        """
        if delta == 0:
            return
        if delta < 0 and self.stock < -delta:
            raise ValidationError(
                {"stock": [f"Insufficient stock for {self.name}: have {self.stock}, need {-delta}"]}
            )

        self.stock = self.stock + delta
        self.raise_(
            StockAdjusted(
                product_id=str(self.id),
                delta=delta,
                new_stock=self.stock,
                reason=reason,
            )
        )
