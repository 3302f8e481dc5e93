"""StockReservation aggregate: stock held for a shopper ahead of checkout.

A reservation represents units already subtracted from ``Product.stock``.
Order placement consumes (deletes) it and settles any difference between
the reserved and the purchased quantity; abandoned reservations are
returned to stock by the expiry sweep.
"""

from datetime import UTC, datetime, timedelta

from protean.fields import DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.inventory.events import StockReserved
from storefront.utils.timestamps import as_utc


@storefront.aggregate
class StockReservation:
    customer_id = Identifier()  # Null for guest reservations
    session_id = String(max_length=255)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    created_at = DateTime()
    expires_at = DateTime()

    @classmethod
    def create(cls, shopper, product_id, quantity, ttl_minutes=15):
        now = datetime.now(UTC)
        reservation = cls(
            customer_id=shopper.customer_id,
            session_id=None if shopper.customer_id else shopper.session_id,
            product_id=product_id,
            quantity=quantity,
            created_at=now,
            expires_at=now + timedelta(minutes=ttl_minutes),
        )
        reservation._record_reserved(quantity)
        return reservation

    def extend(self, quantity, ttl_minutes=15):
        """Hold ``quantity`` more units and push the expiry out."""
        self.quantity = self.quantity + quantity
        self.expires_at = datetime.now(UTC) + timedelta(minutes=ttl_minutes)
        self._record_reserved(quantity)

    def hold(self, quantity, ttl_minutes=15):
        """Hold exactly ``quantity`` units from now on and push the expiry out."""
        added = quantity - self.quantity
        self.quantity = quantity
        self.expires_at = datetime.now(UTC) + timedelta(minutes=ttl_minutes)
        if added > 0:
            self._record_reserved(added)

    def is_expired(self, as_of=None):
        as_of = as_of or datetime.now(UTC)
        return self.expires_at is not None and as_utc(self.expires_at) <= as_utc(as_of)

    def _record_reserved(self, quantity):
        self.raise_(
            StockReserved(
                reservation_id=str(self.id),
                product_id=str(self.product_id),
                customer_id=str(self.customer_id) if self.customer_id else None,
                session_id=self.session_id,
                quantity=quantity,
                total_reserved=self.quantity,
                expires_at=self.expires_at,
            )
        )


def reservations_for(shopper, product_ids) -> list[StockReservation]:
    """All reservations the shopper holds on the given products."""
    criteria = shopper.lookup()
    if criteria is None:
        return []

    product_ids = [str(pid) for pid in product_ids]
    if not product_ids:
        return []

    rows = (
        current_domain.repository_for(StockReservation)
        ._dao.query.filter(product_id__in=product_ids, **criteria)
        .all()
        .items
    )
    return [row for row in rows if shopper.owns(row)]


def reserved_quantities(reservations) -> dict[str, int]:
    """Total reserved units per product id; duplicate rows are summed."""
    totals: dict[str, int] = {}
    for reservation in reservations:
        key = str(reservation.product_id)
        totals[key] = totals.get(key, 0) + reservation.quantity
    return totals
