"""Reservation release: command and handler returning held stock to a product."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.inventory.reservation import StockReservation

logger = structlog.get_logger(__name__)


@storefront.command(part_of="StockReservation")
class ReleaseReservation:
    reservation_id = Identifier(required=True)
    reason = String(max_length=50, default="released")


def release_reservation(reservation, reason="released"):
    """Give the reserved units back to the product and drop the reservation.

    Must run inside the caller's unit of work.
    """
    product_repo = current_domain.repository_for(Product)
    product = product_repo.get(reservation.product_id)
    product.adjust_stock(reservation.quantity, reason=f"reservation_{reason}")
    product_repo.add(product)

    # No repository-level delete; the DAO delete is part of the same UnitOfWork
    current_domain.repository_for(StockReservation)._dao.delete(reservation)
    logger.info(
        "Reservation released",
        reservation_id=str(reservation.id),
        product_id=str(reservation.product_id),
        quantity=reservation.quantity,
        reason=reason,
    )


@storefront.command_handler(part_of=StockReservation)
class ReleaseReservationHandler:
    @handle(ReleaseReservation)
    def release(self, command):
        reservation = current_domain.repository_for(StockReservation).get(command.reservation_id)
        release_reservation(reservation, reason=command.reason or "released")
