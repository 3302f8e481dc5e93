"""Reservation expiry sweep.

Meant to be triggered periodically by an external scheduler (cron, K8s
CronJob) through ``manage.py release-reservations``. Each expired
reservation is released in its own unit of work so a failure on one does
not hold back the rest.
"""

from datetime import UTC, datetime

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.inventory.release import ReleaseReservation
from storefront.inventory.reservation import StockReservation

logger = structlog.get_logger(__name__)


def release_expired_reservations(as_of=None) -> int:
    """Return stock for every reservation whose expiry is at or before ``as_of``."""
    as_of = as_of or datetime.now(UTC)
    repo = current_domain.repository_for(StockReservation)

    logger.info("Checking for expired reservations", as_of=as_of.isoformat())

    released = 0
    failed: set[str] = set()
    while True:
        batch = [r for r in repo._dao.query.filter(expires_at__lte=as_of).all().items if str(r.id) not in failed]
        if not batch:
            break

        for reservation in batch:
            try:
                current_domain.process(
                    ReleaseReservation(reservation_id=str(reservation.id), reason="expired"),
                    asynchronous=False,
                )
                released += 1
            except (ValidationError, ObjectNotFoundError) as exc:
                failed.add(str(reservation.id))
                logger.warning(
                    "Failed to release expired reservation",
                    reservation_id=str(reservation.id),
                    error=str(exc),
                )

    logger.info("Expired reservation sweep complete", released=released, failed=len(failed))
    return released
