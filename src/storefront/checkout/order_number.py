"""Order number generator.

Numbers look like ``SF26A1B2C3D4E5F6``: a short prefix, the two-digit year
and 12 random hex characters. Candidates are checked against existing
orders and regenerated on collision, up to a fixed number of attempts.
"""

import secrets
from datetime import UTC, datetime

import structlog
from protean.utils.globals import current_domain

from storefront.errors import OrderNumberCollisionExhausted
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


def order_number_taken(candidate: str) -> bool:
    return bool(current_domain.repository_for(Order)._dao.query.filter(order_number=candidate).all().items)


def make_candidate(prefix: str, now=None) -> str:
    year = (now or datetime.now(UTC)).strftime("%y")
    return f"{prefix}{year}{secrets.token_hex(6).upper()}"


def generate_order_number(prefix="SF", max_attempts=10, is_taken=order_number_taken, candidate_factory=None) -> str:
    """Return an order number not used by any existing order.

    Raises ``OrderNumberCollisionExhausted`` when every attempt collided.
    """
    candidate_factory = candidate_factory or (lambda: make_candidate(prefix))
    for attempt in range(1, max_attempts + 1):
        candidate = candidate_factory()
        if not is_taken(candidate):
            return candidate
        logger.warning("Order number collision", candidate=candidate, attempt=attempt)

    logger.error("Order number generation exhausted", attempts=max_attempts)
    raise OrderNumberCollisionExhausted(max_attempts)
