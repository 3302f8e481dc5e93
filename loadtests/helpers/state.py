"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; no cross-user sharing.
"""

from dataclasses import dataclass, field


@dataclass
class CheckoutState:
    """Tracks state for a single simulated shopper's checkout journey."""

    session_id: str | None = None
    customer_id: str | None = None
    product_ids: list[str] = field(default_factory=list)
    lines: list[dict] = field(default_factory=list)
    payment_reference: str | None = None
    expected_total_cents: int | None = None
    order_number: str | None = None

    @property
    def headers(self) -> dict:
        if self.customer_id:
            return {"X-Customer-Id": self.customer_id}
        return {"X-Session-Id": self.session_id} if self.session_id else {}
