"""Configurable fake payment gateway for development and testing.

This adapter simulates a real payment gateway without any external calls.
Intents are kept in memory; tests can confirm or fail them, or seed
arbitrary payment records to exercise the verification rules.
"""

from uuid import uuid4

from storefront.payments.gateway.port import GatewayError, PaymentGateway, PaymentRecord


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.available: bool = True
        self.auto_confirm: bool = True
        self.payments: dict[str, PaymentRecord] = {}
        self.calls: list[dict] = []

    def configure(self, available: bool = True, auto_confirm: bool = True) -> None:
        """Configure gateway behavior at runtime."""
        self.available = available
        self.auto_confirm = auto_confirm

    def record_payment(self, reference: str, status: str, amount_cents: int, currency: str = "usd") -> PaymentRecord:
        """Seed a payment record as if the client-side flow had produced it."""
        record = PaymentRecord(reference=reference, status=status, amount_cents=amount_cents, currency=currency)
        self.payments[reference] = record
        return record

    def create_payment_intent(
        self,
        amount_cents: int,
        currency: str,
        idempotency_key: str | None = None,
    ) -> PaymentRecord:
        self.calls.append(
            {
                "method": "create_payment_intent",
                "amount_cents": amount_cents,
                "currency": currency,
                "idempotency_key": idempotency_key,
            }
        )
        if not self.available:
            raise GatewayError("Gateway unavailable")

        reference = f"fake_pi_{uuid4().hex[:16]}"
        record = PaymentRecord(
            reference=reference,
            status="succeeded" if self.auto_confirm else "requires_payment_method",
            amount_cents=amount_cents,
            currency=currency,
            client_secret=f"{reference}_secret_{uuid4().hex[:8]}",
        )
        self.payments[reference] = record
        return record

    def retrieve_payment(self, reference: str) -> PaymentRecord:
        self.calls.append({"method": "retrieve_payment", "reference": reference})
        if not self.available:
            raise GatewayError("Gateway unavailable")

        record = self.payments.get(reference)
        if record is None:
            raise GatewayError(f"No such payment: {reference}")
        return record
