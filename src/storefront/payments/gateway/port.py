"""Payment gateway port (abstract interface).

Defines the contract that gateway adapters implement. Checkout only needs
two operations: create a payment intent for an exact amount, and retrieve
the recorded state of a payment by its reference.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


class GatewayError(Exception):
    """The gateway could not be reached or refused the request."""


@dataclass(frozen=True)
class PaymentRecord:
    """What the gateway knows about one payment."""

    reference: str
    status: str
    amount_cents: int
    currency: str
    client_secret: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_payment_intent(
        self,
        amount_cents: int,
        currency: str,
        idempotency_key: str | None = None,
    ) -> PaymentRecord:
        """Open a payment for ``amount_cents`` the client will confirm."""
        ...

    @abstractmethod
    def retrieve_payment(self, reference: str) -> PaymentRecord:
        """Fetch the payment recorded under ``reference``.

        Raises GatewayError if it cannot be retrieved.
        """
        ...
