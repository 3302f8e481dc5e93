"""Payment verifier.

For online payments, the order may only be marked paid once the gateway's
own record proves a successful charge of exactly the computed total, in the
expected currency. Runs before the commit unit of work opens; the commit
only ever sees the verified result.
"""

from dataclasses import dataclass

import structlog

from storefront.errors import PaymentVerificationError
from storefront.payments.gateway import get_gateway
from storefront.payments.gateway.port import GatewayError, PaymentGateway

logger = structlog.get_logger(__name__)

SUCCEEDED = "succeeded"


@dataclass(frozen=True)
class VerifiedPayment:
    reference: str
    amount_cents: int
    currency: str


def verify_payment(
    reference: str | None,
    expected_total_cents: int,
    currency: str,
    gateway: PaymentGateway | None = None,
) -> VerifiedPayment:
    if not reference:
        raise PaymentVerificationError("missing_reference")

    try:
        record = (gateway or get_gateway()).retrieve_payment(reference)
    except GatewayError as exc:
        logger.warning("Payment lookup failed", reference=reference, error=str(exc))
        raise PaymentVerificationError("gateway_unavailable", {"reference": reference}) from exc

    if record.status != SUCCEEDED:
        reason = "not_succeeded"
    elif record.amount_cents != expected_total_cents:
        reason = "amount_mismatch"
    elif (record.currency or "").lower() != currency.lower():
        reason = "currency_mismatch"
    else:
        return VerifiedPayment(reference=reference, amount_cents=record.amount_cents, currency=record.currency)

    logger.warning(
        "Payment verification failed",
        reference=reference,
        reason=reason,
        status=record.status,
        charged_cents=record.amount_cents,
        expected_cents=expected_total_cents,
        charged_currency=record.currency,
        expected_currency=currency,
    )
    raise PaymentVerificationError(
        reason,
        {
            "reference": reference,
            "charged_cents": record.amount_cents,
            "expected_cents": expected_total_cents,
        },
    )
