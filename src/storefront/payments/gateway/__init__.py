"""Payment gateway selection for checkout.

``STOREFRONT_PAYMENT_GATEWAY`` names the adapter built on first use; only
``fake`` ships with the storefront. Tests and the dev API install their own
instance with ``set_gateway``.
"""

import os

from storefront.payments.gateway.fake_adapter import FakeGateway
from storefront.payments.gateway.port import GatewayError, PaymentGateway, PaymentRecord

__all__ = ["FakeGateway", "GatewayError", "PaymentGateway", "PaymentRecord", "get_gateway", "reset_gateway", "set_gateway"]

ADAPTERS = {"fake": FakeGateway}

_current_gateway: PaymentGateway | None = None


def _build_configured() -> PaymentGateway:
    name = os.getenv("STOREFRONT_PAYMENT_GATEWAY", "fake").lower()
    try:
        return ADAPTERS[name]()
    except KeyError:
        raise GatewayError(f"Unknown payment gateway {name!r}") from None


def get_gateway() -> PaymentGateway:
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _build_configured()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    global _current_gateway
    _current_gateway = None
