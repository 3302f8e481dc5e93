"""Checkout policy settings.

Values are read once from ``STOREFRONT_*`` environment variables. Amounts
are integer cents.
"""

import os
from dataclasses import dataclass
from functools import lru_cache


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return int(raw)


@dataclass(frozen=True)
class CheckoutSettings:
    currency: str = "usd"
    flat_shipping_cents: int = 6000
    free_shipping_threshold_cents: int = 100000
    max_line_quantity: int = 99
    order_number_prefix: str = "SF"
    order_number_attempts: int = 10
    commit_retries: int = 3
    reservation_ttl_minutes: int = 15

    @classmethod
    def from_env(cls) -> "CheckoutSettings":
        return cls(
            currency=os.getenv("STOREFRONT_CURRENCY", cls.currency).lower(),
            flat_shipping_cents=_int_env("STOREFRONT_FLAT_SHIPPING_CENTS", cls.flat_shipping_cents),
            free_shipping_threshold_cents=_int_env(
                "STOREFRONT_FREE_SHIPPING_THRESHOLD_CENTS", cls.free_shipping_threshold_cents
            ),
            max_line_quantity=_int_env("STOREFRONT_MAX_LINE_QUANTITY", cls.max_line_quantity),
            order_number_prefix=os.getenv("STOREFRONT_ORDER_NUMBER_PREFIX", cls.order_number_prefix),
            order_number_attempts=_int_env("STOREFRONT_ORDER_NUMBER_ATTEMPTS", cls.order_number_attempts),
            commit_retries=_int_env("STOREFRONT_COMMIT_RETRIES", cls.commit_retries),
            reservation_ttl_minutes=_int_env("STOREFRONT_RESERVATION_TTL_MINUTES", cls.reservation_ttl_minutes),
        )


@lru_cache(maxsize=1)
def get_settings() -> CheckoutSettings:
    """Return the process-wide settings, read from the environment on first use."""
    return CheckoutSettings.from_env()
