"""Resolve the shopper from request headers.

Authentication happens upstream; by the time a request reaches this service
the gateway has stamped ``X-Customer-Id`` for signed-in customers, and the
client sends a stable ``X-Session-Id`` for guests.
"""

from fastapi import Header

from storefront.shopper import Shopper


def current_shopper(
    x_customer_id: str | None = Header(default=None),
    x_session_id: str | None = Header(default=None),
) -> Shopper:
    return Shopper(customer_id=x_customer_id or None, session_id=x_session_id or None)
