"""Storefront HTTP API package."""

from storefront.api.dev import dev_router
from storefront.api.routes import cart_router, checkout_router, order_router

__all__ = ["cart_router", "checkout_router", "dev_router", "order_router"]
