"""Storefront bounded context: catalogue stock, carts, coupons and order placement.

Every aggregate touched by order placement (Product, StockReservation,
Coupon, Order, ShoppingCart) is registered here so that a single
UnitOfWork spans all of them.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
