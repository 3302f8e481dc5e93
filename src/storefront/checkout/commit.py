"""Order commit: the atomic step of order placement.

Runs as a command handler, so Protean wraps it in a single UnitOfWork:
stock re-verification, the order and its lines, stock and reservation
reconciliation, coupon redemption and clearing the cart either all persist
or none do.

All aggregate mutations are made in memory first and only handed to the
repositories once every check has passed.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart, carts_for
from storefront.catalogue.product import Product
from storefront.checkout.cart_lines import merge_lines
from storefront.checkout.pricing import PriceBreakdown
from storefront.coupon.coupon import Coupon, CouponStatus
from storefront.coupon.validation import MESSAGES
from storefront.domain import storefront
from storefront.errors import CouponError, InvalidCartError, OutOfStockError
from storefront.inventory.reservation import StockReservation, reservations_for, reserved_quantities
from storefront.order.order import ContactInfo, Order
from storefront.shopper import Shopper

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class CommitOrder:
    order_number = String(required=True, max_length=32)
    customer_id = Identifier()
    session_id = String(max_length=255)
    contact = Text(required=True)  # JSON: contact dict
    lines = Text(required=True)  # JSON: list of snapshot line dicts
    pricing = Text(required=True)  # JSON: price breakdown dict
    currency = String(max_length=3, default="usd")
    payment_method = String(required=True)
    paid = Boolean(default=False)
    payment_reference = String(max_length=255)
    coupon_id = Identifier()


def _loads(value):
    return json.loads(value) if isinstance(value, str) else value


@storefront.command_handler(part_of=Order)
class CommitOrderHandler:
    @handle(CommitOrder)
    def commit(self, command):
        shopper = Shopper(customer_id=command.customer_id, session_id=command.session_id)
        lines = merge_lines(_loads(command.lines))
        product_ids = [line["product_id"] for line in lines]

        reservations = reservations_for(shopper, product_ids)
        reserved = reserved_quantities(reservations)

        product_repo = current_domain.repository_for(Product)
        products = {}
        missing = []
        for line in lines:
            try:
                product = product_repo.get(line["product_id"])
            except ObjectNotFoundError:
                missing.append(line["product_id"])
                continue
            held = reserved.get(line["product_id"], 0)
            if line["quantity"] > product.stock + held:
                raise OutOfStockError(str(product.id), product.name, line["quantity"], product.stock + held)
            products[line["product_id"]] = product
        if missing:
            # Removed from the catalogue after the snapshot read
            logger.warning("Cart references unknown products", missing=missing)
            raise InvalidCartError(details={"unknown_product_ids": sorted(missing)})

        order = Order.place(
            order_number=command.order_number,
            customer_id=command.customer_id,
            contact=ContactInfo(**_loads(command.contact)),
            lines=lines,
            pricing=PriceBreakdown(**_loads(command.pricing)),
            payment_method=command.payment_method,
            paid=bool(command.paid),
            payment_reference=command.payment_reference,
            coupon_id=command.coupon_id,
            currency=command.currency or "usd",
        )

        for line in lines:
            product = products[line["product_id"]]
            # Reserved units already left stock; only the difference moves now
            delta = line["quantity"] - reserved.get(line["product_id"], 0)
            try:
                product.adjust_stock(-delta, reason="order_placed")
            except ValidationError:
                raise OutOfStockError(str(product.id), product.name, line["quantity"], product.stock)

        coupon = self._redeem_coupon(command.coupon_id, command.order_number)
        carts = self._cleared_carts(shopper)

        current_domain.repository_for(Order).add(order)
        for product in products.values():
            product_repo.add(product)
        # Repositories expose no delete; the DAO call still joins the active UnitOfWork
        reservation_dao = current_domain.repository_for(StockReservation)._dao
        for reservation in reservations:
            reservation_dao.delete(reservation)
        if coupon is not None:
            current_domain.repository_for(Coupon).add(coupon)
        cart_repo = current_domain.repository_for(ShoppingCart)
        for cart in carts:
            cart_repo.add(cart)

        logger.info(
            "Order committed",
            order_id=str(order.id),
            order_number=order.order_number,
            reservations_consumed=len(reservations),
            coupon_id=command.coupon_id,
        )
        return str(order.id)

    def _redeem_coupon(self, coupon_id, order_number):
        if not coupon_id:
            return None

        coupon = current_domain.repository_for(Coupon).get(coupon_id)
        if not coupon.has_headroom():
            status = CouponStatus.LIMIT_REACHED
            raise CouponError(status.value, MESSAGES[status], coupon_code=coupon.code)
        coupon.redeem(order_number)
        return coupon

    def _cleared_carts(self, shopper):
        cart_repo = current_domain.repository_for(ShoppingCart)
        carts = [cart_repo.get(cart.id) for cart in carts_for(shopper)]
        for cart in carts:
            cart.clear()
        return carts
