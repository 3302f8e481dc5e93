"""Cart item management: commands and handler.

Adding a product to the cart reserves stock for the shopper right away:
the units leave ``Product.stock`` and are tracked by a single
StockReservation per shopper/product. Changing the quantity moves only
the difference and refreshes the reservation's expiry. Removing the
product releases it.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart, carts_for
from storefront.catalogue.product import Product
from storefront.config import get_settings
from storefront.domain import storefront
from storefront.inventory.release import release_reservation
from storefront.inventory.reservation import StockReservation, reservations_for
from storefront.shopper import Shopper

logger = structlog.get_logger(__name__)


@storefront.command(part_of="ShoppingCart")
class AddToCart:
    customer_id = Identifier()
    session_id = String(max_length=255)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="ShoppingCart")
class UpdateCartItemQuantity:
    customer_id = Identifier()
    session_id = String(max_length=255)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)  # Below 1 removes the line


@storefront.command(part_of="ShoppingCart")
class RemoveFromCart:
    customer_id = Identifier()
    session_id = String(max_length=255)
    product_id = Identifier(required=True)


def _shopper(command) -> Shopper:
    shopper = Shopper(customer_id=command.customer_id, session_id=command.session_id)
    if shopper.lookup() is None:
        raise ValidationError({"shopper": ["A customer id or a session id is required"]})
    return shopper


@storefront.command_handler(part_of=ShoppingCart)
class CartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        shopper = _shopper(command)
        settings = get_settings()
        cart_repo = current_domain.repository_for(ShoppingCart)

        existing = carts_for(shopper)
        cart = (
            cart_repo.get(existing[0].id)
            if existing
            else ShoppingCart.create(customer_id=shopper.customer_id, session_id=shopper.session_id)
        )

        line = cart.item_for(command.product_id)
        in_cart = line.quantity if line is not None else 0
        if in_cart + command.quantity > settings.max_line_quantity:
            raise ValidationError({"quantity": [f"At most {settings.max_line_quantity} units per product"]})

        product_repo = current_domain.repository_for(Product)
        product = product_repo.get(command.product_id)
        product.adjust_stock(-command.quantity, reason="reserved")
        product_repo.add(product)

        reservation_repo = current_domain.repository_for(StockReservation)
        held = reservations_for(shopper, [command.product_id])
        if held:
            reservation = reservation_repo.get(held[0].id)
            reservation.extend(command.quantity, ttl_minutes=settings.reservation_ttl_minutes)
        else:
            reservation = StockReservation.create(
                shopper,
                product_id=command.product_id,
                quantity=command.quantity,
                ttl_minutes=settings.reservation_ttl_minutes,
            )
        reservation_repo.add(reservation)

        cart.add_item(command.product_id, command.quantity)
        cart_repo.add(cart)

        logger.info(
            "Added to cart",
            cart_id=str(cart.id),
            product_id=str(command.product_id),
            quantity=command.quantity,
            reserved=reservation.quantity,
        )
        return str(cart.id)

    @handle(UpdateCartItemQuantity)
    def update_quantity(self, command):
        shopper = _shopper(command)
        cart = self._existing_cart(shopper)
        if command.quantity < 1:
            self._remove_line(shopper, cart, command.product_id)
            return str(cart.id)

        settings = get_settings()
        if command.quantity > settings.max_line_quantity:
            raise ValidationError({"quantity": [f"At most {settings.max_line_quantity} units per product"]})

        line = cart.item_for(command.product_id)
        if line is None:
            raise ValidationError({"product_id": ["Item not in cart"]})
        previous = line.quantity

        # Units still held leave stock untouched; only the rest moves
        held = reservations_for(shopper, [command.product_id])
        reserved = sum(r.quantity for r in held)
        product_repo = current_domain.repository_for(Product)
        product = product_repo.get(command.product_id)
        delta = reserved - command.quantity
        product.adjust_stock(delta, reason="reserved" if delta < 0 else "reservation_released")
        product_repo.add(product)

        reservation_repo = current_domain.repository_for(StockReservation)
        if held:
            reservation = reservation_repo.get(held[0].id)
            reservation.hold(command.quantity, ttl_minutes=settings.reservation_ttl_minutes)
            for duplicate in held[1:]:
                reservation_repo._dao.delete(duplicate)
        else:
            reservation = StockReservation.create(
                shopper,
                product_id=command.product_id,
                quantity=command.quantity,
                ttl_minutes=settings.reservation_ttl_minutes,
            )
        reservation_repo.add(reservation)

        cart.update_item_quantity(command.product_id, command.quantity)
        current_domain.repository_for(ShoppingCart).add(cart)

        logger.info(
            "Cart quantity updated",
            cart_id=str(cart.id),
            product_id=str(command.product_id),
            previous_quantity=previous,
            quantity=command.quantity,
        )
        return str(cart.id)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        shopper = _shopper(command)
        self._remove_line(shopper, self._existing_cart(shopper), command.product_id)

    def _existing_cart(self, shopper):
        existing = carts_for(shopper)
        if not existing:
            raise ValidationError({"cart": ["No cart found"]})
        return current_domain.repository_for(ShoppingCart).get(existing[0].id)

    def _remove_line(self, shopper, cart, product_id):
        cart.remove_item(product_id)
        current_domain.repository_for(ShoppingCart).add(cart)

        for reservation in reservations_for(shopper, [product_id]):
            release_reservation(reservation, reason="removed")
