"""Application tests for cart item commands and their stock reservations."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from storefront.cart.cart import ShoppingCart
from storefront.cart.items import AddToCart, RemoveFromCart, UpdateCartItemQuantity
from storefront.catalogue.product import Product
from storefront.inventory.reservation import StockReservation


def _add(product_id, quantity, customer_id="cust-001", session_id=None):
    return current_domain.process(
        AddToCart(customer_id=customer_id, session_id=session_id, product_id=product_id, quantity=quantity),
        asynchronous=False,
    )


def _reservations():
    return current_domain.repository_for(StockReservation)._dao.query.all().items


def _stock(product):
    return current_domain.repository_for(Product).get(product.id).stock


class TestAddToCartCommand:
    def test_add_reserves_stock(self, make_product):
        product = make_product(stock=10)
        _add(str(product.id), 3)

        assert _stock(product) == 7
        reservations = _reservations()
        assert len(reservations) == 1
        assert reservations[0].quantity == 3

    def test_add_persists_cart_line(self, make_product):
        product = make_product()
        cart_id = _add(str(product.id), 2)

        cart = current_domain.repository_for(ShoppingCart).get(cart_id)
        assert cart.items[0].quantity == 2

    def test_adding_again_grows_single_reservation(self, make_product):
        product = make_product(stock=10)
        first = _add(str(product.id), 2)
        second = _add(str(product.id), 1)

        assert first == second
        reservations = _reservations()
        assert len(reservations) == 1
        assert reservations[0].quantity == 3
        assert _stock(product) == 7

    def test_insufficient_stock_rejected(self, make_product):
        product = make_product(stock=2)
        with pytest.raises(ValidationError):
            _add(str(product.id), 3)
        assert _stock(product) == 2
        assert _reservations() == []

    def test_line_cap(self, make_product):
        product = make_product(stock=500)
        _add(str(product.id), 98)
        with pytest.raises(ValidationError):
            _add(str(product.id), 2)

    def test_guest_needs_session(self, make_product):
        product = make_product()
        with pytest.raises(ValidationError):
            _add(str(product.id), 1, customer_id=None, session_id=None)

    def test_guests_get_separate_reservations(self, make_product):
        product = make_product(stock=10)
        _add(str(product.id), 1, customer_id=None, session_id="sess-1")
        _add(str(product.id), 2, customer_id=None, session_id="sess-2")

        by_session = {r.session_id: r.quantity for r in _reservations()}
        assert by_session == {"sess-1": 1, "sess-2": 2}


class TestRemoveFromCartCommand:
    def test_remove_releases_reservation(self, make_product):
        product = make_product(stock=10)
        cart_id = _add(str(product.id), 4)

        current_domain.process(
            RemoveFromCart(customer_id="cust-001", product_id=str(product.id)),
            asynchronous=False,
        )

        assert _stock(product) == 10
        assert _reservations() == []
        assert len(current_domain.repository_for(ShoppingCart).get(cart_id).items) == 0

    def test_remove_without_cart(self, make_product):
        product = make_product()
        with pytest.raises(ValidationError):
            current_domain.process(
                RemoveFromCart(customer_id="cust-404", product_id=str(product.id)),
                asynchronous=False,
            )


def _set_quantity(product_id, quantity, customer_id="cust-001"):
    return current_domain.process(
        UpdateCartItemQuantity(customer_id=customer_id, product_id=product_id, quantity=quantity),
        asynchronous=False,
    )


class TestUpdateCartItemQuantityCommand:
    def test_growing_reserves_the_difference(self, make_product):
        product = make_product(stock=10)
        cart_id = _add(str(product.id), 2)

        _set_quantity(str(product.id), 5)

        assert _stock(product) == 5
        reservations = _reservations()
        assert len(reservations) == 1
        assert reservations[0].quantity == 5
        assert current_domain.repository_for(ShoppingCart).get(cart_id).items[0].quantity == 5

    def test_growing_refreshes_expiry(self, make_product):
        product = make_product(stock=10)
        _add(str(product.id), 2)
        before = _reservations()[0].expires_at

        _set_quantity(str(product.id), 3)

        assert _reservations()[0].expires_at >= before

    def test_shrinking_returns_the_difference(self, make_product):
        product = make_product(stock=10)
        cart_id = _add(str(product.id), 6)

        _set_quantity(str(product.id), 2)

        assert _stock(product) == 8
        assert _reservations()[0].quantity == 2
        assert current_domain.repository_for(ShoppingCart).get(cart_id).items[0].quantity == 2

    def test_zero_removes_line_and_releases_stock(self, make_product):
        product = make_product(stock=10)
        cart_id = _add(str(product.id), 4)

        _set_quantity(str(product.id), 0)

        assert _stock(product) == 10
        assert _reservations() == []
        assert len(current_domain.repository_for(ShoppingCart).get(cart_id).items) == 0

    def test_growing_past_stock_is_rejected(self, make_product):
        product = make_product(stock=3)
        _add(str(product.id), 2)

        with pytest.raises(ValidationError):
            _set_quantity(str(product.id), 5)

        assert _stock(product) == 1
        assert _reservations()[0].quantity == 2

    def test_expired_reservation_is_taken_again(self, make_product):
        product = make_product(stock=10)
        _add(str(product.id), 2)
        # Stock came back when the reservation lapsed
        for reservation in _reservations():
            current_domain.repository_for(StockReservation)._dao.delete(reservation)
        restocked = current_domain.repository_for(Product).get(product.id)
        restocked.adjust_stock(2, reason="reservation_expired")
        current_domain.repository_for(Product).add(restocked)

        _set_quantity(str(product.id), 3)

        assert _stock(product) == 7
        assert _reservations()[0].quantity == 3

    def test_product_not_in_cart(self, make_product):
        in_cart = make_product(stock=10)
        other = make_product(name="Other", stock=10)
        _add(str(in_cart.id), 1)

        with pytest.raises(ValidationError):
            _set_quantity(str(other.id), 2)

        assert _stock(other) == 10

    def test_line_cap(self, make_product):
        product = make_product(stock=500)
        _add(str(product.id), 1)

        with pytest.raises(ValidationError):
            _set_quantity(str(product.id), 100)
