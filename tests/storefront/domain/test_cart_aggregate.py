"""Tests for the ShoppingCart aggregate."""

import pytest
from protean.exceptions import ValidationError
from storefront.cart.cart import ShoppingCart
from storefront.cart.events import CartCleared, CartItemAdded, CartItemQuantityUpdated, CartItemRemoved


def _cart():
    return ShoppingCart.create(customer_id="cust-001")


class TestAddItem:
    def test_adds_new_line(self):
        cart = _cart()
        cart.add_item("prod-001", 2)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2

    def test_same_product_increases_quantity(self):
        cart = _cart()
        cart.add_item("prod-001", 2)
        cart.add_item("prod-001", 3)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5
        event = cart._events[-1]
        assert isinstance(event, CartItemAdded)
        assert event.new_quantity == 5

    def test_rejects_zero_quantity(self):
        with pytest.raises(ValidationError):
            _cart().add_item("prod-001", 0)


class TestUpdateItemQuantity:
    def test_sets_quantity(self):
        cart = _cart()
        cart.add_item("prod-001", 2)
        cart.update_item_quantity("prod-001", 7)
        assert cart.items[0].quantity == 7
        event = cart._events[-1]
        assert isinstance(event, CartItemQuantityUpdated)
        assert event.previous_quantity == 2
        assert event.new_quantity == 7

    def test_missing_item(self):
        with pytest.raises(ValidationError):
            _cart().update_item_quantity("prod-404", 1)

    def test_rejects_zero_quantity(self):
        cart = _cart()
        cart.add_item("prod-001", 2)
        with pytest.raises(ValidationError):
            cart.update_item_quantity("prod-001", 0)


class TestRemoveAndClear:
    def test_remove_item(self):
        cart = _cart()
        cart.add_item("prod-001", 1)
        cart.remove_item("prod-001")
        assert len(cart.items) == 0
        assert isinstance(cart._events[-1], CartItemRemoved)

    def test_remove_missing_item(self):
        with pytest.raises(ValidationError):
            _cart().remove_item("prod-404")

    def test_clear(self):
        cart = _cart()
        cart.add_item("prod-001", 1)
        cart.add_item("prod-002", 1)
        cart.clear()
        assert len(cart.items) == 0
        event = cart._events[-1]
        assert isinstance(event, CartCleared)
        assert event.items_removed == 2

    def test_clear_empty_cart_raises_nothing(self):
        cart = _cart()
        cart.clear()
        assert not cart._events
