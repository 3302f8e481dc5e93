"""Application tests for the atomic order commit."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from storefront.cart.cart import ShoppingCart
from storefront.cart.items import AddToCart
from storefront.catalogue.product import Product
from storefront.checkout.commit import CommitOrder
from storefront.coupon.coupon import Coupon
from storefront.errors import CouponError, OutOfStockError
from storefront.inventory.reservation import StockReservation
from storefront.order.order import Order


def _add(product, quantity, customer_id="cust-001"):
    return current_domain.process(
        AddToCart(customer_id=customer_id, product_id=str(product.id), quantity=quantity),
        asynchronous=False,
    )


def _commit(lines, contact, customer_id="cust-001", coupon_id=None, order_number="SF26COMMIT000001"):
    subtotal = sum(product.price_cents * quantity for product, quantity in lines)
    command = CommitOrder(
        order_number=order_number,
        customer_id=customer_id,
        contact=json.dumps(contact),
        lines=json.dumps(
            [
                {
                    "product_id": str(product.id),
                    "name": product.name,
                    "unit_price_cents": product.price_cents,
                    "quantity": quantity,
                    "image": product.image,
                }
                for product, quantity in lines
            ]
        ),
        pricing=json.dumps(
            {
                "subtotal_cents": subtotal,
                "discount_cents": 0,
                "shipping_cents": 6000,
                "tax_cents": 0,
                "total_cents": subtotal + 6000,
            }
        ),
        payment_method="COD",
        coupon_id=coupon_id,
    )
    return current_domain.process(command, asynchronous=False)


def _stock(product):
    return current_domain.repository_for(Product).get(product.id).stock


def _reservations():
    return current_domain.repository_for(StockReservation)._dao.query.all().items


def _orders():
    return current_domain.repository_for(Order)._dao.query.all().items


class TestReservationReconciliation:
    def test_buying_less_than_reserved_returns_surplus(self, make_product, contact):
        product = make_product(stock=10)
        _add(product, 3)
        assert _stock(product) == 7

        _commit([(product, 2)], contact)

        assert _stock(product) == 8
        assert _reservations() == []

    def test_buying_more_than_reserved_takes_difference(self, make_product, contact):
        product = make_product(stock=10)
        _add(product, 3)

        _commit([(product, 5)], contact)

        assert _stock(product) == 5
        assert _reservations() == []

    def test_without_reservation_takes_full_quantity(self, make_product, contact):
        product = make_product(stock=10)

        _commit([(product, 4)], contact, customer_id=None)

        assert _stock(product) == 6

    def test_reserved_units_count_as_available(self, make_product, contact):
        product = make_product(stock=3)
        _add(product, 3)
        assert _stock(product) == 0

        _commit([(product, 3)], contact)

        assert _stock(product) == 0
        assert len(_orders()) == 1

    def test_other_shoppers_reservations_are_untouched(self, make_product, contact):
        product = make_product(stock=10)
        _add(product, 2, customer_id="cust-002")

        _commit([(product, 1)], contact)

        reservations = _reservations()
        assert len(reservations) == 1
        assert str(reservations[0].customer_id) == "cust-002"
        assert _stock(product) == 7

    def test_duplicate_lines_are_merged(self, make_product, contact):
        product = make_product(stock=10)
        _add(product, 2)

        order_id = _commit([(product, 1), (product, 2)], contact)

        order = current_domain.repository_for(Order).get(order_id)
        assert len(order.lines) == 1
        assert order.lines[0].quantity == 3
        assert _stock(product) == 7


class TestCommitWrites:
    def test_order_persisted_with_lines(self, make_product, contact):
        product = make_product(name="Linen Shirt", price_cents=1999, stock=5)

        order_id = _commit([(product, 2)], contact)

        order = current_domain.repository_for(Order).get(order_id)
        assert order.order_number == "SF26COMMIT000001"
        assert order.lines[0].name == "Linen Shirt"
        assert order.lines[0].unit_price_cents == 1999
        assert order.contact.full_name == "Ada Lovelace"

    def test_customer_cart_is_cleared(self, make_product, contact):
        product = make_product()
        cart_id = _add(product, 1)

        _commit([(product, 1)], contact)

        assert len(current_domain.repository_for(ShoppingCart).get(cart_id).items) == 0

    def test_coupon_usage_incremented_once(self, make_product, make_coupon, contact):
        product = make_product()
        coupon = make_coupon()

        _commit([(product, 1)], contact, coupon_id=str(coupon.id))

        assert current_domain.repository_for(Coupon).get(coupon.id).usage_count == 1


class TestCommitRejections:
    def test_out_of_stock(self, make_product, contact):
        product = make_product(name="Wool Scarf", stock=1)

        with pytest.raises(OutOfStockError) as exc:
            _commit([(product, 2)], contact)

        assert exc.value.product_name == "Wool Scarf"
        assert exc.value.requested == 2
        assert exc.value.available == 1
        assert _orders() == []

    def test_coupon_limit_is_enforced_inside_commit(self, make_product, make_coupon, contact):
        product = make_product(stock=10)
        coupon = make_coupon(usage_limit=1)

        _commit([(product, 1)], contact, coupon_id=str(coupon.id))
        with pytest.raises(CouponError) as exc:
            _commit([(product, 1)], contact, coupon_id=str(coupon.id), order_number="SF26COMMIT000002")

        assert exc.value.reason == "LimitReached"
        assert current_domain.repository_for(Coupon).get(coupon.id).usage_count == 1
        assert len(_orders()) == 1
        assert _stock(product) == 9


class TestAtomicity:
    def test_failed_stock_decrement_leaves_no_trace(self, make_product, make_coupon, contact, monkeypatch):
        first = make_product(name="First", stock=10)
        second = make_product(name="Second", stock=10)
        coupon = make_coupon()
        cart_id = _add(first, 2)

        original = Product.adjust_stock

        def failing_adjust(self, delta, reason="adjustment"):
            if self.name == "Second" and reason == "order_placed":
                raise ValidationError({"stock": ["Concurrent update"]})
            return original(self, delta, reason=reason)

        monkeypatch.setattr(Product, "adjust_stock", failing_adjust)

        with pytest.raises(OutOfStockError):
            _commit([(first, 2), (second, 1)], contact, coupon_id=str(coupon.id))

        assert _orders() == []
        assert _stock(first) == 8
        assert _stock(second) == 10
        assert len(_reservations()) == 1
        assert current_domain.repository_for(Coupon).get(coupon.id).usage_count == 0
        assert len(current_domain.repository_for(ShoppingCart).get(cart_id).items) == 1
