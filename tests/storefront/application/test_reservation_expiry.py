"""Application tests for the expired reservation sweep."""

from datetime import UTC, datetime, timedelta

from protean import current_domain
from storefront.cart.items import AddToCart
from storefront.catalogue.product import Product
from storefront.inventory.expiry import release_expired_reservations
from storefront.inventory.reservation import StockReservation


def _add(product, quantity, customer_id):
    current_domain.process(
        AddToCart(customer_id=customer_id, product_id=str(product.id), quantity=quantity),
        asynchronous=False,
    )


class TestReleaseExpiredReservations:
    def test_expired_reservations_return_stock(self, make_product):
        product = make_product(stock=10)
        _add(product, 3, "cust-001")
        _add(product, 2, "cust-002")

        released = release_expired_reservations(as_of=datetime.now(UTC) + timedelta(minutes=16))

        assert released == 2
        assert current_domain.repository_for(Product).get(product.id).stock == 10
        assert current_domain.repository_for(StockReservation)._dao.query.all().items == []

    def test_live_reservations_are_kept(self, make_product):
        product = make_product(stock=10)
        _add(product, 3, "cust-001")

        assert release_expired_reservations() == 0
        assert current_domain.repository_for(Product).get(product.id).stock == 7

    def test_nothing_to_release(self):
        assert release_expired_reservations() == 0
