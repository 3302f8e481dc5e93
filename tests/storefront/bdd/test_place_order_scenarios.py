"""BDD tests for order placement."""

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when
from storefront.cart.items import AddToCart
from storefront.catalogue.product import Product
from storefront.checkout.placement import place_order
from storefront.coupon.coupon import CouponType
from storefront.coupon.validation import find_coupon
from storefront.inventory.reservation import StockReservation
from storefront.order.order import Order
from storefront.shopper import Shopper

scenarios("features/place_order.feature")

CUSTOMER = Shopper(customer_id="cust-bdd-001")


@pytest.fixture()
def products():
    return {}


@pytest.fixture()
def results():
    return []


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced at {price:d} cents with {stock:d} in stock'))
def product_in_stock(make_product, products, name, price, stock):
    products[name] = make_product(name=name, price_cents=price, stock=stock)


@given(parsers.cfparse('the customer has reserved {quantity:d} of "{name}"'))
def customer_reserved(products, quantity, name):
    current_domain.process(
        AddToCart(customer_id=CUSTOMER.customer_id, product_id=str(products[name].id), quantity=quantity),
        asynchronous=False,
    )


@given(parsers.cfparse('the gateway recorded a succeeded payment "{reference}" of {amount:d} cents'))
def gateway_payment(gateway, reference, amount):
    gateway.record_payment(reference, "succeeded", amount, "usd")


@given(parsers.cfparse('a {percent:d} percent coupon "{code}"'))
def percent_coupon(make_coupon, percent, code):
    make_coupon(code=code, coupon_type=CouponType.PERCENTAGE, value=percent)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the customer redeems coupon "{code}" on an order for {quantity:d} of "{name}"'))
def place_cod_order_with_coupon(products, results, contact, quantity, name, code):
    lines = [{"product_id": str(products[name].id), "quantity": quantity}]
    results.append(place_order(contact, lines, "COD", coupon_code=code, shopper=CUSTOMER))


@when(parsers.cfparse('the customer places a cash on delivery order for {quantity:d} of "{name}"'))
def place_cod_order(products, results, contact, quantity, name):
    lines = [{"product_id": str(products[name].id), "quantity": quantity}]
    results.append(place_order(contact, lines, "COD", shopper=CUSTOMER))


@when(parsers.cfparse('the customer pays online with "{reference}" for {quantity:d} of "{name}"'))
def place_gateway_order(products, results, contact, gateway, reference, quantity, name):
    lines = [{"product_id": str(products[name].id), "quantity": quantity}]
    results.append(place_order(contact, lines, "GATEWAY", payment_reference=reference, shopper=CUSTOMER))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the order is placed")
def order_placed(results):
    assert results[-1].success, results[-1].error


@then(parsers.cfparse('the order is rejected with "{code}"'))
def order_rejected(results, code):
    assert not results[-1].success
    assert results[-1].error.code == code


@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def product_stock(products, name, stock):
    assert current_domain.repository_for(Product).get(products[name].id).stock == stock


@then("the customer holds no reservations")
def no_reservations():
    rows = current_domain.repository_for(StockReservation)._dao.query.filter(customer_id=CUSTOMER.customer_id).all()
    assert rows.items == []


@then("no order exists")
def no_order():
    assert current_domain.repository_for(Order)._dao.query.all().items == []


@then(parsers.cfparse('coupon "{code}" has been used {count:d} times'))
def coupon_usage(code, count):
    assert find_coupon(code).usage_count == count
