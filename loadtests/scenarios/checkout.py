"""Checkout load test scenarios.

CheckoutJourney walks the full reservation → payment → order path a real
shopper takes. CashOnDeliveryUser fires one-shot COD orders without any
prior reservation, exercising the commit's direct stock decrement.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import cart_line, contact_info, customer_id, product_data, session_id
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import CheckoutState


class CheckoutJourney(SequentialTaskSet):
    """Seed Products -> Add To Cart -> View Cart -> Payment Intent -> Place Order -> View Order.

    Half of the journeys run as signed-in customers, half as guests.
    Generates events: StockReserved, CartItemAdded, OrderPlaced, StockAdjusted,
    CartCleared.
    """

    def on_start(self):
        self.state = CheckoutState()
        if random.random() < 0.5:
            self.state.customer_id = customer_id()
        else:
            self.state.session_id = session_id()

    @task
    def seed_products(self):
        for _ in range(2):
            with self.client.post(
                "/dev/products",
                json=product_data(),
                catch_response=True,
                name="POST /dev/products",
            ) as resp:
                if resp.status_code == 201:
                    self.state.product_ids.append(resp.json()["product_id"])
                else:
                    resp.failure(f"Seed product failed: {resp.status_code}: {extract_error_detail(resp)}")
                    self.interrupt()

    @task
    def add_to_cart(self):
        for product_id in self.state.product_ids:
            line = cart_line(product_id)
            with self.client.post(
                "/carts/items",
                json=line,
                headers=self.state.headers,
                catch_response=True,
                name="POST /carts/items",
            ) as resp:
                if resp.status_code == 200:
                    self.state.lines.append(line)
                else:
                    resp.failure(f"Add to cart failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def view_cart(self):
        self.client.get("/carts", headers=self.state.headers, name="GET /carts")

    @task
    def create_payment_intent(self):
        if not self.state.lines:
            self.interrupt()
        with self.client.post(
            "/checkout/payment-intents",
            json={"items": self.state.lines},
            catch_response=True,
            name="POST /checkout/payment-intents",
        ) as resp:
            if resp.status_code == 201:
                body = resp.json()
                self.state.payment_reference = body["reference"]
                self.state.expected_total_cents = body["amount_cents"]
            else:
                resp.failure(f"Payment intent failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def place_order(self):
        with self.client.post(
            "/checkout/orders",
            json={
                "contact": contact_info(),
                "items": self.state.lines,
                "payment_method": "GATEWAY",
                "payment_reference": self.state.payment_reference,
            },
            headers=self.state.headers,
            catch_response=True,
            name="POST /checkout/orders [gateway]",
        ) as resp:
            if resp.status_code == 201:
                body = resp.json()
                self.state.order_number = body["order_number"]
                if body["pricing"]["total_cents"] != self.state.expected_total_cents:
                    resp.failure("Order total differs from the payment intent amount")
            else:
                resp.failure(f"Place order failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def view_order(self):
        self.client.get(
            f"/orders/{self.state.order_number}",
            headers=self.state.headers,
            name="GET /orders/{order_number}",
        )
        self.interrupt()


class CheckoutUser(HttpUser):
    """Shopper running the full checkout journey."""

    tasks = [CheckoutJourney]
    wait_time = between(1, 3)


class CashOnDeliveryUser(HttpUser):
    """Guest placing pay-on-delivery orders straight from a product page."""

    wait_time = between(0.5, 2)

    def on_start(self):
        resp = self.client.post("/dev/products", json=product_data(stock=10_000), name="POST /dev/products")
        self.product_id = resp.json()["product_id"] if resp.status_code == 201 else None

    @task
    def place_cod_order(self):
        if not self.product_id:
            return
        with self.client.post(
            "/checkout/orders",
            json={
                "contact": contact_info(),
                "items": [cart_line(self.product_id)],
                "payment_method": "COD",
            },
            catch_response=True,
            name="POST /checkout/orders [cod]",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"COD order failed: {resp.status_code}: {extract_error_detail(resp)}")
