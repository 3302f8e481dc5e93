"""Tests for order number generation."""

import re
from datetime import UTC, datetime

import pytest
from storefront.checkout.order_number import generate_order_number, make_candidate
from storefront.errors import OrderNumberCollisionExhausted


class TestCandidate:
    def test_format(self):
        candidate = make_candidate("SF", now=datetime(2026, 3, 1, tzinfo=UTC))
        assert re.fullmatch(r"SF26[0-9A-F]{12}", candidate)

    def test_prefix_is_configurable(self):
        assert make_candidate("IG").startswith("IG")


class TestGenerateOrderNumber:
    def test_returns_first_free_candidate(self):
        candidates = iter(["SF26TAKEN0000001", "SF26FREE00000002"])
        number = generate_order_number(
            is_taken=lambda c: c == "SF26TAKEN0000001",
            candidate_factory=lambda: next(candidates),
        )
        assert number == "SF26FREE00000002"

    def test_gives_up_after_max_attempts(self):
        calls = []

        def always_taken(candidate):
            calls.append(candidate)
            return True

        with pytest.raises(OrderNumberCollisionExhausted) as exc:
            generate_order_number(max_attempts=4, is_taken=always_taken)
        assert len(calls) == 4
        assert exc.value.retryable
        assert exc.value.attempts == 4

    def test_ten_thousand_numbers_are_unique(self):
        issued = set()
        for _ in range(10_000):
            issued.add(generate_order_number(is_taken=lambda c: c in issued))
        assert len(issued) == 10_000

    def test_checks_existing_orders(self, contact):
        from protean import current_domain
        from storefront.checkout.pricing import PriceBreakdown
        from storefront.order.order import ContactInfo, Order

        order = Order.place(
            order_number="SF26EXISTING0001",
            customer_id=None,
            contact=ContactInfo(**contact),
            lines=[{"product_id": "prod-001", "name": "Socks", "unit_price_cents": 350, "quantity": 1, "image": None}],
            pricing=PriceBreakdown(350, 0, 6000, 0, 6350),
            payment_method="COD",
        )
        current_domain.repository_for(Order).add(order)

        candidates = iter(["SF26EXISTING0001", "SF26FRESH0000001"])
        assert generate_order_number(candidate_factory=lambda: next(candidates)) == "SF26FRESH0000001"
