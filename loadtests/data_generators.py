"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the storefront's validation rules
(ContactInfo minimum lengths, cart line caps) and match the exact field
names expected by the API's Pydantic request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()


def session_id() -> str:
    """Guest session ids like 'sess-lt-a1b2c3d4e5f6'."""
    return f"sess-lt-{uuid.uuid4().hex[:12]}"


def customer_id() -> str:
    return f"cust-lt-{uuid.uuid4().hex[:8]}"


def valid_phone() -> str:
    """At least 11 characters once formatted."""
    return f"+1{random.randint(200, 999)}{random.randint(200, 999)}{random.randint(1000, 9999)}"


def contact_info() -> dict:
    """Generate a ContactSchema payload that passes ContactInfo validation."""
    local = fake.user_name()[:20]
    return {
        "full_name": fake.name()[:255],
        "phone": valid_phone(),
        "address": fake.address().replace("\n", ", ")[:500],
        "email": f"{local}.{uuid.uuid4().hex[:4]}@{fake.free_email_domain()}",
    }


def product_data(stock: int | None = None) -> dict:
    """Generate a SeedProductRequest payload."""
    return {
        "name": fake.catch_phrase()[:255],
        "price_cents": random.randint(199, 25_000),
        "stock": stock if stock is not None else random.randint(50, 500),
    }


def cart_line(product_id: str, max_quantity: int = 3) -> dict:
    return {"product_id": product_id, "quantity": random.randint(1, max_quantity)}
