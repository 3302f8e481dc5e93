from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture
from storefront.catalogue.product import Product
from storefront.config import CheckoutSettings
from storefront.coupon.coupon import Coupon, CouponType
from storefront.payments.gateway import FakeGateway, reset_gateway, set_gateway


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront
    from storefront.utils.db import drop_db, setup_db

    bed = DomainFixture(storefront)
    bed.setup()
    setup_db(storefront)
    yield bed
    drop_db(storefront)
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()
        reset_gateway()


@pytest.fixture()
def gateway():
    fake = FakeGateway()
    set_gateway(fake)
    return fake


@pytest.fixture()
def settings():
    return CheckoutSettings()


@pytest.fixture()
def make_product():
    def _make(name="Linen Shirt", price_cents=1999, stock=10, image=None):
        product = Product.create(name=name, price_cents=price_cents, stock=stock, image=image)
        current_domain.repository_for(Product).add(product)
        return product

    return _make


@pytest.fixture()
def make_coupon():
    def _make(code="WELCOME10", coupon_type=CouponType.PERCENTAGE, value=10, usage_limit=None, **overrides):
        defaults = {
            "expires_at": datetime.now(UTC) + timedelta(days=30),
            "is_active": True,
        }
        defaults.update(overrides)
        coupon = Coupon.create(code=code, coupon_type=coupon_type, value=value, usage_limit=usage_limit, **defaults)
        current_domain.repository_for(Coupon).add(coupon)
        return coupon

    return _make


@pytest.fixture()
def contact():
    return {
        "full_name": "Ada Lovelace",
        "phone": "+4420790000000",
        "address": "12 St James's Square, London",
        "email": "ada@example.com",
    }
