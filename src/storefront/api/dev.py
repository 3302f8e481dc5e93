"""Development-only routes for seeding products and steering the FakeGateway.

Catalogue editing is not part of this service; these endpoints exist so load
tests and manual API runs have something to buy. They refuse to run when
PROTEAN_ENV is 'production'.
"""

import os

from fastapi import APIRouter, Depends, HTTPException
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    ConfigureGatewayRequest,
    GatewayConfigResponse,
    ProductStockResponse,
    SeedProductRequest,
)
from storefront.catalogue.product import Product
from storefront.payments.gateway import FakeGateway, get_gateway


def _non_production():
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Development endpoints are not available in production")


dev_router = APIRouter(prefix="/dev", tags=["development"], dependencies=[Depends(_non_production)])


def _stock_response(product) -> ProductStockResponse:
    return ProductStockResponse(
        product_id=str(product.id),
        name=product.name,
        price_cents=product.price_cents,
        stock=product.stock,
    )


@dev_router.post("/products", status_code=201, response_model=ProductStockResponse)
async def seed_product(body: SeedProductRequest) -> ProductStockResponse:
    product = Product.create(name=body.name, price_cents=body.price_cents, stock=body.stock, image=body.image)
    current_domain.repository_for(Product).add(product)
    return _stock_response(product)


@dev_router.get("/products/{product_id}", response_model=ProductStockResponse)
async def product_stock(product_id: str) -> ProductStockResponse:
    return _stock_response(current_domain.repository_for(Product).get(product_id))


@dev_router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Toggle FakeGateway availability and auto-confirmation for manual testing."""
    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(available=body.available, auto_confirm=body.auto_confirm)
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        available=gateway.available,
        auto_confirm=gateway.auto_confirm,
    )
