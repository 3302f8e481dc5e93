"""FastAPI routes for the Storefront: checkout, orders and carts."""

import structlog
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AddToCartRequest,
    CartIdResponse,
    CartResponse,
    CheckoutSettingsResponse,
    CouponVerdictResponse,
    OrderResponse,
    PaymentIntentRequest,
    PaymentIntentResponse,
    PlaceOrderRequest,
    PlaceOrderResponse,
    PlacementFailureResponse,
    StatusResponse,
    UpdateCartQuantityRequest,
    ValidateCouponRequest,
)
from storefront.api.session import current_shopper
from storefront.cart.cart import carts_for
from storefront.cart.items import AddToCart, RemoveFromCart, UpdateCartItemQuantity
from storefront.checkout.placement import place_order, price_cart
from storefront.checkout.settings import current_tax_rate, shipping_zones
from storefront.config import get_settings
from storefront.coupon.validation import validate_coupon
from storefront.errors import CheckoutError
from storefront.order.order import Order
from storefront.payments.gateway import get_gateway
from storefront.payments.gateway.port import GatewayError
from storefront.shopper import Shopper
from storefront.utils.logging import add_context

logger = structlog.get_logger(__name__)

# Error codes not listed here are user-correctable payload problems (400)
STATUS_BY_ERROR_CODE = {
    "out_of_stock": 409,
    "payment_verification_failed": 402,
    "order_number_unavailable": 503,
    "commit_conflict": 503,
}


def _failure_response(code, message, retryable=False, details=None) -> JSONResponse:
    body = PlacementFailureResponse(
        error={"code": code, "message": message, "retryable": retryable, "details": details or {}}
    )
    return JSONResponse(status_code=STATUS_BY_ERROR_CODE.get(code, 400), content=body.model_dump())


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post(
    "/orders",
    status_code=201,
    response_model=PlaceOrderResponse,
    responses={400: {"model": PlacementFailureResponse}, 409: {"model": PlacementFailureResponse}},
)
async def create_order(body: PlaceOrderRequest, shopper: Shopper = Depends(current_shopper)):
    add_context(**shopper.as_log_context())
    result = place_order(
        contact=body.contact.model_dump(),
        cart_lines=[line.model_dump() for line in body.items],
        payment_method=body.payment_method,
        payment_reference=body.payment_reference,
        coupon_code=body.coupon_code,
        shipping_zone_id=body.shipping_zone_id,
        shopper=shopper,
    )
    if not result.success:
        error = result.error
        return _failure_response(error.code, error.message, error.retryable, error.details)

    return PlaceOrderResponse(
        order_number=result.order_number,
        order_id=result.order_id,
        pricing=result.pricing.as_dict(),
    )


@checkout_router.post("/payment-intents", status_code=201, response_model=PaymentIntentResponse)
async def create_payment_intent(body: PaymentIntentRequest):
    """Price the cart server-side and open a gateway payment for exactly that total."""
    settings = get_settings()
    try:
        priced = price_cart(
            [line.model_dump() for line in body.items],
            coupon_code=body.coupon_code,
            shipping_zone_id=body.shipping_zone_id,
            settings=settings,
        )
    except CheckoutError as exc:
        return _failure_response(exc.code, exc.message, exc.retryable, exc.details)

    try:
        intent = get_gateway().create_payment_intent(
            priced.pricing.total_cents,
            settings.currency,
            idempotency_key=body.idempotency_key,
        )
    except GatewayError as exc:
        logger.warning("Payment intent creation failed", error=str(exc))
        raise HTTPException(status_code=503, detail="Payment gateway unavailable")

    logger.info("Payment intent created", reference=intent.reference, amount_cents=intent.amount_cents)
    return PaymentIntentResponse(
        reference=intent.reference,
        client_secret=intent.client_secret,
        amount_cents=intent.amount_cents,
        currency=intent.currency,
        pricing=priced.pricing.as_dict(),
    )


@checkout_router.get("/settings", response_model=CheckoutSettingsResponse)
async def get_checkout_settings() -> CheckoutSettingsResponse:
    settings = get_settings()
    return CheckoutSettingsResponse(
        currency=settings.currency,
        tax_rate=current_tax_rate(),
        flat_shipping_cents=settings.flat_shipping_cents,
        free_shipping_threshold_cents=settings.free_shipping_threshold_cents,
        shipping_zones=[
            {"id": str(zone.id), "name": zone.name, "charge_cents": zone.charge_cents} for zone in shipping_zones()
        ],
    )


@checkout_router.post("/coupons/validate", response_model=CouponVerdictResponse)
async def check_coupon(body: ValidateCouponRequest) -> CouponVerdictResponse:
    verdict = validate_coupon(body.code)
    return CouponVerdictResponse(
        valid=verdict.is_valid,
        status=verdict.status.value,
        message=verdict.message,
        code=verdict.code,
        coupon_type=verdict.coupon_type.value if verdict.coupon_type else None,
        value=verdict.value,
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("/{order_number}", response_model=OrderResponse)
async def get_order(order_number: str, shopper: Shopper = Depends(current_shopper)) -> OrderResponse:
    matches = current_domain.repository_for(Order)._dao.query.filter(order_number=order_number).all().items
    order = matches[0] if matches else None
    # Customer orders are private to their customer; guest orders are looked up by number
    if order is None or (order.customer_id and str(order.customer_id) != str(shopper.customer_id or "")):
        raise HTTPException(status_code=404, detail="Order not found")

    return OrderResponse(
        order_id=str(order.id),
        order_number=order.order_number,
        status=order.status,
        payment_status=order.payment_status,
        payment_method=order.payment_method,
        currency=order.currency,
        lines=[
            {
                "product_id": str(line.product_id),
                "name": line.name,
                "unit_price_cents": line.unit_price_cents,
                "quantity": line.quantity,
                "image": line.image,
            }
            for line in order.lines
        ],
        pricing={
            "subtotal_cents": order.subtotal_cents,
            "discount_cents": order.discount_cents,
            "shipping_cents": order.shipping_cents,
            "tax_cents": order.tax_cents,
            "total_cents": order.total_cents,
        },
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(shopper: Shopper = Depends(current_shopper)) -> CartResponse:
    carts = carts_for(shopper)
    if not carts:
        return CartResponse(items=[])
    cart = carts[0]
    return CartResponse(
        cart_id=str(cart.id),
        items=[{"product_id": str(item.product_id), "quantity": item.quantity} for item in cart.items],
    )


@cart_router.post("/items", response_model=CartIdResponse)
async def add_cart_item(body: AddToCartRequest, shopper: Shopper = Depends(current_shopper)) -> CartIdResponse:
    command = AddToCart(
        customer_id=shopper.customer_id,
        session_id=shopper.session_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    result = current_domain.process(command, asynchronous=False)
    return CartIdResponse(cart_id=result)


@cart_router.patch("/items/{product_id}", response_model=CartIdResponse)
async def update_cart_item_quantity(
    product_id: str, body: UpdateCartQuantityRequest, shopper: Shopper = Depends(current_shopper)
) -> CartIdResponse:
    command = UpdateCartItemQuantity(
        customer_id=shopper.customer_id,
        session_id=shopper.session_id,
        product_id=product_id,
        quantity=body.quantity,
    )
    result = current_domain.process(command, asynchronous=False)
    return CartIdResponse(cart_id=result)


@cart_router.delete("/items/{product_id}", response_model=StatusResponse)
async def remove_cart_item(product_id: str, shopper: Shopper = Depends(current_shopper)) -> StatusResponse:
    command = RemoveFromCart(
        customer_id=shopper.customer_id,
        session_id=shopper.session_id,
        product_id=product_id,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="removed")
