"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands. Field-level rules (quantity caps, contact
details) are enforced by the domain so failures carry checkout error codes.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class CartLineSchema(BaseModel):
    product_id: str
    quantity: int


class ContactSchema(BaseModel):
    full_name: str
    phone: str
    address: str
    email: str | None = None


class PriceBreakdownSchema(BaseModel):
    subtotal_cents: int
    discount_cents: int
    shipping_cents: int
    tax_cents: int
    total_cents: int


class ErrorSchema(BaseModel):
    code: str
    message: str
    retryable: bool = False
    details: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Checkout Request Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    contact: ContactSchema
    items: list[CartLineSchema]
    payment_method: str = "COD"
    payment_reference: str | None = None
    coupon_code: str | None = None
    shipping_zone_id: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "contact": {
                        "full_name": "Ada Lovelace",
                        "phone": "+4420790000000",
                        "address": "12 St James's Square, London",
                        "email": "ada@example.com",
                    },
                    "items": [{"product_id": "prod-001", "quantity": 2}],
                    "payment_method": "GATEWAY",
                    "payment_reference": "pi_123",
                    "coupon_code": "WELCOME10",
                }
            ]
        }
    }


class PaymentIntentRequest(BaseModel):
    items: list[CartLineSchema]
    coupon_code: str | None = None
    shipping_zone_id: str | None = None
    idempotency_key: str | None = None


class ValidateCouponRequest(BaseModel):
    code: str


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartQuantityRequest(BaseModel):
    quantity: int  # 0 or less removes the line


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class PlaceOrderResponse(BaseModel):
    success: bool = True
    order_number: str
    order_id: str
    pricing: PriceBreakdownSchema


class PlacementFailureResponse(BaseModel):
    success: bool = False
    error: ErrorSchema


class PaymentIntentResponse(BaseModel):
    reference: str
    client_secret: str | None = None
    amount_cents: int
    currency: str
    pricing: PriceBreakdownSchema


class ShippingZoneSchema(BaseModel):
    id: str
    name: str
    charge_cents: int


class CheckoutSettingsResponse(BaseModel):
    currency: str
    tax_rate: float
    flat_shipping_cents: int
    free_shipping_threshold_cents: int
    shipping_zones: list[ShippingZoneSchema]


class CouponVerdictResponse(BaseModel):
    valid: bool
    status: str
    message: str
    code: str
    coupon_type: str | None = None
    value: float | None = None


class OrderLineSchema(BaseModel):
    product_id: str
    name: str
    unit_price_cents: int
    quantity: int
    image: str | None = None


class OrderResponse(BaseModel):
    order_id: str
    order_number: str
    status: str
    payment_status: str
    payment_method: str
    currency: str
    lines: list[OrderLineSchema]
    pricing: PriceBreakdownSchema


class CartResponse(BaseModel):
    cart_id: str | None = None
    items: list[CartLineSchema]


class CartIdResponse(BaseModel):
    cart_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Development-only Schemas
# ---------------------------------------------------------------------------
class SeedProductRequest(BaseModel):
    name: str
    price_cents: int = Field(ge=0)
    stock: int = Field(ge=0, default=0)
    image: str | None = None


class ProductStockResponse(BaseModel):
    product_id: str
    name: str
    price_cents: int
    stock: int


class ConfigureGatewayRequest(BaseModel):
    available: bool = True
    auto_confirm: bool = True


class GatewayConfigResponse(BaseModel):
    gateway: str
    available: bool
    auto_confirm: bool
