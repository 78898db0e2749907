"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class CheckoutRequestSchema(BaseModel):
    user_id: str
    address_id: str | None = None
    shipping_rate_id: str | None = None
    payment_method: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "user_id": "user-001",
                    "address_id": "addr-001",
                    "shipping_rate_id": "pac",
                    "payment_method": "pix",
                }
            ]
        }
    }


class CheckoutResponse(BaseModel):
    redirect_url: str
    payment_method: str
    external_reference: str
    order_id: str | None = None
    shipping_rate_id: str | None = None
    shipping_cost: float


# ---------------------------------------------------------------------------
# Webhooks
# ---------------------------------------------------------------------------
class WebhookResponse(BaseModel):
    status: str
    detail: str | None = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderItemResponse(BaseModel):
    product_id: str
    quantity: int
    price: float
    selected_size: str | None = None
    selected_color: dict | None = None


class OrderResponse(BaseModel):
    order_id: str
    user_id: str
    status: str
    payment_method: str
    subtotal: float
    discount_amount: float
    shipping_cost: float
    total_amount: float
    external_reference: str | None = None
    tracking_code: str | None = None
    items: list[OrderItemResponse]


class ShipOrderRequest(BaseModel):
    tracking_code: str | None = None


class CancelOrderRequest(BaseModel):
    reason: str | None = None


class StatusResponse(BaseModel):
    status: str


# ---------------------------------------------------------------------------
# Carts
# ---------------------------------------------------------------------------
class CartLineSchema(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)
    size: str | None = None
    color_code: str | None = None
    color_name: str | None = None
    selected: bool = True


class CartLineKeySchema(BaseModel):
    product_id: str
    size: str | None = None
    color_code: str | None = None


class SelectCartLineRequest(CartLineKeySchema):
    selected: bool = True


class MergeCartRequest(BaseModel):
    lines: list[CartLineSchema] = Field(default_factory=list)


class CartResponse(BaseModel):
    user_id: str
    lines: list[CartLineSchema]


# ---------------------------------------------------------------------------
# Stock
# ---------------------------------------------------------------------------
class StockChangeRequest(BaseModel):
    product_id: str
    size: str | None = None
    color_code: str | None = None
    quantity: int = Field(ge=1)


class StockChangeResponse(BaseModel):
    outcome: str
    quantity: int | None = None


# ---------------------------------------------------------------------------
# Sweeps
# ---------------------------------------------------------------------------
class SweepResponse(BaseModel):
    checked: int
    advanced: int
    already_confirmed: int
    unpaid: int
    failed: int


# ---------------------------------------------------------------------------
# Gateway configuration (non-production)
# ---------------------------------------------------------------------------
class ConfigureGatewayRequest(BaseModel):
    gateway: str = Field(pattern="^(pix|card)$")
    should_succeed: bool = True
    failure_reason: str = "Gateway rejected the request"


class GatewayConfigResponse(BaseModel):
    gateway: str
    should_succeed: bool
    failure_reason: str
