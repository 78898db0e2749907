"""FastAPI routes for the Storefront — checkout, orders, carts, stock and sweeps."""

import json

from fastapi import APIRouter, HTTPException
from protean.utils.globals import current_domain

from storefront import settings
from storefront.api.schemas import (
    CancelOrderRequest,
    CartLineKeySchema,
    CartLineSchema,
    CartResponse,
    CheckoutRequestSchema,
    CheckoutResponse,
    ConfigureGatewayRequest,
    GatewayConfigResponse,
    MergeCartRequest,
    OrderItemResponse,
    OrderResponse,
    SelectCartLineRequest,
    ShipOrderRequest,
    StatusResponse,
    StockChangeRequest,
    StockChangeResponse,
    SweepResponse,
)
from storefront.cart.management import (
    AddCartLine,
    MergeLocalCart,
    RemoveCartLine,
    SelectCartLine,
    cart_lines,
)
from storefront.checkout.orchestrator import CheckoutOrchestrator, CheckoutRequest
from storefront.gateway import get_card_gateway, get_pix_gateway
from storefront.gateway.fake_adapter import FakeCardGateway, FakePixGateway
from storefront.order.fulfillment import CancelOrder, DeliverOrder, ShipOrder
from storefront.order.order import Order
from storefront.stock.ledger import RestockVariant, StockOutcome, WithdrawVariant
from storefront.sweeper.sweep import sweep_pending_pix_orders

# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("", response_model=CheckoutResponse)
def checkout(body: CheckoutRequestSchema) -> CheckoutResponse:
    """Validate the selected cart lines and return the payment redirect.

    Declared sync so FastAPI runs the blocking gateway calls in its threadpool.
    """
    result = CheckoutOrchestrator().checkout(
        CheckoutRequest(
            user_id=body.user_id,
            address_id=body.address_id,
            shipping_rate_id=body.shipping_rate_id,
            payment_method=body.payment_method,
        )
    )
    return CheckoutResponse(
        redirect_url=result.redirect_url,
        payment_method=result.payment_method,
        external_reference=result.external_reference,
        order_id=result.order_id,
        shipping_rate_id=result.shipping.rate.rate_id if result.shipping.rate else None,
        shipping_cost=result.shipping.cost,
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    order = current_domain.repository_for(Order).get(order_id)
    return OrderResponse(
        order_id=str(order.id),
        user_id=str(order.user_id),
        status=order.status,
        payment_method=order.payment_method,
        subtotal=order.subtotal,
        discount_amount=order.discount_amount,
        shipping_cost=order.shipping_cost,
        total_amount=order.total_amount,
        external_reference=order.external_reference,
        tracking_code=order.tracking_code,
        items=[
            OrderItemResponse(
                product_id=str(item.product_id),
                quantity=item.quantity,
                price=item.price,
                selected_size=item.selected_size,
                selected_color=item.selected_color,
            )
            for item in order.items
        ],
    )


@order_router.put("/{order_id}/ship", response_model=StatusResponse)
async def ship_order(order_id: str, body: ShipOrderRequest) -> StatusResponse:
    current_domain.process(ShipOrder(order_id=order_id, tracking_code=body.tracking_code), asynchronous=False)
    return StatusResponse(status="shipped")


@order_router.put("/{order_id}/deliver", response_model=StatusResponse)
async def deliver_order(order_id: str) -> StatusResponse:
    current_domain.process(DeliverOrder(order_id=order_id), asynchronous=False)
    return StatusResponse(status="delivered")


@order_router.put("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(order_id: str, body: CancelOrderRequest) -> StatusResponse:
    current_domain.process(CancelOrder(order_id=order_id, reason=body.reason), asynchronous=False)
    return StatusResponse(status="cancelled")


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


def _cart_response(user_id: str, lines: list[dict]) -> CartResponse:
    return CartResponse(user_id=user_id, lines=[CartLineSchema(**line) for line in lines])


@cart_router.get("/{user_id}", response_model=CartResponse)
async def get_cart(user_id: str) -> CartResponse:
    return _cart_response(user_id, cart_lines(user_id))


@cart_router.post("/{user_id}/items", response_model=CartResponse)
async def add_cart_line(user_id: str, body: CartLineSchema) -> CartResponse:
    current_domain.process(AddCartLine(user_id=user_id, **body.model_dump()), asynchronous=False)
    return _cart_response(user_id, cart_lines(user_id))


@cart_router.delete("/{user_id}/items", response_model=CartResponse)
async def remove_cart_line(user_id: str, body: CartLineKeySchema) -> CartResponse:
    current_domain.process(RemoveCartLine(user_id=user_id, **body.model_dump()), asynchronous=False)
    return _cart_response(user_id, cart_lines(user_id))


@cart_router.put("/{user_id}/items/selection", response_model=CartResponse)
async def select_cart_line(user_id: str, body: SelectCartLineRequest) -> CartResponse:
    current_domain.process(SelectCartLine(user_id=user_id, **body.model_dump()), asynchronous=False)
    return _cart_response(user_id, cart_lines(user_id))


@cart_router.post("/{user_id}/merge", response_model=CartResponse)
async def merge_cart(user_id: str, body: MergeCartRequest) -> CartResponse:
    """Merge a signed-out shopper's local cart into the persisted cart."""
    merged = current_domain.process(
        MergeLocalCart(user_id=user_id, lines=json.dumps([line.model_dump() for line in body.lines])),
        asynchronous=False,
    )
    return _cart_response(user_id, merged)


# ---------------------------------------------------------------------------
# Stock Router
# ---------------------------------------------------------------------------
stock_router = APIRouter(prefix="/stock", tags=["stock"])


@stock_router.post("/restock", response_model=StockChangeResponse)
async def restock(body: StockChangeRequest) -> StockChangeResponse:
    quantity = current_domain.process(RestockVariant(**body.model_dump()), asynchronous=False)
    return StockChangeResponse(outcome=StockOutcome.OK.value, quantity=quantity)


@stock_router.post("/withdraw", response_model=StockChangeResponse)
async def withdraw(body: StockChangeRequest) -> StockChangeResponse:
    outcome = current_domain.process(WithdrawVariant(**body.model_dump()), asynchronous=False)
    return StockChangeResponse(outcome=outcome)


# ---------------------------------------------------------------------------
# Sweep Router
# ---------------------------------------------------------------------------
sweep_router = APIRouter(prefix="/sweeps", tags=["sweeps"])


@sweep_router.post("/pix", response_model=SweepResponse)
def sweep_pix() -> SweepResponse:
    """Reconcile pending Pix orders against the gateway.

    Declared sync so FastAPI runs the blocking gateway calls in its threadpool.
    """
    report = sweep_pending_pix_orders()
    return SweepResponse(
        checked=report.checked,
        advanced=report.advanced,
        already_confirmed=report.already_confirmed,
        unpaid=report.unpaid,
        failed=report.failed,
    )


# ---------------------------------------------------------------------------
# Gateway Router
# ---------------------------------------------------------------------------
gateway_router = APIRouter(prefix="/gateways", tags=["gateways"])


@gateway_router.post("/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure a fake gateway's behavior (non-production only).

    This endpoint is only available when PROTEAN_ENV is not 'production'.
    It allows toggling success/failure behavior for manual API testing.
    """
    if settings.is_production():
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    if body.gateway == "pix":
        gateway, fake_type = get_pix_gateway(), FakePixGateway
    else:
        gateway, fake_type = get_card_gateway(), FakeCardGateway

    if not isinstance(gateway, fake_type):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for fake gateways")

    gateway.configure(should_succeed=body.should_succeed, failure_reason=body.failure_reason)
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        failure_reason=gateway.failure_reason,
    )
