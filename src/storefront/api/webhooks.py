"""FastAPI routes for payment gateway webhooks.

One endpoint per gateway. Each authenticates the caller, decodes the
gateway's envelope and only acts on confirmed payments. Every event that
is not acted upon is acknowledged with 200 so the gateway stops retrying.
"""

import json

import structlog
from fastapi import APIRouter, Header, Query, Request
from protean.utils.globals import current_domain

from storefront.api.schemas import WebhookResponse
from storefront.errors import WebhookAuthenticationError
from storefront.gateway import get_card_gateway, get_pix_gateway
from storefront.webhook.card import ConfirmCardPayment
from storefront.webhook.envelopes import IgnoredEvent, decode_card_event, decode_pix_event
from storefront.webhook.pix import ConfirmPixPayment

logger = structlog.get_logger(__name__)

webhook_router = APIRouter(prefix="/webhooks", tags=["webhooks"])


def _ignored(event: IgnoredEvent) -> WebhookResponse:
    logger.info("Webhook event ignored", gateway=event.gateway, event_type=event.event_type, reason=event.reason)
    return WebhookResponse(status="ignored", detail=event.reason)


@webhook_router.post("/pix", response_model=WebhookResponse)
async def pix_webhook(request: Request, secret: str = Query(default="")) -> WebhookResponse:
    """Receive a Pix gateway callback authenticated by a shared secret."""
    gateway = get_pix_gateway()
    if not gateway.verify_webhook_secret(secret):
        raise WebhookAuthenticationError(gateway.name, "Invalid webhook secret")

    try:
        payload = await request.json()
    except ValueError:
        return _ignored(IgnoredEvent(gateway="pix", reason="Body is not JSON"))

    event = decode_pix_event(payload)
    if isinstance(event, IgnoredEvent):
        return _ignored(event)

    outcome = current_domain.process(
        ConfirmPixPayment(charge_id=event.external_reference, order_id=event.order_id),
        asynchronous=False,
    )
    return WebhookResponse(status=outcome)


@webhook_router.post("/card", response_model=WebhookResponse)
async def card_webhook(request: Request, stripe_signature: str = Header(default="")) -> WebhookResponse:
    """Receive a signed hosted-checkout callback."""
    gateway = get_card_gateway()
    payload = await request.body()

    try:
        body = gateway.parse_webhook_event(payload, stripe_signature)
    except ValueError:
        return _ignored(IgnoredEvent(gateway="card", reason="Body is not JSON"))

    event = decode_card_event(body)
    if isinstance(event, IgnoredEvent):
        return _ignored(event)

    outcome = current_domain.process(
        ConfirmCardPayment(
            session_id=event.external_reference,
            session_metadata=json.dumps(event.metadata),
        ),
        asynchronous=False,
    )
    return WebhookResponse(status=outcome)
