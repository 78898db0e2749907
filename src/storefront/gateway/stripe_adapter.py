"""Stripe hosted-checkout adapter.

Uses the stripe-python SDK to create Checkout Sessions and to verify
webhook signatures with the endpoint's signing secret.
"""

import json

import stripe
import structlog

from storefront.errors import GatewayError, WebhookAuthenticationError
from storefront.gateway.port import CardGateway, ChargeProduct, CheckoutSession

logger = structlog.get_logger(__name__)

CURRENCY = "brl"


class StripeCardGateway(CardGateway):
    name = "stripe"

    def __init__(self, api_key: str, webhook_secret: str, timeout: float = 10.0) -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        stripe.max_network_retries = 0
        stripe.default_http_client = stripe.RequestsClient(timeout=timeout)

    def _discount_coupon(self, discount_cents: int) -> str:
        coupon = stripe.Coupon.create(
            api_key=self.api_key,
            amount_off=discount_cents,
            currency=CURRENCY,
            duration="once",
        )
        return coupon["id"]

    def create_checkout_session(
        self,
        products: list[ChargeProduct],
        customer_email: str | None,
        metadata: dict[str, str],
        discount_cents: int,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        line_items = [
            {
                "price_data": {
                    "currency": CURRENCY,
                    "product_data": {"name": product.name},
                    "unit_amount": product.unit_price_cents,
                },
                "quantity": product.quantity,
            }
            for product in products
        ]

        params = {
            "api_key": self.api_key,
            "payment_method_types": ["card"],
            "mode": "payment",
            "line_items": line_items,
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": metadata,
        }
        if customer_email:
            params["customer_email"] = customer_email

        try:
            if discount_cents:
                params["discounts"] = [{"coupon": self._discount_coupon(discount_cents)}]
            session = stripe.checkout.Session.create(**params)
        except stripe.StripeError as exc:
            logger.error("Stripe checkout session creation failed", error=str(exc))
            raise GatewayError(self.name, exc.user_message or str(exc)) from exc

        if not session.get("url"):
            raise GatewayError(self.name, "Stripe did not return a session URL")
        return CheckoutSession(session_id=session["id"], url=session["url"], metadata=dict(metadata))

    def parse_webhook_event(self, payload: bytes, signature: str) -> dict:
        body = payload.decode("utf-8") if isinstance(payload, bytes) else payload
        try:
            stripe.WebhookSignature.verify_header(body, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as exc:
            raise WebhookAuthenticationError(self.name, "Invalid webhook signature") from exc
        return json.loads(body)
