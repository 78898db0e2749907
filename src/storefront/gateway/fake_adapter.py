"""Configurable fake gateways for development and testing.

These adapters simulate the Pix and card gateways without any external
calls. They can be configured at runtime to succeed or fail, which is
useful for:
- Manual API testing via /gateways/configure
- Automated tests with predictable outcomes
- Development without real gateway credentials
"""

import hmac
import json
from uuid import uuid4

from storefront.errors import GatewayError, WebhookAuthenticationError
from storefront.gateway.port import (
    CardGateway,
    ChargeCustomer,
    ChargeProduct,
    CheckoutSession,
    PixCharge,
    PixChargeStatus,
    PixGateway,
)

FAKE_WEBHOOK_SECRET = "test-secret"
FAKE_WEBHOOK_SIGNATURE = "test-signature"


class FakePixGateway(PixGateway):
    """Configurable fake Pix gateway."""

    name = "fake-pix"

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Billing rejected"
        self.calls: list[dict] = []
        self.statuses: dict[str, str] = {}
        self.unreachable: set[str] = set()

    def configure(self, should_succeed: bool, failure_reason: str = "Billing rejected") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def mark_paid(self, charge_id: str, status: str = "PAID") -> None:
        self.statuses[charge_id] = status

    def create_charge(
        self,
        products: list[ChargeProduct],
        customer: ChargeCustomer,
        metadata: dict,
        return_url: str,
        completion_url: str,
    ) -> PixCharge:
        self.calls.append(
            {
                "method": "create_charge",
                "products": products,
                "customer": customer,
                "metadata": metadata,
                "return_url": return_url,
                "completion_url": completion_url,
            }
        )

        if not self.should_succeed:
            raise GatewayError(self.name, self.failure_reason)

        charge_id = f"bill_{uuid4().hex[:16]}"
        self.statuses[charge_id] = "PENDING"
        return PixCharge(charge_id=charge_id, url=f"https://pay.example.test/{charge_id}")

    def check_charge(self, charge_id: str) -> PixChargeStatus:
        self.calls.append({"method": "check_charge", "charge_id": charge_id})
        if charge_id in self.unreachable:
            raise GatewayError(self.name, "Gateway timeout")
        return PixChargeStatus(charge_id=charge_id, status=self.statuses.get(charge_id, "PENDING"))

    def verify_webhook_secret(self, secret: str) -> bool:
        return hmac.compare_digest((secret or "").encode(), FAKE_WEBHOOK_SECRET.encode())


class FakeCardGateway(CardGateway):
    """Configurable fake hosted card checkout."""

    name = "fake-card"

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Card checkout unavailable"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Card checkout unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_checkout_session(
        self,
        products: list[ChargeProduct],
        customer_email: str | None,
        metadata: dict[str, str],
        discount_cents: int,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        self.calls.append(
            {
                "method": "create_checkout_session",
                "products": products,
                "customer_email": customer_email,
                "metadata": metadata,
                "discount_cents": discount_cents,
                "success_url": success_url,
                "cancel_url": cancel_url,
            }
        )

        if not self.should_succeed:
            raise GatewayError(self.name, self.failure_reason)

        session_id = f"cs_test_{uuid4().hex[:24]}"
        return CheckoutSession(
            session_id=session_id,
            url=f"https://checkout.example.test/{session_id}",
            metadata=dict(metadata),
        )

    def parse_webhook_event(self, payload: bytes, signature: str) -> dict:
        if signature != FAKE_WEBHOOK_SIGNATURE:
            raise WebhookAuthenticationError(self.name, "Invalid webhook signature")
        return json.loads(payload)
