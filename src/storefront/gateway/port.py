"""Payment gateway ports (abstract interfaces).

Two independent gateways back checkout: an asynchronous Pix/QR gateway
that confirms payment later, and a hosted card checkout that redirects
the shopper and reports back through a signed webhook. Amounts cross
these interfaces as integer cents.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

PAID_PIX_STATUSES = frozenset({"PAID", "CONFIRMED"})


@dataclass(frozen=True)
class ChargeProduct:
    """One billed line as the gateway sees it."""

    external_id: str
    name: str
    quantity: int
    unit_price_cents: int
    description: str | None = None


@dataclass(frozen=True)
class ChargeCustomer:
    name: str
    email: str | None
    phone: str
    tax_id: str


@dataclass(frozen=True)
class PixCharge:
    """A Pix billing created at the gateway."""

    charge_id: str
    url: str
    status: str = "PENDING"


@dataclass(frozen=True)
class PixChargeStatus:
    charge_id: str
    status: str

    @property
    def paid(self) -> bool:
        return self.status.upper() in PAID_PIX_STATUSES


@dataclass(frozen=True)
class CheckoutSession:
    """A hosted card checkout session."""

    session_id: str
    url: str
    metadata: dict = field(default_factory=dict)


class PixGateway(ABC):
    """Asynchronous Pix/QR instant-payment gateway."""

    name = "pix"

    @abstractmethod
    def create_charge(
        self,
        products: list[ChargeProduct],
        customer: ChargeCustomer,
        metadata: dict,
        return_url: str,
        completion_url: str,
    ) -> PixCharge:
        """Create a one-time Pix billing. Raises GatewayError on failure."""
        ...

    @abstractmethod
    def check_charge(self, charge_id: str) -> PixChargeStatus:
        """Ask the gateway for the current status of a charge."""
        ...

    @abstractmethod
    def verify_webhook_secret(self, secret: str) -> bool:
        """Check the shared secret carried by an inbound webhook."""
        ...


class CardGateway(ABC):
    """Hosted card checkout gateway."""

    name = "card"

    @abstractmethod
    def create_checkout_session(
        self,
        products: list[ChargeProduct],
        customer_email: str | None,
        metadata: dict[str, str],
        discount_cents: int,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        """Create a hosted checkout session. Raises GatewayError on failure.

        ``discount_cents`` comes off the product lines only; shipping is
        charged in full.
        """
        ...

    @abstractmethod
    def parse_webhook_event(self, payload: bytes, signature: str) -> dict:
        """Verify a webhook signature and return the decoded event body.

        Raises WebhookAuthenticationError when the signature does not match.
        """
        ...
