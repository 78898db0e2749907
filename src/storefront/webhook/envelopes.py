"""Gateway webhook envelopes decoded into a tagged union.

Each gateway's JSON is parsed with its own pydantic models and reduced to
either PaymentConfirmed or IgnoredEvent. Unknown event types and payloads
that do not describe a settled payment are ignorable, never errors.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

PIX_PAID_EVENT = "billing.paid"
CARD_PAID_EVENTS = frozenset({"checkout.session.completed", "checkout.session.async_payment_succeeded"})


class PaymentConfirmed(BaseModel):
    kind: Literal["payment_confirmed"] = "payment_confirmed"
    gateway: str
    event_type: str
    external_reference: str
    order_id: str | None = None
    customer_email: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class IgnoredEvent(BaseModel):
    kind: Literal["ignored"] = "ignored"
    gateway: str
    event_type: str | None = None
    reason: str


WebhookEvent = Annotated[PaymentConfirmed | IgnoredEvent, Field(discriminator="kind")]


# ---------------------------------------------------------------------------
# Pix (AbacatePay)
# ---------------------------------------------------------------------------
class _PixBilling(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    status: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class _PixData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    billing: _PixBilling | None = None


class _PixEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    event: str
    data: _PixData = Field(default_factory=_PixData)


def decode_pix_event(payload: dict) -> WebhookEvent:
    try:
        envelope = _PixEnvelope.model_validate(payload)
    except PydanticValidationError:
        return IgnoredEvent(gateway="pix", reason="Malformed payload")

    if envelope.event != PIX_PAID_EVENT:
        return IgnoredEvent(gateway="pix", event_type=envelope.event, reason="Unhandled event type")

    billing = envelope.data.billing
    if billing is None:
        return IgnoredEvent(gateway="pix", event_type=envelope.event, reason="Event carries no billing")
    if billing.status and billing.status.upper() != "PAID":
        return IgnoredEvent(gateway="pix", event_type=envelope.event, reason=f"Billing status {billing.status}")

    order_id = billing.metadata.get("orderId")
    return PaymentConfirmed(
        gateway="pix",
        event_type=envelope.event,
        external_reference=billing.id,
        order_id=str(order_id) if order_id else None,
        metadata=billing.metadata,
    )


# ---------------------------------------------------------------------------
# Card (Stripe Checkout)
# ---------------------------------------------------------------------------
class _CardSession(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    payment_status: str | None = None
    customer_email: str | None = None
    customer_details: dict[str, Any] | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def email(self) -> str | None:
        if self.customer_email:
            return self.customer_email
        return (self.customer_details or {}).get("email")


class _CardData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    object: dict[str, Any]


class _CardEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    type: str
    data: _CardData


def decode_card_event(payload: dict) -> WebhookEvent:
    try:
        envelope = _CardEnvelope.model_validate(payload)
    except PydanticValidationError:
        return IgnoredEvent(gateway="card", reason="Malformed payload")

    if envelope.type not in CARD_PAID_EVENTS:
        return IgnoredEvent(gateway="card", event_type=envelope.type, reason="Unhandled event type")

    try:
        session = _CardSession.model_validate(envelope.data.object)
    except PydanticValidationError:
        return IgnoredEvent(gateway="card", event_type=envelope.type, reason="Malformed checkout session")

    if session.payment_status != "paid":
        return IgnoredEvent(
            gateway="card",
            event_type=envelope.type,
            reason=f"Payment status {session.payment_status}",
        )

    return PaymentConfirmed(
        gateway="card",
        event_type=envelope.type,
        external_reference=session.id,
        customer_email=session.email,
        metadata={key: str(value) for key, value in session.metadata.items() if value is not None},
    )
