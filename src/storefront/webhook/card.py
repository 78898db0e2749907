"""Card payment confirmation — command and handler.

Card orders do not exist before payment. The handler materializes the
order directly in processing from the session metadata (or the stored
BillingReference when the metadata is incomplete), withdraws stock for
each line and removes the purchased lines from the shopper's cart.

A session that already produced an order is acknowledged without changes.
"""

import json
from enum import Enum

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String, Text
from protean.utils.globals import current_domain

from storefront.billing.intent import decode_metadata, has_items
from storefront.billing.reference import BillingReference
from storefront.cart.management import purge_purchased_lines
from storefront.domain import storefront
from storefront.errors import WebhookProcessingError
from storefront.order.order import Order, OrderStatus, PaymentMethod
from storefront.stock.ledger import decrement_for_order

logger = structlog.get_logger(__name__)


class CardOutcome(Enum):
    CREATED = "created"
    DUPLICATE = "duplicate"


def _resolve_metadata(session_id: str, metadata: dict) -> dict:
    if has_items(metadata) and metadata.get("user_id"):
        return metadata

    reference = current_domain.repository_for(BillingReference).find_by_external_reference(session_id)
    if reference is None:
        raise WebhookProcessingError(session_id, "Session metadata is incomplete and no billing reference exists")

    logger.info("Rebuilding card order from billing reference", session_id=session_id)
    return {**reference.intent_metadata, **{key: value for key, value in metadata.items() if value}}


@storefront.command(part_of="Order")
class ConfirmCardPayment:
    """Materialize the order for a paid card checkout session."""

    session_id = String(required=True, max_length=255)
    session_metadata = Text()  # JSON: checkout session metadata


@storefront.command_handler(part_of=Order)
class ConfirmCardPaymentHandler:
    @handle(ConfirmCardPayment)
    def confirm_card_payment(self, command):
        repo = current_domain.repository_for(Order)

        if repo.find_by_external_reference(command.session_id) is not None:
            logger.info("Card session already has an order", session_id=command.session_id)
            return CardOutcome.DUPLICATE.value

        metadata = _resolve_metadata(command.session_id, json.loads(command.session_metadata or "{}"))
        try:
            intent = decode_metadata(metadata)
            order = Order.create(
                user_id=intent.user_id,
                lines=intent.order_lines(),
                shipping_address=intent.address,
                payment_method=PaymentMethod.CREDIT_CARD,
                shipping=intent.shipping,
                discount_percent=intent.discount_percent,
                status=OrderStatus.PROCESSING,
                external_reference=command.session_id,
            )
        except ValidationError as exc:
            raise WebhookProcessingError(command.session_id, f"Invalid order data: {exc.messages}") from exc

        try:
            repo.add(order)
        except Exception:
            logger.error("Card order could not be stored, removing partial order", session_id=command.session_id)
            partial = repo.find(order.id)
            if partial is not None:
                repo.discard(partial)
            raise

        logger.info("Card order created", order_id=str(order.id), session_id=command.session_id)

        decrement_for_order(order)
        purge_purchased_lines(intent.user_id, order.line_keys)

        return CardOutcome.CREATED.value
