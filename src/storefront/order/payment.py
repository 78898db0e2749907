"""Payment confirmation — the single guarded pending → processing transition.

Both the Pix webhook and the reconciliation sweeper funnel through
confirm_order_payment(). Only the caller whose save lands on the pending
order advances it and withdraws stock; everyone else sees the order already
confirmed and does nothing.
"""

from enum import Enum

import structlog
from protean import handle
from protean.exceptions import ExpectedVersionError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order
from storefront.stock.ledger import decrement_for_order

logger = structlog.get_logger(__name__)


class ConfirmationOutcome(Enum):
    ADVANCED = "advanced"
    ALREADY_CONFIRMED = "already_confirmed"
    NOT_FOUND = "not_found"


def confirm_order_payment(order_id, source: str = "unknown") -> ConfirmationOutcome:
    """Advance a pending order to processing, exactly once."""
    repo = current_domain.repository_for(Order)

    order = repo.find(order_id)
    if order is None:
        logger.warning("Payment confirmed for unknown order", order_id=str(order_id), source=source)
        return ConfirmationOutcome.NOT_FOUND

    if not order.awaiting_payment:
        logger.info(
            "Order already past pending, ignoring payment confirmation",
            order_id=str(order.id),
            status=order.status,
            source=source,
        )
        return ConfirmationOutcome.ALREADY_CONFIRMED

    order.confirm_payment()
    try:
        repo.add(order)
    except ExpectedVersionError:
        logger.info(
            "Order confirmed concurrently by another caller",
            order_id=str(order.id),
            source=source,
        )
        return ConfirmationOutcome.ALREADY_CONFIRMED

    logger.info("Order payment confirmed", order_id=str(order.id), source=source)
    decrement_for_order(order)
    return ConfirmationOutcome.ADVANCED


@storefront.command(part_of="Order")
class ConfirmOrderPayment:
    """Record that a pending order's payment was confirmed by the gateway."""

    order_id = Identifier(required=True)
    source = String(max_length=50, default="sweeper")


@storefront.command_handler(part_of=Order)
class ConfirmOrderPaymentHandler:
    @handle(ConfirmOrderPayment)
    def confirm_payment(self, command):
        return confirm_order_payment(command.order_id, source=command.source).value
