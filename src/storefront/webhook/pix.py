"""Pix payment confirmation — command and handler.

Locates the order named in the charge metadata, falling back to the
charge id, and applies the shared pending → processing transition.
Confirmations for orders that do not exist are logged and dropped.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order
from storefront.order.payment import ConfirmationOutcome, confirm_order_payment

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class ConfirmPixPayment:
    """Apply a Pix gateway's payment confirmation."""

    charge_id = String(required=True, max_length=255)
    order_id = Identifier()


@storefront.command_handler(part_of=Order)
class ConfirmPixPaymentHandler:
    @handle(ConfirmPixPayment)
    def confirm_pix_payment(self, command):
        repo = current_domain.repository_for(Order)

        order = repo.find(command.order_id) if command.order_id else None
        if order is None:
            order = repo.find_by_external_reference(command.charge_id)

        if order is None:
            logger.warning(
                "Pix payment for unknown order",
                charge_id=command.charge_id,
                order_id=str(command.order_id) if command.order_id else None,
            )
            return ConfirmationOutcome.NOT_FOUND.value

        return confirm_order_payment(order.id, source="pix-webhook").value
