"""Customer notifications for shipped and delivered orders.

Reacts to OrderShipped and OrderDelivered after the status change is
stored. A failed or impossible email is logged; it never affects the order.
"""

import structlog
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.lookups import get_profiles
from storefront.notification.channel import get_email_channel
from storefront.notification.channel.email_port import OrderEmail
from storefront.order.events import OrderDelivered, OrderShipped
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


def _send(user_id: str, order_id: str, subject: str, body: str) -> bool:
    profile = get_profiles().get_profile(user_id)
    if profile is None or not profile.email:
        logger.warning("No email on file, skipping order notification", order_id=order_id, user_id=user_id)
        return False

    try:
        email = OrderEmail(order_id=order_id, to=profile.email, subject=subject, body=body)
        receipt = get_email_channel().deliver(email)
    except Exception as e:
        logger.error("Order notification failed", order_id=order_id, error=str(e))
        return False

    if not receipt.delivered:
        logger.error("Order notification failed", order_id=order_id, error=receipt.error)
        return False

    logger.info("Order notification sent", order_id=order_id, message_id=receipt.message_id)
    return True


@storefront.event_handler(part_of=Order)
class OrderNotificationHandler:
    """Emails the customer when their order ships or arrives."""

    @handle(OrderShipped)
    def on_order_shipped(self, event: OrderShipped) -> None:
        order_id = str(event.order_id)
        body = f"Seu pedido #{order_id[:8]} foi enviado."
        if event.tracking_code:
            body += f" Código de rastreio: {event.tracking_code}."
        _send(str(event.user_id), order_id, "Seu pedido foi enviado!", body)

    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered) -> None:
        order_id = str(event.order_id)
        _send(
            str(event.user_id),
            order_id,
            "Seu pedido foi entregue!",
            f"Seu pedido #{order_id[:8]} foi entregue. Obrigado pela compra!",
        )
