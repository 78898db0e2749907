"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """An order was created, either awaiting Pix payment or already paid by card."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    status = String(required=True)
    payment_method = String(required=True)
    total_amount = Float(required=True)
    external_reference = String()
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaymentConfirmed:
    """A pending Pix order was confirmed as paid and moved to processing."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    external_reference = String()
    paid_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderShipped:
    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    tracking_code = String()
    shipped_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    previous_status = String(required=True)
    reason = String()
    cancelled_at = DateTime(required=True)
