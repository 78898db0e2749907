"""Order aggregate (CQRS) — the durable record of a purchase.

An order is created either before payment (Pix: pending, waiting for the
instant-payment confirmation) or after payment (card: created by the
gateway webhook directly in processing). Prices, discount, shipping and the
delivery address are copied in at creation time and never recomputed.

State Machine:
    PENDING → PROCESSING → SHIPPED → DELIVERED
    CANCELLED (from PENDING or PROCESSING)
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from storefront.domain import storefront
from storefront.money import compute_totals, quantize, to_decimal
from storefront.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPaymentConfirmed,
    OrderPlaced,
    OrderShipped,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    PIX = "pix"
    CREDIT_CARD = "credit_card"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# Prefix for the reference a Pix order carries until the gateway issues a charge id
PLACEHOLDER_REFERENCE_PREFIX = "pending-"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """The delivery address as it was when the order was placed.

    Later edits to the customer's address book do not touch existing orders.
    """

    street = String(required=True, max_length=255)
    number = String(max_length=20)
    complement = String(max_length=255)
    neighborhood = String(max_length=100)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    zip_code = String(required=True, max_length=20)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A purchased line: product, variant selection, quantity and price paid."""

    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)
    selected_size = String(max_length=50)
    color_code = String(max_length=50)
    color_name = String(max_length=100)

    @property
    def line_key(self) -> tuple[str, str, str]:
        return (str(self.product_id), self.selected_size or "", self.color_code or "")

    @property
    def selected_color(self) -> dict | None:
        if not self.color_code:
            return None
        return {"code": self.color_code, "name": self.color_name}


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    user_id = Identifier(required=True)
    items = HasMany(OrderItem)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_method = String(choices=PaymentMethod, required=True)
    subtotal = Float(default=0.0)
    discount_percent = Float(default=0.0, min_value=0.0, max_value=100.0)
    discount_amount = Float(default=0.0)
    shipping_cost = Float(default=0.0)
    total_amount = Float(required=True)
    shipping_address = ValueObject(ShippingAddress)
    shipping_service_id = String(max_length=100)
    shipping_service_name = String(max_length=255)
    delivery_time = String(max_length=100)
    external_reference = String(max_length=255)
    tracking_code = String(max_length=255)
    cancellation_reason = String(max_length=500)
    paid_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_match_its_components(self):
        expected = quantize(
            to_decimal(self.subtotal) - to_decimal(self.discount_amount) + to_decimal(self.shipping_cost)
        )
        if self.total_amount is not None and quantize(self.total_amount) != expected:
            raise ValidationError({"total_amount": ["Total must equal subtotal minus discount plus shipping"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        user_id,
        lines,
        shipping_address,
        payment_method,
        shipping=None,
        discount_percent=0.0,
        status=OrderStatus.PENDING,
        external_reference=None,
    ):
        """Create an order from priced lines.

        Args:
            user_id: The purchasing user.
            lines: List of dicts with product_id, quantity, price and optional
                   selected_size, color_code, color_name.
            shipping_address: Dict with street, number, complement,
                              neighborhood, city, state, zip_code.
            payment_method: PaymentMethod or its value.
            shipping: Dict with id, name, cost, delivery_time.
            discount_percent: Percentage discount over the line subtotal.
            status: PENDING for Pix orders, PROCESSING for card orders.
            external_reference: Gateway charge or session id.
        """
        if not lines:
            raise ValidationError({"items": ["An order needs at least one item"]})

        shipping = shipping or {}
        status = OrderStatus(status)
        if status not in (OrderStatus.PENDING, OrderStatus.PROCESSING):
            raise ValidationError({"status": [f"Orders cannot be created as {status.value}"]})

        totals = compute_totals(
            [(line["price"], line["quantity"]) for line in lines],
            discount_percent=discount_percent,
            shipping_cost=shipping.get("cost", 0.0),
        )
        now = datetime.now(UTC)

        order = cls(
            user_id=user_id,
            status=status.value,
            payment_method=PaymentMethod(payment_method).value,
            items=[
                OrderItem(
                    product_id=line["product_id"],
                    quantity=line["quantity"],
                    price=float(quantize(line["price"])),
                    selected_size=line.get("selected_size"),
                    color_code=line.get("color_code"),
                    color_name=line.get("color_name"),
                )
                for line in lines
            ],
            subtotal=totals.subtotal,
            discount_percent=float(discount_percent or 0.0),
            discount_amount=totals.discount_amount,
            shipping_cost=totals.shipping_cost,
            total_amount=totals.total,
            shipping_address=ShippingAddress(**shipping_address),
            shipping_service_id=shipping.get("id"),
            shipping_service_name=shipping.get("name"),
            delivery_time=shipping.get("delivery_time"),
            external_reference=external_reference,
            paid_at=now if status == OrderStatus.PROCESSING else None,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                status=order.status,
                payment_method=order.payment_method,
                total_amount=order.total_amount,
                external_reference=external_reference,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    @property
    def awaiting_payment(self) -> bool:
        return OrderStatus(self.status) == OrderStatus.PENDING

    @property
    def has_placeholder_reference(self) -> bool:
        return bool(self.external_reference) and self.external_reference.startswith(PLACEHOLDER_REFERENCE_PREFIX)

    @property
    def line_keys(self) -> list[tuple[str, str, str]]:
        return [item.line_key for item in self.items]

    # -------------------------------------------------------------------
    # Gateway reference
    # -------------------------------------------------------------------
    def attach_external_reference(self, external_reference):
        """Record the gateway charge id issued for a pending order."""
        if not self.awaiting_payment:
            raise ValidationError({"external_reference": ["Only pending orders can be re-referenced"]})
        self.external_reference = external_reference
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def confirm_payment(self):
        """Move a pending order to processing after a confirmed payment."""
        self._assert_can_transition(OrderStatus.PROCESSING)

        now = datetime.now(UTC)
        self.status = OrderStatus.PROCESSING.value
        self.paid_at = now
        self.updated_at = now

        self.raise_(
            OrderPaymentConfirmed(
                order_id=str(self.id),
                user_id=str(self.user_id),
                external_reference=self.external_reference,
                paid_at=now,
            )
        )

    def ship(self, tracking_code=None):
        self._assert_can_transition(OrderStatus.SHIPPED)

        now = datetime.now(UTC)
        self.status = OrderStatus.SHIPPED.value
        if tracking_code:
            self.tracking_code = tracking_code
        self.updated_at = now

        self.raise_(
            OrderShipped(
                order_id=str(self.id),
                user_id=str(self.user_id),
                tracking_code=self.tracking_code,
                shipped_at=now,
            )
        )

    def deliver(self):
        self._assert_can_transition(OrderStatus.DELIVERED)

        now = datetime.now(UTC)
        self.status = OrderStatus.DELIVERED.value
        self.updated_at = now

        self.raise_(
            OrderDelivered(
                order_id=str(self.id),
                user_id=str(self.user_id),
                delivered_at=now,
            )
        )

    def cancel(self, reason=None):
        self._assert_can_transition(OrderStatus.CANCELLED)

        now = datetime.now(UTC)
        previous_status = self.status
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                user_id=str(self.user_id),
                previous_status=previous_status,
                reason=reason,
                cancelled_at=now,
            )
        )
