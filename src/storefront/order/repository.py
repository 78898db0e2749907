"""Repository for the Order aggregate."""

from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.order.order import PLACEHOLDER_REFERENCE_PREFIX, Order, OrderStatus, PaymentMethod


@storefront.repository(part_of=Order)
class OrderRepository:
    def find_by_external_reference(self, external_reference: str) -> Order | None:
        """Return the order carrying a gateway charge or session id, if any."""
        if not external_reference:
            return None
        orders = self._dao.query.filter(external_reference=external_reference).all().items
        return orders[0] if orders else None

    def find(self, order_id: str) -> Order | None:
        try:
            return self.get(order_id)
        except ObjectNotFoundError:
            return None

    def pending_pix_orders(self) -> list[Order]:
        """Every pending Pix order that already holds a gateway charge id, oldest first."""
        orders = (
            self._dao.query.filter(
                status=OrderStatus.PENDING.value,
                payment_method=PaymentMethod.PIX.value,
            )
            .exclude(external_reference__startswith=PLACEHOLDER_REFERENCE_PREFIX)
            .order_by("created_at")
            .limit(None)
            .all()
            .items
        )
        return [order for order in orders if order.external_reference and not order.has_placeholder_reference]

    def discard(self, order: Order) -> None:
        """Delete an order together with its items."""
        for item in list(order.items):
            order.remove_items(item)
        self.add(order)
        self._dao.delete(order)
