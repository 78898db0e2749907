"""Application tests for shipping, delivering and cancelling orders."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.order.fulfillment import CancelOrder, DeliverOrder, ShipOrder
from storefront.order.order import Order, OrderStatus


def _get(order):
    return current_domain.repository_for(Order).get(order.id)


class TestFulfillmentCommands:
    def test_ship(self, place_pix_order):
        order = place_pix_order(status="processing")
        current_domain.process(ShipOrder(order_id=order.id, tracking_code="BR123"), asynchronous=False)
        stored = _get(order)
        assert stored.status == OrderStatus.SHIPPED.value
        assert stored.tracking_code == "BR123"

    def test_deliver(self, place_pix_order):
        order = place_pix_order(status="processing")
        current_domain.process(ShipOrder(order_id=order.id), asynchronous=False)
        current_domain.process(DeliverOrder(order_id=order.id), asynchronous=False)
        assert _get(order).status == OrderStatus.DELIVERED.value

    def test_cancel(self, place_pix_order):
        order = place_pix_order()
        current_domain.process(CancelOrder(order_id=order.id, reason="Customer request"), asynchronous=False)
        stored = _get(order)
        assert stored.status == OrderStatus.CANCELLED.value
        assert stored.cancellation_reason == "Customer request"

    def test_cannot_ship_pending(self, place_pix_order):
        order = place_pix_order()
        with pytest.raises(ValidationError):
            current_domain.process(ShipOrder(order_id=order.id), asynchronous=False)
        assert _get(order).status == OrderStatus.PENDING.value

    def test_unknown_order(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(ShipOrder(order_id="missing"), asynchronous=False)
