"""Application tests for shipped and delivered notifications."""

from protean import current_domain

from storefront.order.fulfillment import DeliverOrder, ShipOrder
from storefront.order.order import Order, OrderStatus


class TestOrderNotifications:
    def test_shipped_email(self, place_pix_order, lookups, email_channel):
        order = place_pix_order(status="processing")
        current_domain.process(ShipOrder(order_id=order.id, tracking_code="BR123"), asynchronous=False)

        emails = email_channel.emails_for(order.id)
        assert len(emails) == 1
        assert emails[0].to == "maria@example.com"
        assert emails[0].subject == "Seu pedido foi enviado!"
        assert "BR123" in emails[0].body

    def test_delivered_email(self, place_pix_order, lookups, email_channel):
        order = place_pix_order(status="processing")
        current_domain.process(ShipOrder(order_id=order.id), asynchronous=False)
        current_domain.process(DeliverOrder(order_id=order.id), asynchronous=False)

        subjects = [email.subject for email in email_channel.emails_for(order.id)]
        assert subjects == ["Seu pedido foi enviado!", "Seu pedido foi entregue!"]

    def test_no_profile_no_email(self, place_pix_order, email_channel):
        order = place_pix_order(status="processing")
        current_domain.process(ShipOrder(order_id=order.id), asynchronous=False)
        assert email_channel.outbox == []

    def test_failed_email_does_not_block_shipping(self, place_pix_order, lookups, email_channel):
        email_channel.configure(should_succeed=False)
        order = place_pix_order(status="processing")
        current_domain.process(ShipOrder(order_id=order.id), asynchronous=False)

        assert email_channel.outbox == []
        assert current_domain.repository_for(Order).get(order.id).status == OrderStatus.SHIPPED.value

    def test_broken_transport_does_not_block_delivery(self, place_pix_order, lookups, email_channel, monkeypatch):
        def _explode(email):
            raise ConnectionError("SMTP relay down")

        order = place_pix_order(status="processing")
        current_domain.process(ShipOrder(order_id=order.id), asynchronous=False)
        monkeypatch.setattr(email_channel, "deliver", _explode)
        current_domain.process(DeliverOrder(order_id=order.id), asynchronous=False)

        assert current_domain.repository_for(Order).get(order.id).status == OrderStatus.DELIVERED.value
