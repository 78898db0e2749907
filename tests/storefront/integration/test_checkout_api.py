"""Integration tests for the checkout endpoint."""

import asyncio

from protean import current_domain

from storefront.order.order import Order, OrderStatus


def _event_loop_running():
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


def _checkout(client, **overrides):
    body = {
        "user_id": "user-001",
        "address_id": "addr-001",
        "shipping_rate_id": "pac",
        "payment_method": "pix",
    }
    body.update(overrides)
    return client.post("/checkout", json=body)


class TestCheckoutEndpoint:
    def test_pix_checkout(self, client, filled_cart, pix_gateway):
        response = _checkout(client)
        assert response.status_code == 200
        data = response.json()
        assert data["payment_method"] == "pix"
        assert data["redirect_url"].startswith("https://pay.example.test/")
        assert data["shipping_rate_id"] == "pac"
        assert data["shipping_cost"] == 15.0

        order = current_domain.repository_for(Order).get(data["order_id"])
        assert order.status == OrderStatus.PENDING.value
        assert order.external_reference == data["external_reference"]

    def test_card_checkout(self, client, filled_cart, card_gateway):
        response = _checkout(client, payment_method="credit_card")
        assert response.status_code == 200
        data = response.json()
        assert data["redirect_url"].startswith("https://checkout.example.test/")
        assert data["order_id"] is None

    def test_gateway_is_called_off_the_event_loop(self, client, filled_cart, pix_gateway, monkeypatch):
        create_charge = pix_gateway.create_charge
        loop_seen = []

        def watched_create_charge(**kwargs):
            loop_seen.append(_event_loop_running())
            return create_charge(**kwargs)

        monkeypatch.setattr(pix_gateway, "create_charge", watched_create_charge)
        assert _checkout(client).status_code == 200
        assert loop_seen == [False]

    def test_validation_errors(self, client, filled_cart):
        response = _checkout(client, address_id=None, payment_method=None)
        assert response.status_code == 400

    def test_gateway_failure(self, client, filled_cart, pix_gateway):
        pix_gateway.configure(should_succeed=False, failure_reason="Gateway unavailable")
        response = _checkout(client)
        assert response.status_code == 502
        assert response.json()["detail"] == "Gateway unavailable"
        assert current_domain.repository_for(Order)._dao.query.all().items == []
