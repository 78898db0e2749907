"""Integration tests for the payment webhook endpoints."""

import json

from protean import current_domain

from storefront.billing.intent import IntentLine, OrderIntent, encode_metadata
from storefront.gateway import set_pix_gateway
from storefront.gateway.abacatepay import AbacatePayGateway
from storefront.gateway.fake_adapter import FAKE_WEBHOOK_SECRET, FAKE_WEBHOOK_SIGNATURE
from storefront.order.order import Order, OrderStatus


def _pix_paid(charge_id, order_id=None):
    return {
        "event": "billing.paid",
        "data": {"billing": {"id": charge_id, "status": "PAID", "metadata": {"orderId": order_id} if order_id else {}}},
    }


def _card_completed(session_id, metadata):
    return {
        "id": "evt_001",
        "type": "checkout.session.completed",
        "data": {"object": {"id": session_id, "payment_status": "paid", "metadata": metadata}},
    }


def _card_metadata():
    return encode_metadata(
        OrderIntent(
            user_id="user-001",
            lines=(IntentLine(product_id="prod-cap", quantity=1, price=30.0),),
            address={"street": "Rua das Flores", "city": "São Paulo", "zip_code": "01000-000"},
            payment_method="credit_card",
            shipping_rate_id="pac",
            shipping_name="PAC",
            shipping_cost=15.0,
        )
    )


def _post_card(client, body, signature=FAKE_WEBHOOK_SIGNATURE):
    return client.post(
        "/webhooks/card",
        content=json.dumps(body),
        headers={"Stripe-Signature": signature, "Content-Type": "application/json"},
    )


class TestPixWebhook:
    def test_paid_billing_advances_order(self, client, place_pix_order, stocked):
        order = place_pix_order(charge_id="bill_api_001")
        response = client.post(
            f"/webhooks/pix?secret={FAKE_WEBHOOK_SECRET}",
            json=_pix_paid("bill_api_001", str(order.id)),
        )
        assert response.status_code == 200
        assert response.json()["status"] == "advanced"
        assert current_domain.repository_for(Order).get(order.id).status == OrderStatus.PROCESSING.value

    def test_replayed_webhook_is_acknowledged(self, client, place_pix_order, stocked):
        order = place_pix_order(charge_id="bill_api_001")
        url = f"/webhooks/pix?secret={FAKE_WEBHOOK_SECRET}"
        client.post(url, json=_pix_paid("bill_api_001", str(order.id)))
        response = client.post(url, json=_pix_paid("bill_api_001", str(order.id)))
        assert response.status_code == 200
        assert response.json()["status"] == "already_confirmed"

    def test_wrong_secret_is_rejected(self, client, place_pix_order):
        order = place_pix_order(charge_id="bill_api_001")
        response = client.post("/webhooks/pix?secret=wrong", json=_pix_paid("bill_api_001", str(order.id)))
        assert response.status_code == 401
        assert current_domain.repository_for(Order).get(order.id).status == OrderStatus.PENDING.value

    def test_missing_secret_is_rejected(self, client):
        response = client.post("/webhooks/pix", json=_pix_paid("bill_api_001"))
        assert response.status_code == 401

    def test_non_ascii_secret_is_rejected(self, client):
        response = client.post("/webhooks/pix?secret=%C3%A9", json=_pix_paid("bill_api_001"))
        assert response.status_code == 401

    def test_non_ascii_secret_is_rejected_by_abacatepay(self, client):
        set_pix_gateway(AbacatePayGateway(api_key="k", webhook_secret="whsec_pix", session=object()))
        response = client.post("/webhooks/pix?secret=s%C3%A9cret", json=_pix_paid("bill_api_001"))
        assert response.status_code == 401

    def test_other_events_are_ignored(self, client):
        response = client.post(
            f"/webhooks/pix?secret={FAKE_WEBHOOK_SECRET}",
            json={"event": "billing.created", "data": {}},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "ignored"

    def test_non_json_body_is_ignored(self, client):
        response = client.post(
            f"/webhooks/pix?secret={FAKE_WEBHOOK_SECRET}",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "ignored"

    def test_unknown_order_is_acknowledged(self, client):
        response = client.post(f"/webhooks/pix?secret={FAKE_WEBHOOK_SECRET}", json=_pix_paid("bill_unknown"))
        assert response.status_code == 200
        assert response.json()["status"] == "not_found"


class TestCardWebhook:
    def test_paid_session_creates_order(self, client, stocked):
        response = _post_card(client, _card_completed("cs_test_api_001", _card_metadata()))
        assert response.status_code == 200
        assert response.json()["status"] == "created"

        order = current_domain.repository_for(Order).find_by_external_reference("cs_test_api_001")
        assert order.status == OrderStatus.PROCESSING.value
        assert order.total_amount == 45.0

    def test_duplicate_delivery(self, client, stocked):
        body = _card_completed("cs_test_api_001", _card_metadata())
        _post_card(client, body)
        response = _post_card(client, body)
        assert response.status_code == 200
        assert response.json()["status"] == "duplicate"

    def test_bad_signature_is_rejected(self, client):
        response = _post_card(client, _card_completed("cs_test_api_001", _card_metadata()), signature="forged")
        assert response.status_code == 401
        assert current_domain.repository_for(Order).find_by_external_reference("cs_test_api_001") is None

    def test_unpaid_session_is_ignored(self, client):
        body = _card_completed("cs_test_api_001", _card_metadata())
        body["data"]["object"]["payment_status"] = "unpaid"
        response = _post_card(client, body)
        assert response.json()["status"] == "ignored"

    def test_other_event_types_are_ignored(self, client):
        response = _post_card(client, {"id": "evt_2", "type": "invoice.paid", "data": {"object": {}}})
        assert response.status_code == 200
        assert response.json()["status"] == "ignored"

    def test_unusable_metadata_is_a_server_error(self, client):
        response = _post_card(client, _card_completed("cs_test_api_002", {}))
        assert response.status_code == 500
