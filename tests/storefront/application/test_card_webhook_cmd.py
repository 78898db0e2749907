"""Application tests for materializing card orders from paid sessions."""

import json

import pytest
from protean import current_domain

from storefront.billing.card import CardBillingAdapter
from storefront.billing.intent import IntentLine, OrderIntent, encode_metadata
from storefront.cart.management import AddCartLine, cart_lines
from storefront.errors import WebhookProcessingError
from storefront.money import to_cents
from storefront.order.order import Order, OrderStatus
from storefront.stock.stock import StockLedgerEntry, variant_key
from storefront.webhook.card import CardOutcome, ConfirmCardPayment


def _intent():
    return OrderIntent(
        user_id="user-001",
        lines=(
            IntentLine(
                product_id="prod-shirt",
                quantity=2,
                price=50.0,
                selected_size="M",
                color_code="BLK",
                color_name="Preto",
            ),
            IntentLine(product_id="prod-cap", quantity=1, price=30.0),
        ),
        address={"street": "Rua das Flores", "number": "100", "city": "São Paulo", "zip_code": "01000-000"},
        payment_method="credit_card",
        shipping_rate_id="pac",
        shipping_name="PAC",
        shipping_cost=15.0,
        delivery_time="7 dias úteis",
        discount_percent=10.0,
    )


def _confirm(session_id, metadata):
    return current_domain.process(
        ConfirmCardPayment(session_id=session_id, session_metadata=json.dumps(metadata)),
        asynchronous=False,
    )


def _orders():
    return current_domain.repository_for(Order)._dao.query.all().items


def _stock(product_id, size=None, color_code=None):
    entry = current_domain.repository_for(StockLedgerEntry).find_by_key(variant_key(product_id, size, color_code))
    return entry.quantity


class TestCardOrderCreation:
    def test_creates_processing_order(self, stocked):
        assert _confirm("cs_test_001", encode_metadata(_intent())) == CardOutcome.CREATED.value

        order = current_domain.repository_for(Order).find_by_external_reference("cs_test_001")
        assert order.status == OrderStatus.PROCESSING.value
        assert order.payment_method == "credit_card"
        assert order.paid_at is not None
        assert order.total_amount == 132.0
        assert order.shipping_service_id == "pac"
        assert order.shipping_address.city == "São Paulo"

    def test_copies_line_variants(self, stocked):
        _confirm("cs_test_001", encode_metadata(_intent()))
        order = _orders()[0]
        shirt = next(item for item in order.items if item.product_id == "prod-shirt")
        assert shirt.selected_size == "M"
        assert shirt.selected_color == {"code": "BLK", "name": "Preto"}

    def test_withdraws_stock(self, stocked):
        _confirm("cs_test_001", encode_metadata(_intent()))
        assert _stock("prod-shirt", "M", "BLK") == 8
        assert _stock("prod-cap") == 4

    def test_purges_purchased_cart_lines(self, filled_cart, stocked):
        current_domain.process(
            AddCartLine(user_id="user-001", product_id="prod-sock", quantity=1),
            asynchronous=False,
        )
        _confirm("cs_test_001", encode_metadata(_intent()))
        assert [line["product_id"] for line in cart_lines("user-001")] == ["prod-sock"]


class TestCardChargeAgreesWithOrder:
    def test_charged_amount_equals_stored_total(self, card_gateway, lookups, stocked):
        result = CardBillingAdapter().create_billing(_intent())
        call = card_gateway.calls[0]
        charged = sum(p.unit_price_cents * p.quantity for p in call["products"]) - call["discount_cents"]

        _confirm(result.external_reference, call["metadata"])

        order = current_domain.repository_for(Order).find_by_external_reference(result.external_reference)
        assert charged == to_cents(order.total_amount)


class TestCardOrderIdempotency:
    def test_duplicate_session_is_acknowledged(self, stocked):
        metadata = encode_metadata(_intent())
        assert _confirm("cs_test_001", metadata) == CardOutcome.CREATED.value
        assert _confirm("cs_test_001", metadata) == CardOutcome.DUPLICATE.value
        assert len(_orders()) == 1
        assert _stock("prod-cap") == 4


class TestCardOrderFallback:
    def test_rebuilds_from_billing_reference(self, card_gateway, lookups, stocked):
        result = CardBillingAdapter().create_billing(_intent())

        outcome = _confirm(result.external_reference, {"user_id": "user-001"})

        assert outcome == CardOutcome.CREATED.value
        order = current_domain.repository_for(Order).find_by_external_reference(result.external_reference)
        assert len(order.items) == 2

    def test_missing_metadata_without_reference(self):
        with pytest.raises(WebhookProcessingError):
            _confirm("cs_test_unknown", {})
        assert _orders() == []

    def test_corrupt_items_are_rejected(self):
        with pytest.raises(WebhookProcessingError):
            _confirm("cs_test_002", {"user_id": "user-001", "orderItems": "[{"})
        assert _orders() == []
