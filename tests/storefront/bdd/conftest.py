"""Shared BDD fixtures and step definitions for the storefront."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when

from storefront.order.fulfillment import CancelOrder, DeliverOrder, ShipOrder
from storefront.order.order import Order
from storefront.stock.ledger import increment
from storefront.stock.stock import StockLedgerEntry, variant_key


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("10 units of the shirt and 5 caps are in stock")
def _stock():
    increment("prod-shirt", "M", "BLK", 10)
    increment("prod-cap", quantity=5)


@given(parsers.cfparse('a pending Pix order with charge "{charge_id}"'), target_fixture="order")
def _pending_order(place_pix_order, charge_id):
    return place_pix_order(charge_id=charge_id)


@given("a processing order", target_fixture="order")
def _processing_order(place_pix_order):
    return place_pix_order(charge_id="bill_bdd_paid", status="processing")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the order is shipped with tracking code "{tracking_code}"'))
def _ship(order, tracking_code):
    current_domain.process(ShipOrder(order_id=order.id, tracking_code=tracking_code), asynchronous=False)


@when("the order is delivered")
def _deliver(order):
    current_domain.process(DeliverOrder(order_id=order.id), asynchronous=False)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def _order_status(order, status):
    assert current_domain.repository_for(Order).get(order.id).status == status


@then(parsers.cfparse("{count:d} caps are left in stock"))
def _caps_left(count):
    entry = current_domain.repository_for(StockLedgerEntry).find_by_key(variant_key("prod-cap"))
    assert entry.quantity == count


@then("shipping the order fails with a validation error")
def _ship_fails(order):
    with pytest.raises(ValidationError):
        current_domain.process(ShipOrder(order_id=order.id), asynchronous=False)


@then("cancelling the order fails with a validation error")
def _cancel_fails(order):
    with pytest.raises(ValidationError):
        current_domain.process(CancelOrder(order_id=order.id), asynchronous=False)
