"""Tests for the StockLedgerEntry aggregate."""

import pytest
from protean.exceptions import ValidationError

from storefront.stock.stock import StockLedgerEntry, variant_key


class TestVariantKey:
    def test_full_variant(self):
        assert variant_key("prod-1", "M", "BLK") == "prod-1:M:BLK"

    def test_product_only(self):
        assert variant_key("prod-1") == "prod-1::"


class TestStockLedgerEntry:
    def test_create_sets_key(self):
        entry = StockLedgerEntry.create("prod-1", "M", "BLK", quantity=3)
        assert entry.ledger_key == "prod-1:M:BLK"
        assert entry.quantity == 3

    def test_empty_variant_parts_are_normalized(self):
        entry = StockLedgerEntry.create("prod-1", "", "")
        assert entry.size is None
        assert entry.color_code is None
        assert entry.ledger_key == "prod-1::"

    def test_withdraw(self):
        entry = StockLedgerEntry.create("prod-1", quantity=3)
        entry.withdraw(2)
        assert entry.quantity == 1

    def test_withdraw_last_unit(self):
        entry = StockLedgerEntry.create("prod-1", quantity=1)
        entry.withdraw(1)
        assert entry.quantity == 0

    def test_withdraw_more_than_available(self):
        entry = StockLedgerEntry.create("prod-1", quantity=1)
        with pytest.raises(ValidationError):
            entry.withdraw(2)
        assert entry.quantity == 1

    def test_withdraw_must_be_positive(self):
        entry = StockLedgerEntry.create("prod-1", quantity=1)
        with pytest.raises(ValidationError):
            entry.withdraw(0)

    def test_restock(self):
        entry = StockLedgerEntry.create("prod-1")
        entry.restock(5)
        assert entry.quantity == 5

    def test_can_supply(self):
        entry = StockLedgerEntry.create("prod-1", quantity=2)
        assert entry.can_supply(2)
        assert not entry.can_supply(3)

    def test_cannot_be_created_negative(self):
        with pytest.raises(ValidationError):
            StockLedgerEntry.create("prod-1", quantity=-1)
