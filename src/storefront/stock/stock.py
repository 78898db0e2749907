"""StockLedgerEntry aggregate — available units for one product variant.

An entry is keyed by (product, size, color code). Products sold without
variants use the product-only key, with empty size and color. Quantities
never go below zero: withdrawals that would underflow are refused.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


def variant_key(product_id, size=None, color_code=None) -> str:
    return f"{product_id}:{size or ''}:{color_code or ''}"


@storefront.aggregate
class StockLedgerEntry:
    product_id = Identifier(required=True)
    size = String(max_length=50)
    color_code = String(max_length=50)
    ledger_key = String(required=True, max_length=255, unique=True)
    quantity = Integer(default=0)
    updated_at = DateTime()

    @invariant.post
    def quantity_cannot_be_negative(self):
        if self.quantity is not None and self.quantity < 0:
            raise ValidationError({"quantity": ["Stock quantity cannot be negative"]})

    @classmethod
    def create(cls, product_id, size=None, color_code=None, quantity=0):
        return cls(
            product_id=product_id,
            size=size or None,
            color_code=color_code or None,
            ledger_key=variant_key(product_id, size, color_code),
            quantity=quantity,
            updated_at=datetime.now(UTC),
        )

    def can_supply(self, quantity: int) -> bool:
        return self.quantity >= quantity

    def withdraw(self, quantity: int):
        if quantity < 1:
            raise ValidationError({"quantity": ["Withdrawal quantity must be positive"]})
        if not self.can_supply(quantity):
            raise ValidationError(
                {"quantity": [f"Insufficient stock: {self.quantity} available, {quantity} requested"]}
            )
        self.quantity -= quantity
        self.updated_at = datetime.now(UTC)

    def restock(self, quantity: int):
        if quantity < 1:
            raise ValidationError({"quantity": ["Restock quantity must be positive"]})
        self.quantity += quantity
        self.updated_at = datetime.now(UTC)


@storefront.repository(part_of=StockLedgerEntry)
class StockLedgerRepository:
    def find_by_key(self, key: str) -> StockLedgerEntry | None:
        entries = self._dao.query.filter(ledger_key=key).all().items
        return entries[0] if entries else None

    def find_for_variant(self, product_id, size=None, color_code=None) -> StockLedgerEntry | None:
        """Resolve the entry for a variant, falling back to the product-only entry."""
        entry = self.find_by_key(variant_key(product_id, size, color_code))
        if entry is None and (size or color_code):
            entry = self.find_by_key(variant_key(product_id))
        return entry
