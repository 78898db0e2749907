"""Stock ledger operations — conditional decrement and restock.

Entries are saved with optimistic versioning. When two callers race on
the same entry, the loser's save raises ExpectedVersionError; it reloads
the entry and re-checks availability, so the ledger never goes negative
and at most one caller gets the last unit.

Insufficient stock after a payment is reported and logged, never raised:
a paid order is not rolled back because the shelf ran out.
"""

from enum import Enum

import structlog
from protean import handle
from protean.exceptions import ExpectedVersionError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.stock.stock import StockLedgerEntry, variant_key

logger = structlog.get_logger(__name__)

MAX_ATTEMPTS = 5


class StockOutcome(Enum):
    OK = "ok"
    INSUFFICIENT = "insufficient"


def decrement(product_id, size=None, color_code=None, quantity=1) -> StockOutcome:
    """Withdraw units from the variant's ledger entry if enough are available."""
    repo = current_domain.repository_for(StockLedgerEntry)

    for attempt in range(1, MAX_ATTEMPTS + 1):
        entry = repo.find_for_variant(product_id, size, color_code)
        if entry is None:
            logger.warning(
                "No stock entry for variant",
                product_id=str(product_id),
                size=size,
                color_code=color_code,
            )
            return StockOutcome.INSUFFICIENT

        if not entry.can_supply(quantity):
            logger.warning(
                "Insufficient stock",
                product_id=str(product_id),
                size=size,
                color_code=color_code,
                available=entry.quantity,
                requested=quantity,
            )
            return StockOutcome.INSUFFICIENT

        entry.withdraw(quantity)
        try:
            repo.add(entry)
        except ExpectedVersionError:
            logger.info(
                "Stock entry changed concurrently, retrying",
                ledger_key=entry.ledger_key,
                attempt=attempt,
            )
            continue

        return StockOutcome.OK

    logger.error(
        "Stock decrement abandoned after repeated conflicts",
        product_id=str(product_id),
        size=size,
        color_code=color_code,
    )
    return StockOutcome.INSUFFICIENT


def increment(product_id, size=None, color_code=None, quantity=1) -> int:
    """Add units to a variant, creating its ledger entry on first restock.

    Returns the resulting quantity.
    """
    repo = current_domain.repository_for(StockLedgerEntry)

    for attempt in range(1, MAX_ATTEMPTS + 1):
        entry = repo.find_by_key(variant_key(product_id, size, color_code))
        if entry is None:
            entry = StockLedgerEntry.create(product_id, size, color_code)
        entry.restock(quantity)
        try:
            repo.add(entry)
        except ExpectedVersionError:
            logger.info("Stock entry changed concurrently, retrying", ledger_key=entry.ledger_key, attempt=attempt)
            continue
        return entry.quantity

    raise ExpectedVersionError(f"Could not restock {product_id} after {MAX_ATTEMPTS} attempts")


def decrement_for_order(order) -> dict[str, StockOutcome]:
    """Withdraw stock once for every line of a paid order.

    Returns the outcome per order item id.
    """
    outcomes = {}
    for item in order.items:
        outcome = decrement(
            item.product_id,
            size=item.selected_size,
            color_code=item.color_code,
            quantity=item.quantity,
        )
        if outcome is StockOutcome.INSUFFICIENT:
            logger.warning(
                "Paid order line could not be covered by stock",
                order_id=str(order.id),
                product_id=str(item.product_id),
                quantity=item.quantity,
            )
        outcomes[str(item.id)] = outcome
    return outcomes


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
@storefront.command(part_of="StockLedgerEntry")
class RestockVariant:
    """Add units to a product variant's stock."""

    product_id = Identifier(required=True)
    size = String(max_length=50)
    color_code = String(max_length=50)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="StockLedgerEntry")
class WithdrawVariant:
    """Withdraw units from a product variant's stock if available."""

    product_id = Identifier(required=True)
    size = String(max_length=50)
    color_code = String(max_length=50)
    quantity = Integer(required=True, min_value=1)


@storefront.command_handler(part_of=StockLedgerEntry)
class StockLedgerHandler:
    @handle(RestockVariant)
    def restock(self, command):
        return increment(command.product_id, command.size, command.color_code, command.quantity)

    @handle(WithdrawVariant)
    def withdraw(self, command):
        return decrement(command.product_id, command.size, command.color_code, command.quantity).value
