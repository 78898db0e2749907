"""Money helpers.

Amounts are stored as floats rounded to two places. All arithmetic goes
through Decimal, and gateways receive integer cents.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

CENTS = Decimal("0.01")


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value or 0))


def quantize(value) -> Decimal:
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def round_money(value) -> float:
    return float(quantize(value))


def to_cents(value) -> int:
    return int((quantize(value) * 100).to_integral_value(rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class OrderTotals:
    subtotal: float
    discount_amount: float
    shipping_cost: float
    total: float


def compute_totals(lines, discount_percent=0, shipping_cost=0) -> OrderTotals:
    """Compute order totals from (unit_price, quantity) pairs.

    total = sum(price * qty) - discount + shipping, where the discount is a
    percentage of the line subtotal.
    """
    subtotal = sum((quantize(price) * int(quantity) for price, quantity in lines), Decimal("0"))
    discount = quantize(subtotal * to_decimal(discount_percent) / Decimal("100"))
    shipping = quantize(shipping_cost)
    total = subtotal - discount + shipping
    return OrderTotals(
        subtotal=float(quantize(subtotal)),
        discount_amount=float(discount),
        shipping_cost=float(shipping),
        total=float(quantize(total)),
    )
