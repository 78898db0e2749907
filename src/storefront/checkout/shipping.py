"""Shipping rate resolution for a cart subtotal.

A rate is eligible when it is active and the subtotal reaches its minimum
order value. With no rate chosen, the cheapest eligible rate is picked;
a chosen rate the subtotal no longer qualifies for is dropped and the
shipping cost falls back to zero.
"""

from dataclasses import dataclass

from storefront.lookups.ports import ShippingRate
from storefront.money import quantize, round_money


@dataclass(frozen=True)
class ShippingSelection:
    rate: ShippingRate | None
    cost: float
    deselected: bool = False

    @property
    def resolved(self) -> bool:
        return self.rate is not None


def eligible_rates(rates, subtotal) -> list[ShippingRate]:
    return [rate for rate in rates if rate.is_active and quantize(subtotal) >= quantize(rate.min_order_value)]


def resolve_shipping(rates, subtotal, chosen_rate_id=None) -> ShippingSelection:
    eligible = eligible_rates(rates, subtotal)

    if chosen_rate_id:
        chosen = next((rate for rate in eligible if rate.rate_id == chosen_rate_id), None)
        if chosen is None:
            return ShippingSelection(rate=None, cost=0.0, deselected=True)
        return ShippingSelection(rate=chosen, cost=round_money(chosen.price))

    if not eligible:
        return ShippingSelection(rate=None, cost=0.0)

    cheapest = min(eligible, key=lambda rate: quantize(rate.price))
    return ShippingSelection(rate=cheapest, cost=round_money(cheapest.price))
