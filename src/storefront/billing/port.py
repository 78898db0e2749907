"""Billing adapter contract shared by the Pix and card paths."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from storefront.billing.intent import OrderIntent


@dataclass(frozen=True)
class BillingResult:
    redirect_url: str
    external_reference: str
    order_id: str | None = None


class BillingAdapter(ABC):
    @abstractmethod
    def create_billing(self, intent: OrderIntent) -> BillingResult:
        """Register the purchase with a gateway and return where to send the shopper."""
        ...
