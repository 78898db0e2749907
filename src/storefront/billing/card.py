"""Card billing adapter.

No order exists yet when the shopper is sent to the hosted checkout. The
full order intent rides along as session metadata (and in a local
BillingReference); the card webhook creates the order once the gateway
reports the session as paid.
"""

import structlog
from protean.utils.globals import current_domain

from storefront import settings
from storefront.billing.intent import OrderIntent, encode_metadata, price_intent
from storefront.billing.port import BillingAdapter, BillingResult
from storefront.billing.reference import BillingReference
from storefront.gateway import get_card_gateway
from storefront.gateway.port import ChargeProduct
from storefront.lookups import get_catalog
from storefront.money import compute_totals, to_cents

logger = structlog.get_logger(__name__)


class CardBillingAdapter(BillingAdapter):
    def __init__(self, gateway=None, catalog=None) -> None:
        self.gateway = gateway or get_card_gateway()
        self.catalog = catalog or get_catalog()

    def create_billing(self, intent: OrderIntent) -> BillingResult:
        intent = price_intent(intent, self.catalog)

        products = [
            ChargeProduct(
                external_id=str(line.product_id),
                name=line.name or str(line.product_id),
                quantity=line.quantity,
                unit_price_cents=to_cents(line.price),
            )
            for line in intent.lines
        ]
        if intent.shipping_cost:
            products.append(
                ChargeProduct(
                    external_id="shipping",
                    name=intent.shipping_name or "Frete",
                    quantity=1,
                    unit_price_cents=to_cents(intent.shipping_cost),
                )
            )

        totals = compute_totals(
            [(line.price, line.quantity) for line in intent.lines],
            discount_percent=intent.discount_percent,
            shipping_cost=intent.shipping_cost,
        )

        base_url = settings.app_base_url()
        session = self.gateway.create_checkout_session(
            products=products,
            customer_email=intent.customer.email if intent.customer else None,
            metadata=encode_metadata(intent),
            discount_cents=to_cents(totals.discount_amount),
            success_url=f"{base_url}/payment-status?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{base_url}/checkout",
        )

        current_domain.repository_for(BillingReference).add(
            BillingReference.record(
                gateway=self.gateway.name,
                external_reference=session.session_id,
                user_id=intent.user_id,
                metadata=encode_metadata(intent, full=True),
            )
        )

        logger.info("Card checkout session created", user_id=str(intent.user_id), session_id=session.session_id)
        return BillingResult(redirect_url=session.url, external_reference=session.session_id)
