"""Pix billing adapter.

The order is created locally (pending) before the gateway is contacted, so
the charge metadata can carry the order id. If the gateway refuses the
billing, or anything else fails before the charge exists, the just-created
order and its items are deleted again before the error propagates.
"""

from uuid import uuid4

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront import settings
from storefront.billing.intent import OrderIntent, encode_metadata, price_intent
from storefront.billing.port import BillingAdapter, BillingResult
from storefront.billing.reference import BillingReference
from storefront.gateway import get_pix_gateway
from storefront.gateway.port import ChargeCustomer, ChargeProduct
from storefront.lookups import get_catalog
from storefront.money import to_cents
from storefront.order.order import PLACEHOLDER_REFERENCE_PREFIX, Order, OrderStatus, PaymentMethod

logger = structlog.get_logger(__name__)


def _charge_products(order: Order, intent: OrderIntent) -> list[ChargeProduct]:
    names = {str(line.product_id): line.name for line in intent.lines}
    products = [
        ChargeProduct(
            external_id=str(item.product_id),
            name=names.get(str(item.product_id)) or str(item.product_id),
            quantity=item.quantity,
            unit_price_cents=to_cents(item.price),
            description=" / ".join(part for part in (item.selected_size, item.color_name) if part) or None,
        )
        for item in order.items
    ]
    if order.discount_amount:
        products.append(
            ChargeProduct(
                external_id="discount",
                name=f"Desconto ({order.discount_percent:g}%)",
                quantity=1,
                unit_price_cents=-to_cents(order.discount_amount),
            )
        )
    if order.shipping_cost:
        products.append(
            ChargeProduct(
                external_id="shipping",
                name=order.shipping_service_name or "Frete",
                quantity=1,
                unit_price_cents=to_cents(order.shipping_cost),
            )
        )
    return products


class PixBillingAdapter(BillingAdapter):
    def __init__(self, gateway=None, catalog=None) -> None:
        self.gateway = gateway or get_pix_gateway()
        self.catalog = catalog or get_catalog()

    def create_billing(self, intent: OrderIntent) -> BillingResult:
        if intent.customer is None:
            raise ValidationError({"customer": ["Pix billing needs the customer's name, tax id and phone"]})
        intent = price_intent(intent, self.catalog)
        repo = current_domain.repository_for(Order)

        order = Order.create(
            user_id=intent.user_id,
            lines=intent.order_lines(),
            shipping_address=intent.address,
            payment_method=PaymentMethod.PIX,
            shipping=intent.shipping,
            discount_percent=intent.discount_percent,
            status=OrderStatus.PENDING,
            external_reference=f"{PLACEHOLDER_REFERENCE_PREFIX}{uuid4().hex}",
        )
        repo.add(order)

        base_url = settings.app_base_url()
        customer = intent.customer
        try:
            charge = self.gateway.create_charge(
                products=_charge_products(order, intent),
                customer=ChargeCustomer(
                    name=customer.name,
                    email=customer.email,
                    phone=customer.phone,
                    tax_id=customer.tax_id,
                ),
                metadata={"orderId": str(order.id), "userId": str(intent.user_id)},
                return_url=f"{base_url}/checkout",
                completion_url=f"{base_url}/payment-status?order_id={order.id}",
            )
        except Exception as exc:
            logger.error(
                "Pix billing failed, discarding pending order",
                order_id=str(order.id),
                gateway=self.gateway.name,
                error=str(exc),
            )
            repo.discard(order)
            raise

        order.attach_external_reference(charge.charge_id)
        repo.add(order)

        current_domain.repository_for(BillingReference).add(
            BillingReference.record(
                gateway=self.gateway.name,
                external_reference=charge.charge_id,
                user_id=intent.user_id,
                metadata=encode_metadata(intent, full=True),
                order_id=str(order.id),
            )
        )

        logger.info("Pix billing created", order_id=str(order.id), charge_id=charge.charge_id)
        return BillingResult(redirect_url=charge.url, external_reference=charge.charge_id, order_id=str(order.id))
