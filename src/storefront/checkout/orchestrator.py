"""Checkout orchestrator — from selected cart lines to a gateway redirect.

Flow:
    1. Validate cart selection, address, shipping rate, payment method and
       customer profile. Nothing is written and no gateway is called until
       every check passes.
    2. Purge unselected lines from the persisted cart.
    3. Hand the order intent to the billing adapter for the payment method.
    4. Pix only: the order now exists, so the purchased lines are removed.
       Card purchases are removed by the card webhook when it creates the
       order.

The orchestrator never waits for payment; it returns where to send the
shopper next.

Checkout runs outside a unit of work: the Pix order has to be committed
before the gateway call so the charge can reference it.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.billing.card import CardBillingAdapter
from storefront.billing.intent import CustomerDetails, IntentLine, OrderIntent
from storefront.billing.pix import PixBillingAdapter
from storefront.billing.port import BillingAdapter
from storefront.cart.cart import ShoppingCart
from storefront.cart.management import purge_purchased_lines, purge_unselected_lines
from storefront.checkout.shipping import ShippingSelection, resolve_shipping
from storefront.checkout.validation import is_valid_phone, is_valid_tax_id
from storefront.lookups import get_address_book, get_catalog, get_profiles, get_shipping_rates
from storefront.money import compute_totals
from storefront.order.order import PaymentMethod

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CheckoutRequest:
    user_id: str
    address_id: str | None = None
    shipping_rate_id: str | None = None
    payment_method: str | None = None


@dataclass(frozen=True)
class CheckoutResult:
    redirect_url: str
    payment_method: str
    external_reference: str
    order_id: str | None
    shipping: ShippingSelection


class CheckoutOrchestrator:
    def __init__(
        self,
        adapters: dict[str, BillingAdapter] | None = None,
        catalog=None,
        address_book=None,
        shipping_rates=None,
        profiles=None,
    ) -> None:
        self.adapters = dict(adapters or {})
        self.catalog = catalog or get_catalog()
        self.address_book = address_book or get_address_book()
        self.shipping_rates = shipping_rates or get_shipping_rates()
        self.profiles = profiles or get_profiles()

    def _adapter_for(self, payment_method: str) -> BillingAdapter:
        if payment_method not in self.adapters:
            if payment_method == PaymentMethod.PIX.value:
                self.adapters[payment_method] = PixBillingAdapter(catalog=self.catalog)
            else:
                self.adapters[payment_method] = CardBillingAdapter(catalog=self.catalog)
        return self.adapters[payment_method]

    # -------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------
    def prepare(self, request: CheckoutRequest) -> tuple[OrderIntent, ShippingSelection]:
        """Validate a checkout request and build its order intent.

        Raises ValidationError listing every problem found. Has no side effects.
        """
        errors: dict[str, list[str]] = {}

        cart = current_domain.repository_for(ShoppingCart).for_user(request.user_id)
        selected = cart.selected_lines if cart else []
        lines = []
        priced = []
        for cart_line in selected:
            product = self.catalog.get_product(cart_line.product_id)
            if product is None:
                errors.setdefault("items", []).append(f"Product {cart_line.product_id} is no longer available")
                continue
            lines.append(
                IntentLine(
                    product_id=str(cart_line.product_id),
                    quantity=cart_line.quantity,
                    price=product.price,
                    selected_size=cart_line.size,
                    color_code=cart_line.color_code,
                    color_name=cart_line.color_name,
                    name=product.name,
                )
            )
            priced.append((product.price, cart_line.quantity))
        if not selected:
            errors["cart"] = ["Select at least one item to check out"]

        subtotal = compute_totals(priced).subtotal

        address = None
        if not request.address_id:
            errors["address"] = ["Select a delivery address"]
        else:
            address = self.address_book.get_address(request.user_id, request.address_id)
            if address is None:
                errors["address"] = ["Delivery address not found"]

        shipping = resolve_shipping(self.shipping_rates.list_rates(), subtotal, request.shipping_rate_id)
        if not shipping.resolved:
            if shipping.deselected:
                errors["shipping"] = ["The selected shipping option is not available for this order total"]
            else:
                errors["shipping"] = ["No shipping option is available for this order"]

        valid_methods = {method.value for method in PaymentMethod}
        if not request.payment_method:
            errors["payment_method"] = ["Choose a payment method"]
        elif request.payment_method not in valid_methods:
            errors["payment_method"] = [f"Unsupported payment method: {request.payment_method}"]

        profile = self.profiles.get_profile(request.user_id)
        if profile is None:
            errors["profile"] = ["Complete your profile before checking out"]
        else:
            if not (profile.full_name or "").strip():
                errors["full_name"] = ["Full name is required"]
            if not is_valid_tax_id(profile.tax_id):
                errors["tax_id"] = ["A valid CPF is required"]
            if not is_valid_phone(profile.phone):
                errors["phone"] = ["A valid phone number with area code is required"]

        if errors:
            logger.info("Checkout rejected", user_id=str(request.user_id), errors=errors)
            raise ValidationError(errors)

        intent = OrderIntent(
            user_id=str(request.user_id),
            lines=tuple(lines),
            address=address.snapshot(),
            payment_method=request.payment_method,
            address_id=address.address_id,
            shipping_rate_id=shipping.rate.rate_id,
            shipping_name=shipping.rate.label,
            shipping_cost=shipping.cost,
            delivery_time=shipping.rate.delivery_time,
            discount_percent=profile.discount_percent or 0.0,
            customer=CustomerDetails(
                name=profile.full_name,
                email=profile.email,
                phone=profile.phone,
                tax_id=profile.tax_id,
            ),
        )
        return intent, shipping

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    def checkout(self, request: CheckoutRequest) -> CheckoutResult:
        intent, shipping = self.prepare(request)

        purged = purge_unselected_lines(request.user_id)
        if purged:
            logger.info("Unselected cart lines purged", user_id=str(request.user_id), lines=purged)

        result = self._adapter_for(intent.payment_method).create_billing(intent)

        if intent.payment_method == PaymentMethod.PIX.value:
            purge_purchased_lines(request.user_id, intent.line_keys)

        logger.info(
            "Checkout redirect issued",
            user_id=str(request.user_id),
            payment_method=intent.payment_method,
            external_reference=result.external_reference,
        )
        return CheckoutResult(
            redirect_url=result.redirect_url,
            payment_method=intent.payment_method,
            external_reference=result.external_reference,
            order_id=result.order_id,
            shipping=shipping,
        )
