"""Order intent — everything needed to materialize an order later.

The intent travels with the gateway request (as charge or session
metadata) and is kept locally in a BillingReference, so the order can be
rebuilt when the payment confirmation arrives.
"""

import json
from dataclasses import dataclass, field, replace

from protean.exceptions import ValidationError

from storefront.money import round_money

# Stripe rejects metadata values longer than this
METADATA_VALUE_LIMIT = 500

_ADDRESS_FIELDS = ("street", "number", "complement", "neighborhood", "city", "state", "zip_code")


@dataclass(frozen=True)
class IntentLine:
    product_id: str
    quantity: int
    price: float | None = None
    selected_size: str | None = None
    color_code: str | None = None
    color_name: str | None = None
    name: str | None = None

    @property
    def key(self) -> tuple[str, str, str]:
        return (str(self.product_id), self.selected_size or "", self.color_code or "")

    def as_order_line(self) -> dict:
        return {
            "product_id": self.product_id,
            "quantity": self.quantity,
            "price": self.price,
            "selected_size": self.selected_size,
            "color_code": self.color_code,
            "color_name": self.color_name,
        }


@dataclass(frozen=True)
class CustomerDetails:
    name: str
    email: str | None
    phone: str
    tax_id: str


@dataclass(frozen=True)
class OrderIntent:
    user_id: str
    lines: tuple[IntentLine, ...]
    address: dict
    payment_method: str
    address_id: str | None = None
    shipping_rate_id: str | None = None
    shipping_name: str | None = None
    shipping_cost: float = 0.0
    delivery_time: str | None = None
    discount_percent: float = 0.0
    customer: CustomerDetails | None = field(default=None, compare=False)

    @property
    def shipping(self) -> dict:
        return {
            "id": self.shipping_rate_id,
            "name": self.shipping_name,
            "cost": self.shipping_cost,
            "delivery_time": self.delivery_time,
        }

    @property
    def line_keys(self) -> list[tuple[str, str, str]]:
        return [line.key for line in self.lines]

    def order_lines(self) -> list[dict]:
        return [line.as_order_line() for line in self.lines]


def price_intent(intent: OrderIntent, catalog) -> OrderIntent:
    """Replace client-supplied prices with current catalog prices."""
    priced = []
    unknown = []
    for line in intent.lines:
        product = catalog.get_product(line.product_id)
        if product is None:
            unknown.append(str(line.product_id))
            continue
        priced.append(
            replace(
                line,
                price=round_money(product.price),
                name=product.name,
                color_name=line.color_name or product.color_name(line.color_code),
            )
        )

    if unknown:
        raise ValidationError({"items": [f"Unknown products: {', '.join(unknown)}"]})
    return replace(intent, lines=tuple(priced))


def _encode_items(lines) -> str:
    return json.dumps(
        [
            {
                "product_id": line.product_id,
                "quantity": line.quantity,
                "price": line.price,
                "selected_size": line.selected_size,
                "selected_color": {"code": line.color_code, "name": line.color_name} if line.color_code else None,
            }
            for line in lines
        ],
        separators=(",", ":"),
    )


def encode_metadata(intent: OrderIntent, full: bool = False) -> dict[str, str]:
    """Flatten an intent into string-only gateway metadata.

    Unless ``full`` is set, the item list is omitted when it does not fit a
    single metadata value; the webhook then falls back to the stored
    BillingReference.
    """
    metadata = {
        "user_id": str(intent.user_id),
        "payment_method": intent.payment_method,
        "shipping_address_id": intent.address_id or "",
        "shipping_rate_id": intent.shipping_rate_id or "",
        "shipping_rate_name": intent.shipping_name or "",
        "shipping_cost": str(intent.shipping_cost or 0),
        "delivery_time": intent.delivery_time or "",
        "discount_percent": str(intent.discount_percent or 0),
    }
    for name in _ADDRESS_FIELDS:
        metadata[f"shipping_{name}"] = intent.address.get(name) or ""

    items = _encode_items(intent.lines)
    if full or len(items) <= METADATA_VALUE_LIMIT:
        metadata["orderItems"] = items
    return metadata


def has_items(metadata: dict) -> bool:
    return bool(metadata.get("orderItems"))


def decode_metadata(metadata: dict) -> OrderIntent:
    """Rebuild an intent from gateway metadata. Raises ValidationError when incomplete."""
    if not metadata.get("user_id"):
        raise ValidationError({"metadata": ["Missing user_id"]})
    if not has_items(metadata):
        raise ValidationError({"metadata": ["Missing orderItems"]})

    try:
        raw_items = json.loads(metadata["orderItems"])
    except ValueError as exc:
        raise ValidationError({"metadata": ["orderItems is not valid JSON"]}) from exc

    lines = []
    try:
        for raw in raw_items:
            color = raw.get("selected_color") or {}
            lines.append(
                IntentLine(
                    product_id=str(raw["product_id"]),
                    quantity=int(raw["quantity"]),
                    price=float(raw["price"]),
                    selected_size=raw.get("selected_size"),
                    color_code=color.get("code"),
                    color_name=color.get("name"),
                )
            )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ValidationError({"metadata": [f"Malformed order item: {exc}"]}) from exc

    return OrderIntent(
        user_id=metadata["user_id"],
        lines=tuple(lines),
        address={name: metadata.get(f"shipping_{name}") or None for name in _ADDRESS_FIELDS},
        payment_method=metadata.get("payment_method") or "credit_card",
        address_id=metadata.get("shipping_address_id") or None,
        shipping_rate_id=metadata.get("shipping_rate_id") or None,
        shipping_name=metadata.get("shipping_rate_name") or None,
        shipping_cost=float(metadata.get("shipping_cost") or 0),
        delivery_time=metadata.get("delivery_time") or None,
        discount_percent=float(metadata.get("discount_percent") or 0),
    )
