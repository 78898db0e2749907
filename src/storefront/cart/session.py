"""Cart reconciliation across sign-in.

LocalCart is the cart a shopper builds before authenticating. CartSession
hooks into the session lifecycle: on sign-in it merges the local lines
into the persisted cart once, and on sign-out it flushes the local cart.
"""

import json

import structlog
from protean.utils.globals import current_domain

from storefront.cart.cart import line_key
from storefront.cart.management import MergeLocalCart

logger = structlog.get_logger(__name__)


class LocalCart:
    """In-memory cart keyed by (product, size, color)."""

    def __init__(self, lines=None) -> None:
        self._lines: dict[tuple[str, str, str], dict] = {}
        self.replace(lines or [])

    @property
    def lines(self) -> list[dict]:
        return list(self._lines.values())

    @property
    def selected_lines(self) -> list[dict]:
        return [line for line in self._lines.values() if line.get("selected", True)]

    def add(self, product_id, quantity=1, size=None, color_code=None, color_name=None):
        key = line_key(product_id, size, color_code)
        if key in self._lines:
            self._lines[key]["quantity"] += quantity
        else:
            self._lines[key] = {
                "product_id": str(product_id),
                "size": size,
                "color_code": color_code,
                "color_name": color_name,
                "quantity": quantity,
                "selected": True,
            }

    def update_quantity(self, key, quantity):
        """Set a line's quantity; zero or less removes the line."""
        key = tuple(key)
        if quantity <= 0:
            self._lines.pop(key, None)
        elif key in self._lines:
            self._lines[key]["quantity"] = quantity

    def remove(self, key):
        self._lines.pop(tuple(key), None)

    def toggle_selected(self, key):
        line = self._lines.get(tuple(key))
        if line is not None:
            line["selected"] = not line.get("selected", True)

    def select_all(self, selected=True):
        for line in self._lines.values():
            line["selected"] = selected

    def replace(self, lines):
        self._lines = {
            line_key(line["product_id"], line.get("size"), line.get("color_code")): dict(line) for line in lines
        }

    def clear(self):
        self._lines.clear()


class CartSession:
    """Merge-once cart reconciliation for one browser session."""

    def __init__(self, local_cart: LocalCart | None = None) -> None:
        self.local_cart = local_cart or LocalCart()
        self.user_id: str | None = None
        self.synced = False

    def on_session_changed(self, user_id: str | None) -> list[dict]:
        """React to a sign-in (user id) or sign-out (None).

        Returns the lines the shopper should now see.
        """
        if user_id is None:
            self._flush()
            return []

        if self.synced and self.user_id == user_id:
            return self.local_cart.lines

        if self.synced:
            # The local view holds the previous user's persisted cart
            logger.info("Cart session switched users", previous_user_id=str(self.user_id), user_id=str(user_id))
            self._flush()

        merged = current_domain.process(
            MergeLocalCart(user_id=user_id, lines=json.dumps(self.local_cart.lines)),
            asynchronous=False,
        )
        self.local_cart.replace(merged)
        self.user_id = user_id
        self.synced = True

        logger.info("Cart merged on sign-in", user_id=str(user_id), lines=len(merged))
        return self.local_cart.lines

    def _flush(self) -> None:
        self.local_cart.clear()
        self.user_id = None
        self.synced = False
