"""Shopping Cart aggregate (CQRS) — the persisted cart of a signed-in user.

Lines are identified by (product, size, color). Each line carries a
``selected`` flag: checkout only buys selected lines, and unselected lines
stay in the cart untouched until the shopper acts on them.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Identifier, Integer, String

from storefront.domain import storefront


def line_key(product_id, size=None, color_code=None) -> tuple[str, str, str]:
    return (str(product_id), size or "", color_code or "")


@storefront.entity(part_of="ShoppingCart")
class CartLine:
    product_id = Identifier(required=True)
    size = String(max_length=50)
    color_code = String(max_length=50)
    color_name = String(max_length=100)
    quantity = Integer(required=True, min_value=1)
    selected = Boolean(default=True)
    added_at = DateTime()

    @property
    def cart_key(self) -> tuple[str, str, str]:
        return line_key(self.product_id, self.size, self.color_code)

    def as_line(self) -> dict:
        return {
            "product_id": str(self.product_id),
            "size": self.size,
            "color_code": self.color_code,
            "color_name": self.color_name,
            "quantity": self.quantity,
            "selected": self.selected,
        }


@storefront.aggregate
class ShoppingCart:
    user_id = Identifier(required=True, unique=True)
    lines = HasMany(CartLine)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, created_at=now, updated_at=now)

    def _find_line(self, key):
        return next((line for line in self.lines if line.cart_key == tuple(key)), None)

    def _touch(self):
        self.updated_at = datetime.now(UTC)

    @property
    def selected_lines(self) -> list[CartLine]:
        return [line for line in self.lines if line.selected]

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add_line(self, product_id, quantity, size=None, color_code=None, color_name=None, selected=True):
        """Add a line, or increase the quantity of the matching line."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = self._find_line(line_key(product_id, size, color_code))
        if existing:
            existing.quantity += quantity
        else:
            self.add_lines(
                CartLine(
                    product_id=product_id,
                    size=size or None,
                    color_code=color_code or None,
                    color_name=color_name,
                    quantity=quantity,
                    selected=selected,
                    added_at=datetime.now(UTC),
                )
            )
        self._touch()

    def remove_line(self, key):
        line = self._find_line(key)
        if line is None:
            raise ValidationError({"line": ["Line not found in cart"]})
        self.remove_lines(line)
        self._touch()

    def set_selected(self, key, selected: bool):
        line = self._find_line(key)
        if line is None:
            raise ValidationError({"line": ["Line not found in cart"]})
        line.selected = selected
        self._touch()

    # -------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------
    def merge_local_lines(self, local_lines) -> int:
        """Add local lines whose key is not in the cart yet.

        Lines already present server-side are left as they are, so merging
        never duplicates a line. Returns how many lines were added.

        Args:
            local_lines: List of dicts with product_id, quantity and optional
                         size, color_code, color_name, selected.
        """
        added = 0
        now = datetime.now(UTC)
        for local in local_lines:
            key = line_key(local["product_id"], local.get("size"), local.get("color_code"))
            if self._find_line(key) is not None:
                continue
            self.add_lines(
                CartLine(
                    product_id=local["product_id"],
                    size=local.get("size") or None,
                    color_code=local.get("color_code") or None,
                    color_name=local.get("color_name"),
                    quantity=local["quantity"],
                    selected=local.get("selected", True),
                    added_at=now,
                )
            )
            added += 1

        if added:
            self._touch()
        return added

    def purge_unselected(self) -> int:
        """Drop every line the shopper did not select for checkout."""
        unselected = [line for line in self.lines if not line.selected]
        for line in unselected:
            self.remove_lines(line)
        if unselected:
            self._touch()
        return len(unselected)

    def purge_keys(self, keys) -> int:
        """Drop the lines matching purchased (product, size, color) keys."""
        wanted = {tuple(key) for key in keys}
        purchased = [line for line in self.lines if line.cart_key in wanted]
        for line in purchased:
            self.remove_lines(line)
        if purchased:
            self._touch()
        return len(purchased)


@storefront.repository(part_of=ShoppingCart)
class ShoppingCartRepository:
    def for_user(self, user_id) -> ShoppingCart | None:
        carts = self._dao.query.filter(user_id=str(user_id)).all().items
        return carts[0] if carts else None
