"""Cart management — commands and handler.

Covers adding and removing lines, toggling selection, merging a local
(pre-sign-in) cart into the persisted one, and purging lines around
checkout.
"""

import json

from protean import handle
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart, line_key
from storefront.domain import storefront


def _cart_for(user_id, create=True) -> ShoppingCart | None:
    cart = current_domain.repository_for(ShoppingCart).for_user(user_id)
    if cart is None and create:
        cart = ShoppingCart.create(user_id=user_id)
    return cart


def cart_lines(user_id) -> list[dict]:
    """Return the persisted cart of a user as plain line dicts."""
    cart = _cart_for(user_id, create=False)
    if cart is None:
        return []
    return [line.as_line() for line in cart.lines]


def purge_unselected_lines(user_id) -> int:
    cart = _cart_for(user_id, create=False)
    if cart is None:
        return 0
    removed = cart.purge_unselected()
    if removed:
        current_domain.repository_for(ShoppingCart).add(cart)
    return removed


def purge_purchased_lines(user_id, keys) -> int:
    cart = _cart_for(user_id, create=False)
    if cart is None:
        return 0
    removed = cart.purge_keys(keys)
    if removed:
        current_domain.repository_for(ShoppingCart).add(cart)
    return removed


@storefront.command(part_of="ShoppingCart")
class AddCartLine:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    size = String(max_length=50)
    color_code = String(max_length=50)
    color_name = String(max_length=100)
    selected = Boolean(default=True)


@storefront.command(part_of="ShoppingCart")
class RemoveCartLine:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(max_length=50)
    color_code = String(max_length=50)


@storefront.command(part_of="ShoppingCart")
class SelectCartLine:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(max_length=50)
    color_code = String(max_length=50)
    selected = Boolean(default=True)


@storefront.command(part_of="ShoppingCart")
class MergeLocalCart:
    """Merge the lines a shopper collected before signing in."""

    user_id = Identifier(required=True)
    lines = Text(required=True)  # JSON: list of line dicts


@storefront.command(part_of="ShoppingCart")
class PurgePurchasedLines:
    user_id = Identifier(required=True)
    keys = Text(required=True)  # JSON: [[product_id, size, color_code], ...]


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(AddCartLine)
    def add_line(self, command):
        cart = _cart_for(command.user_id)
        cart.add_line(
            product_id=command.product_id,
            quantity=command.quantity,
            size=command.size,
            color_code=command.color_code,
            color_name=command.color_name,
            selected=command.selected,
        )
        current_domain.repository_for(ShoppingCart).add(cart)

    @handle(RemoveCartLine)
    def remove_line(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = _cart_for(command.user_id)
        cart.remove_line(line_key(command.product_id, command.size, command.color_code))
        repo.add(cart)

    @handle(SelectCartLine)
    def select_line(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = _cart_for(command.user_id)
        cart.set_selected(line_key(command.product_id, command.size, command.color_code), command.selected)
        repo.add(cart)

    @handle(MergeLocalCart)
    def merge_local_cart(self, command):
        cart = _cart_for(command.user_id)
        local_lines = json.loads(command.lines) if isinstance(command.lines, str) else command.lines
        cart.merge_local_lines(local_lines)
        current_domain.repository_for(ShoppingCart).add(cart)
        return [line.as_line() for line in cart.lines]

    @handle(PurgePurchasedLines)
    def purge_purchased(self, command):
        keys = json.loads(command.keys) if isinstance(command.keys, str) else command.keys
        return purge_purchased_lines(command.user_id, keys)
