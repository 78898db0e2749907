"""Storefront bounded context — Orders, Payments, Stock and Carts.

Turns a cart selection into a durable order, coordinates it with the Pix
and card payment gateways, and keeps stock and carts consistent with the
payment outcome.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
