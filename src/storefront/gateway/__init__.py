"""Payment gateway factory.

Provides get_*_gateway() / set_*_gateway() to swap implementations:
- FakePixGateway / FakeCardGateway for development and testing
- AbacatePayGateway / StripeCardGateway when STOREFRONT_GATEWAYS=live
"""

from storefront import settings
from storefront.gateway.fake_adapter import FakeCardGateway, FakePixGateway
from storefront.gateway.port import CardGateway, PixGateway

_pix_gateway: PixGateway | None = None
_card_gateway: CardGateway | None = None


def _build_pix_gateway() -> PixGateway:
    if settings.gateway_mode() == "live":
        from storefront.gateway.abacatepay import AbacatePayGateway

        return AbacatePayGateway(
            api_key=settings.abacate_api_key(),
            webhook_secret=settings.pix_webhook_secret(),
            base_url=settings.abacate_api_url(),
            timeout=settings.gateway_timeout(),
        )
    return FakePixGateway()


def _build_card_gateway() -> CardGateway:
    if settings.gateway_mode() == "live":
        from storefront.gateway.stripe_adapter import StripeCardGateway

        return StripeCardGateway(
            api_key=settings.stripe_secret_key(),
            webhook_secret=settings.stripe_webhook_secret(),
            timeout=settings.gateway_timeout(),
        )
    return FakeCardGateway()


def get_pix_gateway() -> PixGateway:
    """Return the current Pix gateway. Defaults to FakePixGateway."""
    global _pix_gateway
    if _pix_gateway is None:
        _pix_gateway = _build_pix_gateway()
    return _pix_gateway


def set_pix_gateway(gateway: PixGateway) -> None:
    """Override the active Pix gateway (useful for tests)."""
    global _pix_gateway
    _pix_gateway = gateway


def get_card_gateway() -> CardGateway:
    """Return the current card gateway. Defaults to FakeCardGateway."""
    global _card_gateway
    if _card_gateway is None:
        _card_gateway = _build_card_gateway()
    return _card_gateway


def set_card_gateway(gateway: CardGateway) -> None:
    """Override the active card gateway (useful for tests)."""
    global _card_gateway
    _card_gateway = gateway


def reset_gateways() -> None:
    """Reset to default gateways."""
    global _pix_gateway, _card_gateway
    _pix_gateway = None
    _card_gateway = None
