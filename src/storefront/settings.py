"""Runtime settings read from the environment.

Values are read on access so tests can override them with monkeypatch.
"""

import os

DEFAULT_ABACATE_API_URL = "https://api.abacatepay.com"
DEFAULT_APP_BASE_URL = "http://localhost:8080"
DEFAULT_GATEWAY_TIMEOUT = 10.0


def gateway_mode() -> str:
    """Either "fake" (default) or "live"."""
    return os.environ.get("STOREFRONT_GATEWAYS", "fake").lower()


def gateway_timeout() -> float:
    return float(os.environ.get("STOREFRONT_GATEWAY_TIMEOUT", DEFAULT_GATEWAY_TIMEOUT))


def app_base_url() -> str:
    return os.environ.get("APP_BASE_URL", DEFAULT_APP_BASE_URL).rstrip("/")


def abacate_api_url() -> str:
    return os.environ.get("ABACATE_API_URL", DEFAULT_ABACATE_API_URL).rstrip("/")


def abacate_api_key() -> str:
    return os.environ.get("ABACATE_API_KEY", "")


def pix_webhook_secret() -> str:
    return os.environ.get("PIX_WEBHOOK_SECRET", "")


def stripe_secret_key() -> str:
    return os.environ.get("STRIPE_SECRET_KEY", "")


def stripe_webhook_secret() -> str:
    return os.environ.get("STRIPE_WEBHOOK_SECRET", "")


def is_production() -> bool:
    return os.environ.get("PROTEAN_ENV") == "production"
