"""Storefront-specific exceptions.

Domain validation failures use protean.exceptions.ValidationError; these
cover the failures that come from outside the domain.
"""


class GatewayError(Exception):
    """A payment gateway rejected a request or could not be reached."""

    def __init__(self, gateway: str, message: str) -> None:
        super().__init__(message)
        self.gateway = gateway
        self.message = message

    def __str__(self) -> str:
        return f"{self.gateway}: {self.message}"


class WebhookAuthenticationError(Exception):
    """A webhook request failed secret or signature verification."""

    def __init__(self, gateway: str, reason: str = "Invalid webhook credentials") -> None:
        super().__init__(reason)
        self.gateway = gateway
        self.reason = reason


class WebhookProcessingError(Exception):
    """An authenticated payment event could not be turned into an order."""

    def __init__(self, external_reference: str, reason: str) -> None:
        super().__init__(reason)
        self.external_reference = external_reference
        self.reason = reason
