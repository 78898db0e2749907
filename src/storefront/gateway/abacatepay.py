"""AbacatePay Pix gateway adapter.

Talks to the AbacatePay REST API with ``requests``:
- POST /v1/billing/create creates a one-time Pix billing
- GET /v1/pixQrCode/check reports the status of a charge

Every call carries an explicit timeout; timeouts, transport failures and
error envelopes all surface as GatewayError.
"""

import hmac

import requests
import structlog

from storefront.errors import GatewayError
from storefront.gateway.port import (
    ChargeCustomer,
    ChargeProduct,
    PixCharge,
    PixChargeStatus,
    PixGateway,
)

logger = structlog.get_logger(__name__)


def _digits(value: str | None) -> str:
    return "".join(ch for ch in (value or "") if ch.isdigit())


class AbacatePayGateway(PixGateway):
    name = "abacatepay"

    def __init__(
        self,
        api_key: str,
        webhook_secret: str,
        base_url: str = "https://api.abacatepay.com",
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, **kwargs) -> dict:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, headers=self._headers, timeout=self.timeout, **kwargs)
        except requests.Timeout as exc:
            raise GatewayError(self.name, f"Request to {path} timed out") from exc
        except requests.RequestException as exc:
            raise GatewayError(self.name, f"Request to {path} failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise GatewayError(self.name, f"Non-JSON response ({response.status_code})") from exc

        if not isinstance(body, dict):
            raise GatewayError(self.name, f"Unexpected response body from {path}")

        if not response.ok or body.get("error"):
            error = body.get("error") or response.reason
            logger.error("AbacatePay request failed", path=path, status_code=response.status_code, error=error)
            raise GatewayError(self.name, str(error))

        data = body.get("data")
        if not isinstance(data, dict):
            raise GatewayError(self.name, f"Response from {path} carried no data")
        return data

    def create_charge(
        self,
        products: list[ChargeProduct],
        customer: ChargeCustomer,
        metadata: dict,
        return_url: str,
        completion_url: str,
    ) -> PixCharge:
        payload = {
            "frequency": "ONE_TIME",
            "methods": ["PIX"],
            "products": [
                {
                    "externalId": product.external_id,
                    "name": product.name,
                    "description": product.description or product.name,
                    "quantity": product.quantity,
                    "price": product.unit_price_cents,
                }
                for product in products
            ],
            "returnUrl": return_url,
            "completionUrl": completion_url,
            "customer": {
                "name": customer.name,
                "cellphone": _digits(customer.phone),
                "email": customer.email,
                "taxId": _digits(customer.tax_id),
            },
            "metadata": metadata,
        }
        data = self._request("POST", "/v1/billing/create", json=payload)

        if not data.get("id") or not data.get("url"):
            raise GatewayError(self.name, "Billing response is missing id or url")
        return PixCharge(charge_id=data["id"], url=data["url"], status=data.get("status", "PENDING"))

    def check_charge(self, charge_id: str) -> PixChargeStatus:
        data = self._request("GET", "/v1/pixQrCode/check", params={"id": charge_id})
        return PixChargeStatus(charge_id=charge_id, status=str(data.get("status", "PENDING")))

    def verify_webhook_secret(self, secret: str) -> bool:
        if not self.webhook_secret or not secret:
            return False
        return hmac.compare_digest(secret.encode(), self.webhook_secret.encode())
