"""Exception-to-HTTP mapping for the Storefront API.

Protean's handlers cover domain errors (ValidationError → 400,
ObjectNotFoundError → 404); gateway and webhook failures are added here.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from storefront.errors import GatewayError, WebhookAuthenticationError, WebhookProcessingError

logger = structlog.get_logger(__name__)


async def _gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
    return JSONResponse(status_code=502, content={"detail": exc.message, "gateway": exc.gateway})


async def _webhook_authentication_error(request: Request, exc: WebhookAuthenticationError) -> JSONResponse:
    logger.warning("Webhook authentication failed", gateway=exc.gateway, path=request.url.path)
    return JSONResponse(status_code=401, content={"detail": exc.reason})


async def _webhook_processing_error(request: Request, exc: WebhookProcessingError) -> JSONResponse:
    logger.error(
        "Webhook processing failed",
        external_reference=exc.external_reference,
        reason=exc.reason,
        path=request.url.path,
    )
    return JSONResponse(status_code=500, content={"detail": exc.reason})


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(GatewayError, _gateway_error)
    app.add_exception_handler(WebhookAuthenticationError, _webhook_authentication_error)
    app.add_exception_handler(WebhookProcessingError, _webhook_processing_error)
