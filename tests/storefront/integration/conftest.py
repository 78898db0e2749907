import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from storefront.api.handlers import register_error_handlers
from storefront.api.routes import (
    cart_router,
    checkout_router,
    gateway_router,
    order_router,
    stock_router,
    sweep_router,
)
from storefront.api.webhooks import webhook_router


@pytest.fixture()
def client():
    app = FastAPI()
    for router in (
        checkout_router,
        webhook_router,
        order_router,
        cart_router,
        stock_router,
        sweep_router,
        gateway_router,
    ):
        app.include_router(router)
    register_error_handlers(app)
    return TestClient(app)
