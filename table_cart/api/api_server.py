"""
FastAPI server exposing the table cart.

Tenant and table ids arrive already authorized by the upstream gateway.
"""
from __future__ import annotations

import logging
import os

import uvicorn
from fastapi import FastAPI

from table_cart.api.routes_cart import cart_exception_handler
from table_cart.api.routes_cart import router as cart_router
from table_cart.core.config import CartSettings, load_settings
from table_cart.core.exceptions import CartException
from table_cart.logging_config import setup_logging
from table_cart.services import build_cart_service
from table_cart.services.cart_service import CartService

logger = logging.getLogger(__name__)


def create_api_app(service: CartService | None = None, settings: CartSettings | None = None) -> FastAPI:
    """
    Create FastAPI application for the cart.

    Args:
        service: Ready CartService; built from settings when omitted
        settings: Settings used to build the service (loaded from env when omitted)
    """
    if service is None:
        settings = settings or load_settings()
        setup_logging(settings.log_level)
        service = build_cart_service(settings)
        logger.info(
            "Cart service ready (strict_mode=%s, ttl=%ss, locking=%s)",
            settings.strict_mode,
            settings.cart_ttl_seconds,
            settings.lock.enabled,
        )

    app = FastAPI(
        title="Table Cart API",
        description="Per-table session carts",
        version="1.0.0",
        docs_url="/api/docs",
        openapi_url="/api/openapi.json",
    )
    app.state.cart_service = service
    app.add_exception_handler(CartException, cart_exception_handler)
    app.include_router(cart_router, prefix="/api/v1")
    return app


def run() -> None:
    """Run the API with uvicorn (HOST/PORT from env)."""
    app = create_api_app()
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8080")))


if __name__ == "__main__":
    run()
