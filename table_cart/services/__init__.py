"""Service layer wiring for the table cart."""
from __future__ import annotations

from table_cart.core.config import CartSettings
from table_cart.integrations.cart_store import create_cart_store
from table_cart.integrations.menu_client import HttpMenuValidationClient
from table_cart.services.cart_service import CartService


def build_cart_service(settings: CartSettings) -> CartService:
    """Create the store, the optional menu client and the service from settings."""
    store = create_cart_store(settings)
    menu_client = None
    if settings.strict_mode and settings.menu_service_url:
        menu_client = HttpMenuValidationClient(
            settings.menu_service_url, timeout=settings.menu_lookup_timeout
        )
    return CartService(
        store,
        menu_client,
        strict_mode=settings.strict_mode,
        ttl_seconds=settings.cart_ttl_seconds,
        lock_mutations=settings.lock.enabled,
    )


__all__ = ["CartService", "build_cart_service"]
