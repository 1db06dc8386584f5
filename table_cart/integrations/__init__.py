"""Integrations package - cart stores and the menu service."""

from table_cart.integrations.cart_store import (
    CartKey,
    CartStore,
    InMemoryCartStore,
    create_cart_store,
)
from table_cart.integrations.menu_client import (
    HttpMenuValidationClient,
    MenuItemAvailability,
    MenuValidationClient,
    StaticMenuValidationClient,
)

__all__ = [
    "CartKey",
    "CartStore",
    "HttpMenuValidationClient",
    "InMemoryCartStore",
    "MenuItemAvailability",
    "MenuValidationClient",
    "StaticMenuValidationClient",
    "create_cart_store",
]
