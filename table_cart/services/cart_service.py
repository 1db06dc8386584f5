"""Cart operations: read, add, remove, change quantity, clear."""
from __future__ import annotations

import logging
from contextlib import nullcontext
from dataclasses import replace
from decimal import Decimal, InvalidOperation
from typing import Any, ContextManager, Iterable

from table_cart.core.constants import CART_TTL_DEFAULT, MIN_QUANTITY
from table_cart.core.exceptions import (
    ConfigurationException,
    ItemUnavailableException,
    LineNotFoundException,
    MenuLookupTimeoutException,
    PriceInvalidException,
    QuantityInvalidException,
)
from table_cart.domain.aggregator import recompute
from table_cart.domain.cart import Cart, CartLine, Modifier, quantize_money, to_money
from table_cart.domain.item_key import canonicalize_modifiers, derive_item_key
from table_cart.integrations.cart_store import CartKey, CartStore
from table_cart.integrations.menu_client import MenuValidationClient

logger = logging.getLogger(__name__)


def _validate_quantity(quantity: Any) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < MIN_QUANTITY:
        raise QuantityInvalidException(quantity)
    return quantity


def _validate_price(value: Any, field: str = "unit price") -> Decimal:
    try:
        price = to_money(value)
    except ValueError as exc:
        raise PriceInvalidException(value, field) from exc
    if not price.is_finite() or price < 0:
        raise PriceInvalidException(value, field)
    try:
        return quantize_money(price)
    except InvalidOperation as exc:
        raise PriceInvalidException(value, field) from exc


def _validate_modifiers(modifiers: Iterable[Modifier | dict[str, Any]] | None) -> tuple[Modifier, ...]:
    checked: list[Modifier] = []
    for raw in modifiers or ():
        try:
            modifier = Modifier.coerce(raw)
        except ValueError as exc:
            raise PriceInvalidException(raw, "modifier price delta") from exc
        price_delta = _validate_price(modifier.price_delta, "modifier price delta")
        checked.append(replace(modifier, price_delta=price_delta))
    return canonicalize_modifiers(checked)


class CartService:
    """Per-table cart backed by a TTL key/value store.

    Every mutation is read -> modify -> recompute -> write. With
    ``lock_mutations`` the cycle runs under the store's per-cart lock, so
    concurrent taps on one table cannot overwrite each other; without it the
    last writer wins.

    In strict mode each add is checked against the menu service first. In
    naive mode the caller's name and price are stored for display only.
    """

    def __init__(
        self,
        store: CartStore,
        menu_client: MenuValidationClient | None = None,
        *,
        strict_mode: bool = False,
        ttl_seconds: int = CART_TTL_DEFAULT,
        lock_mutations: bool = True,
    ) -> None:
        if strict_mode and menu_client is None:
            raise ConfigurationException("strict mode requires a menu validation client")
        if ttl_seconds <= 0:
            raise ConfigurationException("cart TTL must be positive")
        self.store = store
        self.menu_client = menu_client
        self.strict_mode = strict_mode
        self.ttl_seconds = ttl_seconds
        self.lock_mutations = lock_mutations

    @staticmethod
    def cart_key(tenant_id: str, table_id: str) -> CartKey:
        return CartKey(tenant_id=str(tenant_id), table_id=str(table_id))

    def _mutation(self, key: CartKey) -> ContextManager[None]:
        if self.lock_mutations:
            return self.store.lock(key)
        return nullcontext()

    def _load(self, key: CartKey) -> Cart:
        cart = self.store.get(key)
        if cart is None:
            return Cart.empty()
        return recompute(cart)

    def _save(self, key: CartKey, cart: Cart) -> None:
        self.store.set(key, cart, self.ttl_seconds)

    def _validate_menu_item(self, tenant_id: str, menu_item_id: str) -> None:
        try:
            availability = self.menu_client.lookup(tenant_id, menu_item_id)
        except MenuLookupTimeoutException as exc:
            raise ItemUnavailableException(tenant_id, menu_item_id, "temporarily unavailable") from exc

        if not availability.exists:
            logger.warning("Menu item %s not found for tenant %s", menu_item_id, tenant_id)
            raise ItemUnavailableException(tenant_id, menu_item_id, "not found")
        if not availability.active:
            logger.warning("Menu item %s is not active for tenant %s", menu_item_id, tenant_id)
            raise ItemUnavailableException(tenant_id, menu_item_id, "not active")

    def get_cart(self, tenant_id: str, table_id: str) -> Cart:
        """Current cart; an empty one when nothing is stored."""
        return self._load(self.cart_key(tenant_id, table_id))

    def add_line(
        self,
        tenant_id: str,
        table_id: str,
        menu_item_id: str,
        name: str,
        quantity: int,
        unit_price: Any,
        modifiers: Iterable[Modifier | dict[str, Any]] | None = None,
        notes: str | None = None,
    ) -> Cart:
        """Add ``quantity`` of an item, merging with an identical line.

        A merged line keeps the price, modifiers and notes it was first
        added with.
        """
        quantity = _validate_quantity(quantity)
        price = _validate_price(unit_price)
        canonical = _validate_modifiers(modifiers)

        if self.strict_mode:
            self._validate_menu_item(tenant_id, menu_item_id)

        item_key = derive_item_key(menu_item_id, canonical)
        key = self.cart_key(tenant_id, table_id)
        with self._mutation(key):
            cart = self._load(key)
            line = cart.find_line(item_key)
            if line is not None:
                line.quantity += quantity
            else:
                cart.items.append(
                    CartLine(
                        item_key=item_key,
                        menu_item_id=str(menu_item_id),
                        name=name,
                        quantity=quantity,
                        unit_price=price,
                        modifiers=canonical,
                        notes=notes,
                    )
                )
            recompute(cart)
            self._save(key, cart)

        logger.info(
            "Added %s x %s (line %s) to cart for tenant %s, table %s",
            quantity,
            menu_item_id,
            item_key,
            tenant_id,
            table_id,
        )
        return cart

    def remove_line(self, tenant_id: str, table_id: str, item_key: str) -> Cart:
        key = self.cart_key(tenant_id, table_id)
        with self._mutation(key):
            cart = self._load(key)
            if cart.find_line(item_key) is None:
                raise LineNotFoundException(item_key)
            cart.items = [line for line in cart.items if line.item_key != item_key]
            recompute(cart)
            self._save(key, cart)

        logger.info("Removed line %s from cart for tenant %s, table %s", item_key, tenant_id, table_id)
        return cart

    def update_quantity(self, tenant_id: str, table_id: str, item_key: str, quantity: int) -> Cart:
        """Set a line's quantity to ``quantity`` (not an increment)."""
        quantity = _validate_quantity(quantity)
        key = self.cart_key(tenant_id, table_id)
        with self._mutation(key):
            cart = self._load(key)
            line = cart.find_line(item_key)
            if line is None:
                raise LineNotFoundException(item_key)
            line.quantity = quantity
            recompute(cart)
            self._save(key, cart)

        logger.info(
            "Updated line %s quantity to %s for tenant %s, table %s",
            item_key,
            quantity,
            tenant_id,
            table_id,
        )
        return cart

    def clear(self, tenant_id: str, table_id: str) -> None:
        self.store.delete(self.cart_key(tenant_id, table_id))
        logger.info("Cleared cart for tenant %s, table %s", tenant_id, table_id)
