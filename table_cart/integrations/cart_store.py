"""Cart persistence contract, typed keys and the in-memory store."""
from __future__ import annotations

import json
import logging
import threading
import time
from collections.abc import Callable
from contextlib import contextmanager
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, ContextManager, Iterator, Protocol
from urllib.parse import quote

from table_cart.core.constants import (
    CART_KEY_PREFIX,
    CART_LOCK_PREFIX,
    CART_LOCK_WAIT_DEFAULT,
)
from table_cart.core.exceptions import CartConflictException
from table_cart.domain.cart import Cart

if TYPE_CHECKING:
    from table_cart.core.config import CartSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CartKey:
    """Composite cart identity: one cart per table per tenant."""

    tenant_id: str
    table_id: str

    def encode(self, prefix: str = CART_KEY_PREFIX) -> str:
        # Percent-encoding keeps ':' inside an id from shifting the separator.
        tenant = quote(str(self.tenant_id), safe="")
        table = quote(str(self.table_id), safe="")
        return f"{prefix}:{tenant}:{table}"

    def lock_name(self) -> str:
        return self.encode(CART_LOCK_PREFIX)

    def __str__(self) -> str:
        return self.encode()


class CartStore(Protocol):
    """TTL-capable key/value persistence the cart service relies on."""

    def get(self, key: CartKey) -> Cart | None:
        """Return the stored cart, or None when missing or expired."""
        ...

    def set(self, key: CartKey, cart: Cart, ttl: int) -> None:
        """Store the cart and reset its expiry to ``ttl`` seconds."""
        ...

    def delete(self, key: CartKey) -> None:
        """Remove the cart; missing keys are not an error."""
        ...

    def lock(self, key: CartKey) -> ContextManager[None]:
        """Hold an exclusive per-cart lock for one read-modify-write cycle."""
        ...


def serialize_cart(cart: Cart) -> str:
    return json.dumps(cart.to_dict(), ensure_ascii=False, separators=(",", ":"))


def deserialize_cart(raw: str | bytes, key: CartKey) -> Cart | None:
    try:
        payload = json.loads(raw, parse_float=Decimal)
    except (TypeError, ValueError) as exc:
        logger.warning("Discarding undecodable cart payload for %s: %s", key, exc)
        return None
    if not isinstance(payload, dict):
        logger.warning("Discarding cart payload for %s: expected object, got %s", key, type(payload).__name__)
        return None
    try:
        return Cart.from_dict(payload)
    except (TypeError, ValueError) as exc:
        logger.warning("Discarding malformed cart payload for %s: %s", key, exc)
        return None


@dataclass
class _KeyLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    # Holder plus waiters; the entry is dropped when this reaches zero.
    users: int = 0


class InMemoryCartStore:
    """Process-local cart store with sliding expiry.

    Values are kept serialized so callers never share mutable carts.
    """

    def __init__(
        self,
        lock_wait_seconds: float = CART_LOCK_WAIT_DEFAULT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self._lock_wait = lock_wait_seconds
        self._data: dict[str, str] = {}
        self._expires_at: dict[str, float] = {}
        self._guard = threading.Lock()
        self._key_locks: dict[str, _KeyLock] = {}

    def _cleanup_expired(self) -> None:
        now = self._clock()
        expired = [name for name, deadline in self._expires_at.items() if deadline <= now]
        for name in expired:
            self._data.pop(name, None)
            self._expires_at.pop(name, None)

    def get(self, key: CartKey) -> Cart | None:
        name = key.encode()
        with self._guard:
            self._cleanup_expired()
            raw = self._data.get(name)
        if raw is None:
            return None
        return deserialize_cart(raw, key)

    def set(self, key: CartKey, cart: Cart, ttl: int) -> None:
        name = key.encode()
        serialized = serialize_cart(cart)
        with self._guard:
            self._data[name] = serialized
            self._expires_at[name] = self._clock() + ttl

    def delete(self, key: CartKey) -> None:
        name = key.encode()
        with self._guard:
            self._data.pop(name, None)
            self._expires_at.pop(name, None)

    def raw(self, key: CartKey) -> str | None:
        """Serialized value as stored, for diagnostics."""
        with self._guard:
            self._cleanup_expired()
            return self._data.get(key.encode())

    def ttl_remaining(self, key: CartKey) -> float | None:
        with self._guard:
            deadline = self._expires_at.get(key.encode())
        if deadline is None:
            return None
        return max(0.0, deadline - self._clock())

    @contextmanager
    def lock(self, key: CartKey) -> Iterator[None]:
        name = key.lock_name()
        with self._guard:
            entry = self._key_locks.get(name)
            if entry is None:
                entry = self._key_locks[name] = _KeyLock()
            entry.users += 1
        try:
            if not entry.lock.acquire(timeout=self._lock_wait):
                logger.warning("Cart lock timeout for %s", key)
                raise CartConflictException(str(key))
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._key_locks[name]


def create_cart_store(settings: CartSettings) -> CartStore:
    """Redis store when REDIS_URL is configured, in-memory store otherwise."""
    if not settings.redis_url:
        logger.warning("REDIS_URL is not set; carts are kept in process memory")
        return InMemoryCartStore(lock_wait_seconds=settings.lock.wait_seconds)

    from table_cart.integrations.redis_cart import RedisCartStore

    return RedisCartStore(
        redis_url=settings.redis_url,
        lock_ttl_seconds=settings.lock.ttl_seconds,
        lock_wait_seconds=settings.lock.wait_seconds,
    )


__all__ = [
    "CartKey",
    "CartStore",
    "InMemoryCartStore",
    "create_cart_store",
    "deserialize_cart",
    "serialize_cart",
]
