"""Redis-backed cart storage with sliding TTL and per-table lock."""
from __future__ import annotations

import logging
import time
import uuid
from contextlib import contextmanager
from typing import Any, Iterator

import redis

from table_cart.core.constants import (
    CART_LOCK_POLL_INTERVAL,
    CART_LOCK_TTL_DEFAULT,
    CART_LOCK_WAIT_DEFAULT,
)
from table_cart.core.exceptions import CartConflictException, ConfigurationException
from table_cart.domain.cart import Cart
from table_cart.integrations.cart_store import CartKey, deserialize_cart, serialize_cart

logger = logging.getLogger(__name__)

UNLOCK_SCRIPT = (
    "if redis.call('get', KEYS[1]) == ARGV[1] "
    "then return redis.call('del', KEYS[1]) else return 0 end"
)


class RedisCartStore:
    """Carts persisted as JSON strings under ``cart:{tenant}:{table}``.

    Every write goes through SETEX so the expiry slides with activity.
    Redis errors are not caught here; callers see them unchanged.
    """

    def __init__(
        self,
        redis_url: str | None = None,
        client: Any = None,
        lock_ttl_seconds: int = CART_LOCK_TTL_DEFAULT,
        lock_wait_seconds: float = CART_LOCK_WAIT_DEFAULT,
    ) -> None:
        self._redis_url = redis_url
        self._lock_ttl = lock_ttl_seconds
        self._lock_wait = lock_wait_seconds
        self._client = client if client is not None else self._init_client()

    def _init_client(self) -> Any:
        if not self._redis_url:
            raise ConfigurationException("RedisCartStore requires redis_url or client")

        client = redis.from_url(
            self._redis_url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        client.ping()
        logger.info("Redis cart storage enabled")
        return client

    @property
    def client(self) -> Any:
        return self._client

    def get(self, key: CartKey) -> Cart | None:
        raw = self._client.get(key.encode())
        if not raw:
            return None
        return deserialize_cart(raw, key)

    def set(self, key: CartKey, cart: Cart, ttl: int) -> None:
        self._client.setex(key.encode(), int(ttl), serialize_cart(cart))

    def delete(self, key: CartKey) -> None:
        self._client.delete(key.encode())

    @contextmanager
    def lock(self, key: CartKey) -> Iterator[None]:
        lock_key = key.lock_name()
        token = str(uuid.uuid4())
        deadline = time.monotonic() + self._lock_wait
        acquired = False

        while True:
            acquired = bool(self._client.set(lock_key, token, nx=True, ex=self._lock_ttl))
            if acquired or time.monotonic() >= deadline:
                break
            time.sleep(CART_LOCK_POLL_INTERVAL)

        if not acquired:
            logger.warning("Cart lock timeout for %s", key)
            raise CartConflictException(str(key))

        try:
            yield
        finally:
            try:
                self._client.eval(UNLOCK_SCRIPT, 1, lock_key, token)
            except redis.exceptions.RedisError as exc:
                # The lock expires on its own after lock_ttl seconds.
                logger.warning("Failed to release cart lock %s: %s", lock_key, exc)
