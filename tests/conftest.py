"""Shared pytest fixtures for cart tests."""
from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from table_cart.integrations.cart_store import InMemoryCartStore
from table_cart.integrations.menu_client import StaticMenuValidationClient
from table_cart.services.cart_service import CartService

TENANT = "tenant-1"
TABLE = "table-7"


@dataclass
class FakeRedisClient:
    data: dict[str, str] = field(default_factory=dict)
    expiry: dict[str, int] = field(default_factory=dict)
    setex_calls: list[tuple[str, int]] = field(default_factory=list)

    def ping(self) -> bool:
        return True

    def get(self, key: str):
        return self.data.get(key)

    def setex(self, key: str, ttl: int, value: str) -> bool:
        self.data[key] = value
        self.expiry[key] = ttl
        self.setex_calls.append((key, ttl))
        return True

    def delete(self, key: str) -> int:
        existed = 1 if key in self.data else 0
        self.data.pop(key, None)
        self.expiry.pop(key, None)
        return existed

    def set(self, key: str, value: str, nx: bool = False, ex: int | None = None):
        if nx and key in self.data:
            return False
        self.data[key] = value
        if ex is not None:
            self.expiry[key] = ex
        return True

    def eval(self, _script: str, _keys_count: int, key: str, token: str) -> int:
        if self.data.get(key) == token:
            self.delete(key)
            return 1
        return 0


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_redis(monkeypatch) -> FakeRedisClient:
    import table_cart.integrations.redis_cart as redis_cart_module

    client = FakeRedisClient()
    monkeypatch.setattr(redis_cart_module.redis, "from_url", lambda *args, **kwargs: client)
    return client


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store(clock: FakeClock) -> InMemoryCartStore:
    return InMemoryCartStore(lock_wait_seconds=0.05, clock=clock)


@pytest.fixture
def service(memory_store: InMemoryCartStore) -> CartService:
    return CartService(memory_store, ttl_seconds=600)


@pytest.fixture
def menu_client() -> StaticMenuValidationClient:
    client = StaticMenuValidationClient()
    client.add_item(TENANT, "burger")
    client.add_item(TENANT, "fries")
    client.add_item(TENANT, "soup", status="INACTIVE")
    return client


@pytest.fixture
def strict_service(memory_store: InMemoryCartStore, menu_client: StaticMenuValidationClient) -> CartService:
    return CartService(memory_store, menu_client, strict_mode=True, ttl_seconds=600)
