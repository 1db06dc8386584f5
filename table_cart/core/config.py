"""Environment-driven configuration for the cart service."""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from table_cart.core.constants import (
    CART_LOCK_TTL_DEFAULT,
    CART_LOCK_WAIT_DEFAULT,
    CART_TTL_DEFAULT,
    MENU_LOOKUP_TIMEOUT_DEFAULT,
)
from table_cart.core.exceptions import ConfigurationException


def _str_to_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"true", "1", "yes", "y"}


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationException(f"{name} must be an integer, got {raw!r}") from exc


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationException(f"{name} must be a number, got {raw!r}") from exc


@dataclass(slots=True)
class LockConfig:
    enabled: bool
    ttl_seconds: int
    wait_seconds: float


@dataclass(slots=True)
class CartSettings:
    redis_url: str | None
    cart_ttl_seconds: int
    strict_mode: bool
    menu_service_url: str | None
    menu_lookup_timeout: float
    lock: LockConfig
    log_level: str = "INFO"


def load_settings() -> CartSettings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    ttl = _int_env("CART_TTL_SECONDS", CART_TTL_DEFAULT)
    if ttl <= 0:
        raise ConfigurationException("CART_TTL_SECONDS must be positive")

    strict_mode = _str_to_bool(os.getenv("CART_STRICT_MODE"))
    menu_service_url = os.getenv("MENU_SERVICE_URL") or None
    if strict_mode and not menu_service_url:
        raise ConfigurationException("CART_STRICT_MODE=true requires MENU_SERVICE_URL")

    timeout = _float_env("MENU_LOOKUP_TIMEOUT", MENU_LOOKUP_TIMEOUT_DEFAULT)
    if timeout <= 0:
        raise ConfigurationException("MENU_LOOKUP_TIMEOUT must be positive")

    lock = LockConfig(
        enabled=_str_to_bool(os.getenv("CART_LOCK_MUTATIONS"), default=True),
        ttl_seconds=_int_env("CART_LOCK_TTL_SECONDS", CART_LOCK_TTL_DEFAULT),
        wait_seconds=_float_env("CART_LOCK_WAIT_SECONDS", CART_LOCK_WAIT_DEFAULT),
    )

    return CartSettings(
        redis_url=os.getenv("REDIS_URL") or None,
        cart_ttl_seconds=ttl,
        strict_mode=strict_mode,
        menu_service_url=menu_service_url,
        menu_lookup_timeout=timeout,
        lock=lock,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
