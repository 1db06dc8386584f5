"""Menu item availability lookups used by strict-mode carts."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol
from urllib.parse import quote

import requests

from table_cart.core.constants import (
    MENU_ITEM_ACTIVE_STATUS,
    MENU_LOOKUP_TIMEOUT_DEFAULT,
    RESPONSE_CODE_SUCCESS,
)
from table_cart.core.exceptions import MenuLookupTimeoutException

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MenuItemAvailability:
    exists: bool
    active: bool

    @property
    def orderable(self) -> bool:
        return self.exists and self.active


NOT_FOUND = MenuItemAvailability(exists=False, active=False)


def _is_active(status: Any) -> bool:
    return str(status or "").strip().upper() == MENU_ITEM_ACTIVE_STATUS


class MenuValidationClient(Protocol):
    """Answers whether a tenant's menu item exists and can be ordered."""

    def lookup(self, tenant_id: str, menu_item_id: str) -> MenuItemAvailability:
        ...


class HttpMenuValidationClient:
    """Menu service client over HTTP.

    Accepts both a bare item body and the platform envelope
    ``{"code": 1000, "message": ..., "data": {...}}``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = MENU_LOOKUP_TIMEOUT_DEFAULT,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def _item_url(self, tenant_id: str, menu_item_id: str) -> str:
        tenant = quote(str(tenant_id), safe="")
        item = quote(str(menu_item_id), safe="")
        return f"{self.base_url}/tenants/{tenant}/menu-items/{item}"

    def lookup(self, tenant_id: str, menu_item_id: str) -> MenuItemAvailability:
        url = self._item_url(tenant_id, menu_item_id)
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.Timeout as exc:
            logger.warning("Menu lookup timed out for %s/%s", tenant_id, menu_item_id)
            raise MenuLookupTimeoutException(menu_item_id, self.timeout) from exc

        if resp.status_code == 404:
            return NOT_FOUND
        resp.raise_for_status()

        body = resp.json()
        if not isinstance(body, dict):
            return NOT_FOUND
        if "code" in body and "data" in body:
            if body.get("code") != RESPONSE_CODE_SUCCESS:
                return NOT_FOUND
            body = body.get("data")
        if not isinstance(body, dict) or not body:
            return NOT_FOUND
        return MenuItemAvailability(exists=True, active=_is_active(body.get("status")))


class StaticMenuValidationClient:
    """Fixed catalog of ``{(tenant_id, menu_item_id): status}``."""

    def __init__(self, catalog: Mapping[tuple[str, str], str] | None = None) -> None:
        self._catalog: dict[tuple[str, str], str] = dict(catalog or {})
        self.calls: list[tuple[str, str]] = []

    def add_item(self, tenant_id: str, menu_item_id: str, status: str = MENU_ITEM_ACTIVE_STATUS) -> None:
        self._catalog[(tenant_id, menu_item_id)] = status

    def lookup(self, tenant_id: str, menu_item_id: str) -> MenuItemAvailability:
        self.calls.append((tenant_id, menu_item_id))
        status = self._catalog.get((tenant_id, menu_item_id))
        if status is None:
            return NOT_FOUND
        return MenuItemAvailability(exists=True, active=_is_active(status))
