"""Stable, order-independent identity for cart lines."""
from __future__ import annotations

import hashlib
import json
from typing import Any, Iterable

from table_cart.domain.cart import Modifier, coerce_modifiers


def canonicalize_modifiers(modifiers: Iterable[Modifier | dict[str, Any]] | None) -> tuple[Modifier, ...]:
    """Deduplicate on (group_id, option_id) and sort by it.

    The first occurrence of a duplicated option wins.
    """
    unique: dict[tuple[str, str], Modifier] = {}
    for modifier in coerce_modifiers(modifiers):
        unique.setdefault(modifier.identity, modifier)
    return tuple(unique[identity] for identity in sorted(unique))


def derive_item_key(menu_item_id: str, modifiers: Iterable[Modifier | dict[str, Any]] | None = None) -> str:
    """Hash the menu item id together with the canonical modifier set.

    Only group and option ids take part; display names and price deltas do
    not change the identity of a line.
    """
    canonical = canonicalize_modifiers(modifiers)
    payload = {
        "menuItemId": str(menu_item_id),
        "modifiers": [[modifier.group_id, modifier.option_id] for modifier in canonical],
    }
    serialized = json.dumps(payload, ensure_ascii=False, separators=(",", ":"), sort_keys=True)
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()
