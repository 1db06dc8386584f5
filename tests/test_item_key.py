from __future__ import annotations

from decimal import Decimal

from table_cart.domain.cart import Modifier
from table_cart.domain.item_key import canonicalize_modifiers, derive_item_key

LARGE = Modifier("size", "large", "Large", Decimal("2"))
CHEESE = Modifier("extras", "cheese", "Cheese", Decimal("1.5"))
BACON = Modifier("extras", "bacon", "Bacon", Decimal("3"))


def test_same_modifiers_in_any_order_give_same_key() -> None:
    first = derive_item_key("burger", [LARGE, CHEESE, BACON])
    second = derive_item_key("burger", [BACON, LARGE, CHEESE])

    assert first == second


def test_key_is_deterministic_across_calls() -> None:
    assert derive_item_key("burger", [LARGE]) == derive_item_key("burger", [LARGE])
    assert derive_item_key("burger") == derive_item_key("burger", [])


def test_empty_modifier_set_differs_from_non_empty() -> None:
    assert derive_item_key("burger", []) != derive_item_key("burger", [LARGE])


def test_different_menu_items_differ() -> None:
    assert derive_item_key("burger", [LARGE]) != derive_item_key("fries", [LARGE])


def test_different_options_in_same_group_differ() -> None:
    small = Modifier("size", "small", "Small", Decimal("0"))

    assert derive_item_key("burger", [LARGE]) != derive_item_key("burger", [small])


def test_display_fields_do_not_change_identity() -> None:
    renamed = Modifier("size", "large", "Grande", Decimal("5"))

    assert derive_item_key("burger", [LARGE]) == derive_item_key("burger", [renamed])


def test_dict_modifiers_match_dataclass_modifiers() -> None:
    raw = {"groupId": "size", "optionId": "large", "name": "Large", "priceDelta": 2}

    assert derive_item_key("burger", [raw]) == derive_item_key("burger", [LARGE])


def test_key_is_sha256_hex_digest() -> None:
    key = derive_item_key("burger")

    assert len(key) == 64
    assert key == derive_item_key("burger", None)


def test_canonicalize_sorts_and_drops_duplicates() -> None:
    duplicate = Modifier("size", "large", "Large again", Decimal("9"))

    result = canonicalize_modifiers([LARGE, CHEESE, duplicate, BACON])

    assert [m.identity for m in result] == [
        ("extras", "bacon"),
        ("extras", "cheese"),
        ("size", "large"),
    ]
    assert result[2].name == "Large"
