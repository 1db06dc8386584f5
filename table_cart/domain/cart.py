"""Cart, cart line and modifier value types with their persisted shape."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable

ZERO = Decimal("0")
MONEY_STEP = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """Coerce a price-like value to Decimal without float rounding noise."""
    if isinstance(value, Decimal):
        return value
    if value is None or value == "":
        return ZERO
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid money value: {value!r}") from exc


def quantize_money(value: Decimal) -> Decimal:
    """Round to whole cents."""
    return value.quantize(MONEY_STEP, rounding=ROUND_HALF_UP)


def money_to_json(value: Decimal) -> int | float:
    """JSON number for a Decimal; integral amounts stay integers.

    Amounts are rounded to cents first, so anything below 10**13 survives
    the float conversion and reads back exactly with ``parse_float=Decimal``.
    """
    value = quantize_money(value)
    if value == value.to_integral_value():
        return int(value)
    return float(value)


@dataclass(frozen=True, slots=True)
class Modifier:
    """Chosen option within a modifier group, e.g. size=large."""

    group_id: str
    option_id: str
    name: str = ""
    price_delta: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "price_delta", to_money(self.price_delta))

    @property
    def identity(self) -> tuple[str, str]:
        return (self.group_id, self.option_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "groupId": self.group_id,
            "optionId": self.option_id,
            "name": self.name,
            "priceDelta": money_to_json(self.price_delta),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Modifier:
        return cls(
            group_id=str(data.get("groupId", data.get("group_id", ""))),
            option_id=str(data.get("optionId", data.get("option_id", ""))),
            name=str(data.get("name", "")),
            price_delta=to_money(data.get("priceDelta", data.get("price_delta", 0))),
        )

    @classmethod
    def coerce(cls, value: Modifier | dict[str, Any]) -> Modifier:
        if isinstance(value, Modifier):
            return value
        return cls.from_dict(value)


@dataclass
class CartLine:
    """Single line in a cart.

    ``modifiers_total_per_unit`` and ``line_total`` are derived and written
    only by :func:`table_cart.domain.aggregator.recompute`.
    """

    item_key: str
    menu_item_id: str
    name: str
    quantity: int
    unit_price: Decimal
    modifiers: tuple[Modifier, ...] = ()
    notes: str | None = None
    modifiers_total_per_unit: Decimal = ZERO
    line_total: Decimal = ZERO

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "itemKey": self.item_key,
            "menuItemId": self.menu_item_id,
            "name": self.name,
            "quantity": int(self.quantity),
            "unitPrice": money_to_json(self.unit_price),
            "modifiers": [modifier.to_dict() for modifier in self.modifiers],
            "modifiersTotalPerUnit": money_to_json(self.modifiers_total_per_unit),
            "lineTotal": money_to_json(self.line_total),
        }
        if self.notes is not None:
            data["notes"] = self.notes
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CartLine:
        notes = data.get("notes")
        return cls(
            item_key=str(data.get("itemKey", "")),
            menu_item_id=str(data.get("menuItemId", "")),
            name=str(data.get("name", "")),
            quantity=int(data.get("quantity", 0)),
            unit_price=to_money(data.get("unitPrice", 0)),
            modifiers=tuple(Modifier.from_dict(raw) for raw in data.get("modifiers") or []),
            notes=str(notes) if notes is not None else None,
            modifiers_total_per_unit=to_money(data.get("modifiersTotalPerUnit", 0)),
            line_total=to_money(data.get("lineTotal", 0)),
        )


@dataclass
class Cart:
    """Ordered cart lines plus cached totals."""

    items: list[CartLine] = field(default_factory=list)
    total_price: Decimal = ZERO
    total_items: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find_line(self, item_key: str) -> CartLine | None:
        for line in self.items:
            if line.item_key == item_key:
                return line
        return None

    def item_keys(self) -> list[str]:
        return [line.item_key for line in self.items]

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [line.to_dict() for line in self.items],
            "totalPrice": money_to_json(self.total_price),
            "totalItems": int(self.total_items),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Cart:
        raw_items = data.get("items")
        if not isinstance(raw_items, list):
            raw_items = []
        return cls(
            items=[CartLine.from_dict(raw) for raw in raw_items if isinstance(raw, dict)],
            total_price=to_money(data.get("totalPrice", 0)),
            total_items=int(data.get("totalItems", 0)),
        )

    @classmethod
    def empty(cls) -> Cart:
        return cls()


def coerce_modifiers(modifiers: Iterable[Modifier | dict[str, Any]] | None) -> list[Modifier]:
    if not modifiers:
        return []
    return [Modifier.coerce(modifier) for modifier in modifiers]
