"""Cart domain: value types, line identity and totals."""

from table_cart.domain.aggregator import recompute
from table_cart.domain.cart import Cart, CartLine, Modifier
from table_cart.domain.item_key import canonicalize_modifiers, derive_item_key

__all__ = [
    "Cart",
    "CartLine",
    "Modifier",
    "canonicalize_modifiers",
    "derive_item_key",
    "recompute",
]
