"""Line and cart totals."""
from __future__ import annotations

from decimal import Decimal

from table_cart.domain.cart import ZERO, Cart, CartLine


def calc_modifiers_total(line: CartLine) -> Decimal:
    return sum((modifier.price_delta for modifier in line.modifiers), ZERO)


def recompute(cart: Cart) -> Cart:
    """Recompute every derived total of ``cart`` in place and return it.

    line_total = (unit_price + modifiers_total_per_unit) * quantity;
    the cart totals are plain sums over the lines.
    """
    total_price = ZERO
    total_items = 0
    for line in cart.items:
        line.modifiers_total_per_unit = calc_modifiers_total(line)
        line.line_total = (line.unit_price + line.modifiers_total_per_unit) * line.quantity
        total_price += line.line_total
        total_items += line.quantity

    cart.total_price = total_price
    cart.total_items = total_items
    return cart
