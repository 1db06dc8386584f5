"""Custom exceptions for the table cart."""
from __future__ import annotations


class CartException(Exception):
    """Base exception for all cart errors.

    Carries the platform error code and the HTTP status the transport layer
    should answer with.
    """

    error_code: int = 4500
    http_status: int = 400

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class LineNotFoundException(CartException):
    """No line with the given item key in the cart."""

    error_code = 4502
    http_status = 404

    def __init__(self, item_key: str) -> None:
        super().__init__(f"Cart item {item_key} not found")
        self.item_key = item_key


class PriceInvalidException(CartException):
    """Unit price or modifier price delta is negative or not a number."""

    error_code = 4503

    def __init__(self, price: object, field: str = "unit price") -> None:
        super().__init__(f"Invalid {field} {price}. Must be a non-negative number")
        self.price = price
        self.field = field


class QuantityInvalidException(CartException):
    """Quantity is below one."""

    error_code = 4505

    def __init__(self, quantity: object) -> None:
        super().__init__(f"Invalid quantity {quantity}. Must be greater than 0")
        self.quantity = quantity


class ItemUnavailableException(CartException):
    """Menu item does not exist or is not active."""

    error_code = 4506

    def __init__(self, tenant_id: str, menu_item_id: str, reason: str = "not available") -> None:
        super().__init__(f"Menu item {menu_item_id} is {reason}")
        self.tenant_id = tenant_id
        self.menu_item_id = menu_item_id
        self.reason = reason


class CartConflictException(CartException):
    """Another mutation holds the cart; the caller may retry."""

    error_code = 4509
    http_status = 409

    def __init__(self, key: str) -> None:
        super().__init__(f"Cart {key} is being modified, retry later")
        self.key = key


class MenuLookupTimeoutException(CartException):
    """Menu service did not answer within the configured timeout."""

    error_code = 4510
    http_status = 504

    def __init__(self, menu_item_id: str, timeout: float) -> None:
        super().__init__(f"Menu lookup for {menu_item_id} timed out after {timeout}s")
        self.menu_item_id = menu_item_id
        self.timeout = timeout


class ConfigurationException(CartException):
    """Configuration errors."""

    error_code = 4900
    http_status = 500
