from __future__ import annotations

from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from table_cart.core.constants import RESPONSE_CODE_SUCCESS
from table_cart.core.exceptions import CartException
from table_cart.domain.cart import Cart, Modifier
from table_cart.services.cart_service import CartService

router = APIRouter(prefix="/tenants/{tenant_id}/tables/{table_id}/cart", tags=["cart"])


# =============================================================================
# Pydantic Models
# =============================================================================


class ModifierIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    group_id: str = Field(..., alias="groupId")
    option_id: str = Field(..., alias="optionId")
    name: str = ""
    price_delta: Decimal = Field(Decimal("0"), alias="priceDelta")

    def to_modifier(self) -> Modifier:
        return Modifier(
            group_id=self.group_id,
            option_id=self.option_id,
            name=self.name,
            price_delta=self.price_delta,
        )


class AddToCartRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    menu_item_id: str = Field(..., alias="menuItemId", min_length=1)
    name: str = Field(..., min_length=1)
    quantity: int
    unit_price: Decimal = Field(..., alias="unitPrice")
    modifiers: list[ModifierIn] = Field(default_factory=list)
    notes: str | None = None


class UpdateQuantityRequest(BaseModel):
    quantity: int


# =============================================================================
# Helpers
# =============================================================================


def get_cart_service(request: Request) -> CartService:
    return request.app.state.cart_service


def envelope(message: str, cart: Cart | None = None) -> dict[str, Any]:
    return {
        "code": RESPONSE_CODE_SUCCESS,
        "message": message,
        "data": cart.to_dict() if cart is not None else None,
    }


async def cart_exception_handler(_request: Request, exc: CartException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content={"code": exc.error_code, "message": exc.message, "data": None},
    )


# =============================================================================
# Routes
# =============================================================================


@router.get("")
def get_cart(tenant_id: str, table_id: str, service: CartService = Depends(get_cart_service)):
    """Current cart for the table (empty when none)."""
    return envelope("Get cart success", service.get_cart(tenant_id, table_id))


@router.post("/items")
def add_to_cart(
    tenant_id: str,
    table_id: str,
    body: AddToCartRequest,
    service: CartService = Depends(get_cart_service),
):
    cart = service.add_line(
        tenant_id,
        table_id,
        menu_item_id=body.menu_item_id,
        name=body.name,
        quantity=body.quantity,
        unit_price=body.unit_price,
        modifiers=[modifier.to_modifier() for modifier in body.modifiers],
        notes=body.notes,
    )
    return envelope("Item added to cart", cart)


@router.patch("/items/{item_key}")
def update_quantity(
    tenant_id: str,
    table_id: str,
    item_key: str,
    body: UpdateQuantityRequest,
    service: CartService = Depends(get_cart_service),
):
    cart = service.update_quantity(tenant_id, table_id, item_key, body.quantity)
    return envelope("Cart item quantity updated", cart)


@router.delete("/items/{item_key}")
def remove_item(
    tenant_id: str,
    table_id: str,
    item_key: str,
    service: CartService = Depends(get_cart_service),
):
    cart = service.remove_line(tenant_id, table_id, item_key)
    return envelope("Item removed", cart)


@router.delete("")
def clear_cart(tenant_id: str, table_id: str, service: CartService = Depends(get_cart_service)):
    service.clear(tenant_id, table_id)
    return envelope("Cart cleared")
