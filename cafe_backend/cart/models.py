from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, Field

from ..menu.models import MenuItem


class CartItem(BaseModel):
    id: str
    menu_item_id: str
    quantity: int
    size: str | None = None
    flavor: str | None = None
    toppings: list[str] = Field(default_factory=list)
    price: float = Field(..., description="Line total for this entry")
    menu_item: MenuItem | None = None


class AddToCartRequest(BaseModel):
    menu_item_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    size: str | None = Field(default=None, min_length=1)
    flavor: str | None = Field(default=None, min_length=1)
    toppings: list[Annotated[str, Field(min_length=1)]] | None = None


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(..., gt=0)


class CartTotals(BaseModel):
    subtotal: float
    tax: float
    delivery_fee: float
    total: float
    item_count: int


class CartOut(BaseModel):
    items: list[CartItem]
    totals: CartTotals
