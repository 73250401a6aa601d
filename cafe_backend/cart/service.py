from __future__ import annotations

import time
import uuid

from ..errors import BadRequestError, NotFoundError
from ..menu.models import MenuItem
from ..menu.service import get_item_by_id
from . import store
from .models import AddToCartRequest, CartItem, CartTotals

MAX_QUANTITY = 99
TAX_RATE = 0.14


def unit_price(
    item: MenuItem,
    size: str | None = None,
    flavor: str | None = None,
    toppings: list[str] | None = None,
) -> float:
    """Base price plus the chosen options; unknown option names add nothing."""
    price = item.price
    if size:
        price += next((s.price_modifier for s in item.sizes if s.name == size), 0.0)
    if flavor:
        price += next((f.price for f in item.flavors if f.name == flavor), 0.0)
    for name in toppings or []:
        price += next((t.price for t in item.toppings if t.name == name), 0.0)
    return price


def _new_cart_item_id() -> str:
    return f"cart-item-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


def add_to_cart(user_id: str, request: AddToCartRequest) -> CartItem:
    if request.quantity > MAX_QUANTITY:
        raise BadRequestError(f"Maximum quantity is {MAX_QUANTITY}")

    menu_item = get_item_by_id(request.menu_item_id)
    if menu_item is None:
        raise NotFoundError("Menu item not found.")

    toppings = request.toppings or []
    price = unit_price(menu_item, request.size, request.flavor, toppings)
    line = CartItem(
        id=_new_cart_item_id(),
        menu_item_id=request.menu_item_id,
        quantity=request.quantity,
        size=request.size,
        flavor=request.flavor,
        toppings=toppings,
        price=round(price * request.quantity, 2),
        menu_item=menu_item,
    )
    store.add_item(user_id, line)
    return line


def update_cart_item(user_id: str, cart_item_id: str, quantity: int) -> None:
    if quantity > MAX_QUANTITY:
        raise BadRequestError(f"Maximum quantity is {MAX_QUANTITY}")
    store.update_quantity(user_id, cart_item_id, quantity)


def calculate_totals(items: list[CartItem]) -> CartTotals:
    subtotal = sum(item.price for item in items)
    tax = subtotal * TAX_RATE
    # Delivery is priced at checkout once the order type is known.
    delivery_fee = 0.0
    return CartTotals(
        subtotal=round(subtotal, 2),
        tax=round(tax, 2),
        delivery_fee=delivery_fee,
        total=round(subtotal + tax + delivery_fee, 2),
        item_count=sum(item.quantity for item in items),
    )
