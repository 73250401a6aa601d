"""
Per-user carts held in memory and mirrored to the JSON database.

Callers always get deep copies back, so mutating a returned item never leaks
into the store.
"""
from __future__ import annotations

import logging

from pydantic import ValidationError

from ..errors import DatabaseError
from ..storage.json_database import read_database, write_database
from .models import CartItem

logger = logging.getLogger(__name__)

_carts: dict[str, list[CartItem]] = {}


def _copy(items: list[CartItem]) -> list[CartItem]:
    return [item.model_copy(deep=True) for item in items]


def _internal_cart(user_id: str) -> list[CartItem]:
    if user_id in _carts:
        return _carts[user_id]

    cart: list[CartItem] = []
    try:
        stored = read_database()["carts"].get(user_id)
        if isinstance(stored, list):
            cart = [CartItem.model_validate(raw) for raw in stored]
    except (OSError, ValidationError, AttributeError):
        logger.warning("Failed to load cart for %s from database", user_id, exc_info=True)
        cart = []

    _carts[user_id] = cart
    return cart


def _persist(user_id: str, items: list[CartItem]) -> None:
    try:
        data = read_database()
        data["carts"][user_id] = [item.model_dump(mode="json") for item in items]
        write_database(data)
    except (DatabaseError, OSError):
        logger.warning("Failed to persist cart for %s", user_id, exc_info=True)


def _same_line(a: CartItem, b: CartItem) -> bool:
    return (
        a.menu_item_id == b.menu_item_id
        and a.size == b.size
        and a.flavor == b.flavor
        and a.toppings == b.toppings
    )


def get(user_id: str) -> list[CartItem]:
    return _copy(_internal_cart(user_id))


def set_items(user_id: str, items: list[CartItem]) -> None:
    _carts[user_id] = _copy(items)
    _persist(user_id, _carts[user_id])


def add_item(user_id: str, item: CartItem) -> CartItem:
    """Add *item*, folding it into an identical line if one exists."""
    cart = _internal_cart(user_id)
    existing = next((line for line in cart if _same_line(line, item)), None)
    if existing is not None:
        existing.quantity += item.quantity
        existing.price = round(existing.price + item.price, 2)
        stored = existing
    else:
        stored = item.model_copy(deep=True)
        cart.append(stored)

    _persist(user_id, cart)
    return stored.model_copy(deep=True)


def remove_item(user_id: str, cart_item_id: str) -> None:
    _carts[user_id] = [item for item in _internal_cart(user_id) if item.id != cart_item_id]
    _persist(user_id, _carts[user_id])


def update_quantity(user_id: str, cart_item_id: str, quantity: int) -> CartItem | None:
    cart = _internal_cart(user_id)
    existing = next((item for item in cart if item.id == cart_item_id), None)
    if existing is None:
        return None

    if existing.quantity > 0:
        unit_price = existing.price / existing.quantity
        existing.price = round(unit_price * quantity, 2)
    existing.quantity = quantity

    _persist(user_id, cart)
    return existing.model_copy(deep=True)


def clear(user_id: str) -> None:
    _carts[user_id] = []
    _persist(user_id, [])


def reset() -> None:
    """Forget every in-memory cart. Intended for tests."""
    _carts.clear()
