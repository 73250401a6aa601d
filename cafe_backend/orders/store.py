"""
Orders grouped per user, loaded lazily from the JSON database and written
back in full on every change.
"""
from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from ..errors import DatabaseError
from ..storage.json_database import read_database, write_database
from .models import Order

logger = logging.getLogger(__name__)

_orders_by_user: dict[str, list[Order]] = {}
_loaded = False


def _ensure_loaded() -> None:
    global _loaded
    if _loaded:
        return
    _loaded = True
    try:
        stored = read_database()["orders"]
    except OSError:
        logger.warning("Failed to load orders from database", exc_info=True)
        return

    for raw in stored if isinstance(stored, list) else []:
        try:
            order = Order.model_validate(raw)
        except ValidationError:
            logger.warning("Skipping malformed stored order", exc_info=True)
            continue
        _orders_by_user.setdefault(order.user_id, []).append(order)


def _persist() -> None:
    try:
        data = read_database()
        data["orders"] = [
            order.model_dump(mode="json") for orders in _orders_by_user.values() for order in orders
        ]
        write_database(data)
    except (DatabaseError, OSError):
        logger.warning("Failed to persist orders", exc_info=True)


def _owner_of(order_id: str) -> str | None:
    for user_id, orders in _orders_by_user.items():
        if any(order.id == order_id for order in orders):
            return user_id
    return None


def get_all() -> list[Order]:
    _ensure_loaded()
    return [order.model_copy(deep=True) for orders in _orders_by_user.values() for order in orders]


def get_by_id(order_id: str) -> Order | None:
    _ensure_loaded()
    for orders in _orders_by_user.values():
        for order in orders:
            if order.id == order_id:
                return order.model_copy(deep=True)
    return None


def get_by_user_id(user_id: str) -> list[Order]:
    _ensure_loaded()
    return [order.model_copy(deep=True) for order in _orders_by_user.get(user_id, [])]


def create(order: Order) -> Order:
    _ensure_loaded()
    stored = order.model_copy(deep=True)
    _orders_by_user.setdefault(order.user_id, []).append(stored)
    _persist()
    return stored.model_copy(deep=True)


def update(order_id: str, updates: dict[str, Any]) -> Order | None:
    """Shallow-merge *updates* into the stored order; ``created_at`` never changes."""
    _ensure_loaded()
    owner = _owner_of(order_id)
    if owner is None:
        return None

    orders = _orders_by_user[owner]
    index = next(i for i, order in enumerate(orders) if order.id == order_id)
    current = orders[index]
    merged = Order.model_validate({
        **current.model_dump(),
        **{key: value for key, value in updates.items() if key not in ("id", "created_at")},
    })
    if merged.user_id != owner:
        # Ownership stays with the user who placed the order.
        merged = merged.model_copy(update={"user_id": owner})

    orders[index] = merged
    _persist()
    return merged.model_copy(deep=True)


def delete(order_id: str) -> bool:
    _ensure_loaded()
    owner = _owner_of(order_id)
    if owner is None:
        return False
    _orders_by_user[owner] = [order for order in _orders_by_user[owner] if order.id != order_id]
    _persist()
    return True


def reset() -> None:
    """Forget in-memory orders so the next read reloads from disk. Intended for tests."""
    global _loaded
    _orders_by_user.clear()
    _loaded = False
