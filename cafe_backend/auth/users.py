"""Seeded accounts: a walk-in customer and the café staff who manage orders.

The staff password can be set with ``CAFE_STAFF_PASSWORD`` so a deployed
counter does not keep the demo password.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import bcrypt
from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_users: dict[str, dict[str, Any]] = {}

CUSTOMER_ROLE = "user"
STAFF_ROLE = "admin"


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def _seed_users() -> None:
    """Pre-seed the customer and staff accounts on import."""
    _users.clear()
    _users["customer"] = {"password_hash": _hash_password("customer123"), "role": CUSTOMER_ROLE}
    staff_password = os.getenv("CAFE_STAFF_PASSWORD") or "staff123"
    _users["staff"] = {"password_hash": _hash_password(staff_password), "role": STAFF_ROLE}


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{username, role}`` or ``None``."""
    record = _users.get(username)
    if record and _verify_password(password, record["password_hash"]):
        return {"username": username, "role": record["role"]}
    return None


_seed_users()
