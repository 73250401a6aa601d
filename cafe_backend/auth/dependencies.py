from __future__ import annotations

from fastapi import HTTPException, Request

from .users import STAFF_ROLE

DEFAULT_USER_ID = "demo-user"


def get_current_user(request: Request) -> dict | None:
    return request.session.get("user")


def get_user_id(request: Request) -> str:
    """Whose cart and orders this request touches.

    A logged-in session wins, then the ``x-user-id`` header, then the shared
    demo user.
    """
    user = request.session.get("user")
    if user:
        return user["username"]
    return request.headers.get("x-user-id") or DEFAULT_USER_ID


def require_user(request: Request) -> dict:
    user = request.session.get("user")
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_admin(request: Request) -> dict:
    """401 without a session, 403 unless the session user is staff."""
    user = require_user(request)
    if user.get("role") != STAFF_ROLE:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
