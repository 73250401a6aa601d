from __future__ import annotations

import pytest

from cafe_backend.cart import store as cart_store
from cafe_backend.menu.cache import clear_cache
from cafe_backend.orders import store as order_store

_ISOLATED_VARS = (
    "ODOO_HOST",
    "ODOO_DB",
    "ODOO_USERNAME",
    "ODOO_PASSWORD",
    "ODOO_API_KEY",
    "MENU_SOURCE",
    "MENU_CACHE_TTL_SECONDS",
    "NETLIFY",
    "VERCEL",
    "AWS_LAMBDA_FUNCTION_NAME",
)


@pytest.fixture(autouse=True)
def isolated_state(tmp_path, monkeypatch):
    """Each test gets its own database file, empty stores and a cold menu cache."""
    for var in _ISOLATED_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("CAFE_DB_PATH", str(tmp_path / "database.json"))
    cart_store.reset()
    order_store.reset()
    clear_cache()
    yield
    cart_store.reset()
    order_store.reset()
    clear_cache()


@pytest.fixture
def odoo_env(monkeypatch):
    monkeypatch.setenv("ODOO_HOST", "https://odoo.test")
    monkeypatch.setenv("ODOO_DB", "cafe")
    monkeypatch.setenv("ODOO_USERNAME", "bot@cafe.test")
    monkeypatch.setenv("ODOO_API_KEY", "secret")
