from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import patch

from fastapi.testclient import TestClient

from cafe_backend.app import app
from cafe_backend.orders import store as order_store
from cafe_backend.orders.models import Order, OrderItem, PaymentMethod

client = TestClient(app)

ALICE = {"x-user-id": "alice"}


def _past_order(order_id: str, menu_item_id: str) -> None:
    now = datetime.now(timezone.utc)
    order_store.create(Order(
        id=order_id,
        order_number=order_id.upper(),
        user_id="alice",
        payment_method=PaymentMethod.CASH,
        subtotal=40,
        total=40,
        items=[OrderItem(id=f"{order_id}-1", menu_item_id=menu_item_id, quantity=1, unit_price=40, total_price=40)],
        created_at=now,
        updated_at=now,
    ))


def test_recommendation_with_defaults():
    resp = client.post("/api/recommendations", headers=ALICE)
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Drink suggestion generated"

    data = body["data"]
    assert data["user_id"] == "alice"
    assert data["recommendation"]["item"]["id"]
    assert set(data["recommendation"]) == {"item", "suggested_size", "suggested_flavors", "reasons"}
    assert len(data["alternatives"]) == 3
    assert data["personalization"] == {"favorites": [], "used_history": False}


def test_iced_no_milk_prefers_americano():
    resp = client.post("/api/recommendations", json={
        "temperature": "iced",
        "caffeine": "high",
        "sweetness": "low",
        "milk": "no-milk",
        "sizePreference": "Large",
        "timeOfDay": "morning",
    })
    data = resp.json()["data"]
    assert data["recommendation"]["item"]["id"] == "americano"
    assert data["recommendation"]["suggested_size"] == "Large"
    assert "Works well iced" in data["recommendation"]["reasons"]
    assert data["user_id"] == "demo-user"


def test_snake_case_field_names_accepted():
    resp = client.post("/api/recommendations", json={"time_of_day": "evening", "featured_boost": False})
    assert resp.status_code == 200


def test_flavors_are_echoed():
    resp = client.post("/api/recommendations", json={"flavors": ["Caramel", "Vanilla", "Hazelnut"]})
    assert resp.json()["data"]["recommendation"]["suggested_flavors"] == ["Caramel", "Vanilla"]


def test_invalid_preferences_rejected():
    for body in (
        {"temperature": "lukewarm"},
        {"caffeine": "extreme"},
        {"budget": -5},
        {"flavors": [""]},
        {"sizePreference": "Huge"},
        ["iced"],
    ):
        resp = client.post("/api/recommendations", json=body)
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert resp.json()["error"] == "Invalid request body"
        assert resp.json()["message"]


def test_invalid_preferences_list_every_problem():
    resp = client.post("/api/recommendations", json={"temperature": "lukewarm", "budget": 0})
    assert resp.json()["message"].count("; ") == 1


def test_favorite_from_history_is_promoted():
    _past_order("order-a", "turkish-coffee")
    _past_order("order-b", "karak-chai")
    _past_order("order-c", "turkish-coffee")
    prefs = {"temperature": "hot", "caffeine": "high", "sweetness": "low", "milk": "no-milk"}

    anonymous = client.post("/api/recommendations", json=prefs).json()["data"]
    assert anonymous["recommendation"]["item"]["id"] == "americano"

    data = client.post("/api/recommendations", json=prefs, headers=ALICE).json()["data"]
    assert data["personalization"] == {"favorites": ["turkish-coffee", "karak-chai"], "used_history": True}
    assert data["recommendation"]["item"]["id"] == "turkish-coffee"
    assert [a["item"]["id"] for a in data["alternatives"]] == ["americano", "espresso-single", "espresso-double"]


@patch("cafe_backend.menu.service.get_all_menu_items", return_value=[])
def test_empty_menu_returns_400(mock_items):
    resp = client.post("/api/recommendations", json={})
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "No available items to suggest", "code": "BAD_REQUEST"}
