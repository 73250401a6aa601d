from __future__ import annotations

from unittest.mock import MagicMock, patch

import httpx
from fastapi.testclient import TestClient

from cafe_backend.app import app
from cafe_backend.cart import store as cart_store
from cafe_backend.odoo.client import OdooClient
from cafe_backend.odoo.config import OdooConfig
from cafe_backend.odoo.errors import OdooError
from cafe_backend.orders import store as order_store

client = TestClient(app)

ALICE = {"x-user-id": "alice"}
BOB = {"x-user-id": "bob"}
PICKUP = {"payment_method": "CASH", "order_type": "PICKUP"}


def _fill_cart(headers: dict = ALICE) -> None:
    client.post("/api/cart", json={"menu_item_id": "americano", "quantity": 2}, headers=headers)


def _place(payload: dict | None = None, headers: dict = ALICE):
    return client.post("/api/orders", json=payload or PICKUP, headers=headers)


def _staff_client() -> TestClient:
    staff = TestClient(app)
    staff.post("/auth/login", json={"username": "staff", "password": "staff123"})
    return staff


def _odoo_client(sale_id: int = 42) -> MagicMock:
    odoo = MagicMock()
    odoo.config = OdooConfig(host="https://odoo.test/", db="cafe", username="bot", password="secret")
    odoo.create_sale_order.return_value = sale_id
    odoo.confirm_sale_order.return_value = True
    odoo.create_pos_order.return_value = 77
    return odoo


# ── Placing orders ───────────────────────────────────────────────────────


def test_empty_cart_rejected():
    resp = _place()
    assert resp.status_code == 400
    assert resp.json()["error"] == "Cart is empty"


def test_internet_card_needs_a_drink():
    resp = _place({**PICKUP, "internet_card": {"quantity": 2}})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Internet cards must be ordered with at least one drink"


def test_place_pickup_order():
    _fill_cart()
    resp = _place({**PICKUP, "notes": "No sugar"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Order created successfully"
    order = body["data"]
    assert order["status"] == "PENDING"
    assert order["payment_status"] == "PENDING"
    assert order["order_number"].startswith("ORD-")
    assert order["subtotal"] == 150
    assert order["delivery_fee"] == 0
    assert order["total"] == 150
    assert order["items"][0]["unit_price"] == 75
    assert order["status_history"][0]["status"] == "PENDING"
    assert order["integrations"]["odoo"] is None
    assert cart_store.get("alice") == []


def test_delivery_order_with_internet_cards():
    _fill_cart()
    resp = _place({"payment_method": "CARD", "order_type": "DELIVERY", "internet_card": {"quantity": 2}})
    order = resp.json()["data"]
    assert order["subtotal"] == 170
    assert order["delivery_fee"] == 15
    assert order["total"] == 185
    card_line = order["items"][-1]
    assert card_line["menu_item_id"] == "internet-card-1_5gb"
    assert card_line["total_price"] == 20
    assert order["internet_card"] == {"quantity": 2, "unit_size_gb": 1.5, "unit_price": 10.0, "total_price": 20.0}


def test_invalid_payment_method_rejected():
    _fill_cart()
    assert _place({"payment_method": "BARTER", "order_type": "PICKUP"}).status_code == 422


def test_list_and_get_orders():
    for _ in range(3):
        _fill_cart()
        _place()
    resp = client.get("/api/orders?limit=2&offset=1", headers=ALICE)
    data = resp.json()["data"]
    assert data["total"] == 3
    assert len(data["orders"]) == 2

    order_id = data["orders"][0]["id"]
    assert client.get(f"/api/orders/{order_id}", headers=ALICE).json()["data"]["id"] == order_id


def test_other_users_order_is_hidden():
    _fill_cart()
    order_id = _place().json()["data"]["id"]
    resp = client.get(f"/api/orders/{order_id}", headers={"x-user-id": "mallory"})
    assert resp.status_code == 404
    assert resp.json()["error"] == "Order not found"


def test_orders_survive_memory_reset():
    _fill_cart()
    order_id = _place().json()["data"]["id"]
    order_store.reset()
    assert order_store.get_by_id(order_id).user_id == "alice"


def test_get_all_spans_users():
    _fill_cart()
    _place()
    _fill_cart(BOB)
    _place(headers=BOB)

    assert sorted(order.user_id for order in order_store.get_all()) == ["alice", "bob"]
    order_store.get_all()[0].notes = "changed"
    assert all(order.notes is None for order in order_store.get_all())


def test_delete_order():
    _fill_cart()
    order_id = _place().json()["data"]["id"]

    assert order_store.delete(order_id) is True
    assert order_store.delete(order_id) is False
    assert client.get(f"/api/orders/{order_id}", headers=ALICE).status_code == 404

    order_store.reset()
    assert order_store.get_by_id(order_id) is None


def test_status_flow():
    data = client.get("/api/orders/status-flow").json()["data"]
    assert [step["value"] for step in data] == [
        "PENDING", "CONFIRMED", "PREPARING", "READY", "OUT_FOR_DELIVERY", "DELIVERED", "CANCELLED",
    ]
    assert data[4]["label"] == "On the Way"


# ── Status updates ───────────────────────────────────────────────────────


def test_status_update_requires_staff():
    _fill_cart()
    order_id = _place().json()["data"]["id"]
    assert TestClient(app).patch(f"/api/orders/{order_id}", json={"status": "READY"}).status_code == 401

    customer = TestClient(app)
    customer.post("/auth/login", json={"username": "customer", "password": "customer123"})
    assert customer.patch(f"/api/orders/{order_id}", json={"status": "READY"}).status_code == 403


def test_staff_updates_status():
    _fill_cart()
    order_id = _place().json()["data"]["id"]
    resp = _staff_client().patch(f"/api/orders/{order_id}", json={"status": "PREPARING", "note": "On the bar"})
    assert resp.status_code == 200
    order = resp.json()["data"]
    assert order["status"] == "PREPARING"
    assert order["status_history"][-1]["note"] == "On the bar"
    assert len(order["status_history"]) == 2


def test_final_status_cannot_change():
    _fill_cart()
    order_id = _place().json()["data"]["id"]
    staff = _staff_client()
    staff.patch(f"/api/orders/{order_id}", json={"status": "CANCELLED"})
    resp = staff.patch(f"/api/orders/{order_id}", json={"status": "PREPARING"})
    assert resp.status_code == 409
    assert resp.json()["code"] == "ORDER_FINALIZED"


def test_status_update_unknown_order():
    resp = _staff_client().patch("/api/orders/order-missing", json={"status": "READY"})
    assert resp.status_code == 404


# ── Odoo sync ────────────────────────────────────────────────────────────


@patch("cafe_backend.orders.service.create_odoo_client")
def test_sale_sync_with_auto_confirm(mock_create, odoo_env):
    odoo = _odoo_client()
    mock_create.return_value = odoo
    _fill_cart()

    resp = _place({**PICKUP, "notes": "Extra hot", "odoo": {"sale": {"auto_confirm": True}}})

    assert resp.status_code == 201
    order = resp.json()["data"]
    sync = order["integrations"]["odoo"]
    assert sync["sale_order_id"] == 42
    assert sync["sale_sync_status"] == "SUCCESS"
    assert sync["url"] == "https://odoo.test/web#model=sale.order&id=42&view_type=form"
    assert sync["last_status"] == "CONFIRMED"
    assert sync["warnings"] is None
    assert order["status"] == "CONFIRMED"
    assert order["notes"] == "Extra hot | Odoo saleId: 42"
    odoo.confirm_sale_order.assert_called_once_with(42)
    odoo.create_pos_order.assert_not_called()

    partner = odoo.create_sale_order.call_args.args[1]
    assert partner.name == "Website Customer"


@patch("cafe_backend.orders.service.create_odoo_client")
def test_sale_sync_failure_keeps_order(mock_create, odoo_env):
    odoo = _odoo_client()
    odoo.create_sale_order.side_effect = OdooError('Odoo RPC error: boom :: {"name": "x"}')
    mock_create.return_value = odoo
    _fill_cart()

    resp = _place()

    assert resp.status_code == 201
    order = resp.json()["data"]
    sync = order["integrations"]["odoo"]
    assert sync["sale_sync_status"] == "FAILED"
    assert sync["warnings"] == ["Odoo sales sync: Odoo RPC error: boom"]
    assert sync["url"] is None
    assert order["notes"] is None
    assert order["status"] == "PENDING"
    assert cart_store.get("alice") == []


@patch("cafe_backend.orders.service.create_odoo_client")
def test_pos_sync_is_opt_in(mock_create, odoo_env):
    odoo = _odoo_client()
    odoo.create_pos_order.side_effect = OdooError("No open POS session found.")
    mock_create.return_value = odoo
    _fill_cart()

    resp = _place({
        **PICKUP,
        "odoo": {
            "partner": {"name": "Mona", "email": "mona@example.com"},
            "sale": {"enable": False},
            "pos": {"enable": True, "pos_config_name": "Bar"},
        },
    })

    sync = resp.json()["data"]["integrations"]["odoo"]
    odoo.create_sale_order.assert_not_called()
    assert odoo.create_pos_order.call_args.kwargs["pos_config_name"] == "Bar"
    assert sync["pos_sync_status"] == "FAILED"
    assert sync["warnings"] == [
        "Odoo POS sync: no open POS session was found. Start a POS session in Odoo before sending kitchen tickets."
    ]


@patch("cafe_backend.orders.service.create_odoo_client")
def test_sync_skipped_without_config(mock_create):
    _fill_cart()
    _place()
    mock_create.assert_not_called()


def test_invalid_partner_email_rejected():
    _fill_cart()
    resp = _place({**PICKUP, "odoo": {"partner": {"email": "not-an-email"}}})
    assert resp.status_code == 422


def _odoo_behind(body: str, content_type: str = "text/html"):
    """Build clients from the real env config whose transport always answers *body*."""

    def build() -> OdooClient:
        config = OdooConfig.from_env()
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, text=body, headers={"content-type": content_type})
        )
        return OdooClient(config, http_client=httpx.Client(base_url=config.base_url, transport=transport))

    return build


@patch("cafe_backend.orders.service.create_odoo_client")
def test_non_json_odoo_reply_keeps_order(mock_create, odoo_env):
    mock_create.side_effect = _odoo_behind("<html>maintenance</html>")
    _fill_cart()

    resp = _place()

    assert resp.status_code == 201
    sync = resp.json()["data"]["integrations"]["odoo"]
    assert sync["sale_sync_status"] == "FAILED"
    assert sync["warnings"] == [
        "Odoo sales sync: Odoo returned a non-JSON response (HTTP 200): <html>maintenance</html>"
    ]
    assert cart_store.get("alice") == []
    assert len(order_store.get_by_user_id("alice")) == 1


@patch("cafe_backend.orders.service.create_odoo_client")
def test_non_object_odoo_reply_keeps_order(mock_create, odoo_env):
    mock_create.side_effect = _odoo_behind("[1, 2]", "application/json")
    _fill_cart()

    resp = _place()

    assert resp.status_code == 201
    assert resp.json()["data"]["integrations"]["odoo"]["sale_sync_status"] == "FAILED"
    assert cart_store.get("alice") == []


@patch("cafe_backend.orders.service.create_odoo_client")
def test_bad_odoo_timeout_setting_keeps_order(mock_create, odoo_env, monkeypatch):
    monkeypatch.setenv("ODOO_TIMEOUT_MS", "20s")
    mock_create.side_effect = _odoo_behind("<html>maintenance</html>")
    _fill_cart()

    resp = _place()

    assert resp.status_code == 201
    assert cart_store.get("alice") == []
    assert len(order_store.get_by_user_id("alice")) == 1
