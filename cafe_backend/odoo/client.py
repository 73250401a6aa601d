from __future__ import annotations

import json
import logging
import time
from typing import Any

import httpx

from ..orders.models import Order, OrderItem
from .config import OdooConfig
from .errors import OdooError
from .models import PartnerInput

logger = logging.getLogger(__name__)

_PARTNER_FIELDS = ("name", "email", "phone", "street", "city", "zip")


def _first_id(value: Any) -> int | None:
    """Odoo many2one fields come back as ``[id, display_name]`` or ``False``."""
    if isinstance(value, (list, tuple)) and value:
        return value[0]
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


class OdooClient:
    """Thin JSON-RPC client for the Odoo ``/jsonrpc`` endpoint."""

    def __init__(self, config: OdooConfig, http_client: httpx.Client | None = None) -> None:
        self.config = config
        self._uid: int | None = None
        self._http = http_client or httpx.Client(
            base_url=config.base_url,
            timeout=config.timeout_ms / 1000,
            headers={"Content-Type": "application/json"},
            verify=not config.insecure_ssl,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "OdooClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ── transport ────────────────────────────────────────────────────────

    def _call(self, service: str, method: str, args: list[Any]) -> dict[str, Any]:
        payload = {
            "jsonrpc": "2.0",
            "method": "call",
            "params": {"service": service, "method": method, "args": args},
            "id": int(time.time() * 1000),
        }
        response = self._http.post("/jsonrpc", json=payload)
        response.raise_for_status()
        try:
            data = response.json()
        except ValueError as exc:
            raise OdooError(
                f"Odoo returned a non-JSON response (HTTP {response.status_code}): {response.text[:200]}"
            ) from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise OdooError(f"Unexpected Odoo response: {json.dumps(data)[:200]}")
        return data

    def authenticate(self) -> int:
        if self._uid:
            return self._uid

        data = self._call(
            "common",
            "authenticate",
            [self.config.db, self.config.username, self.config.password, {}],
        )
        if data.get("error"):
            raise OdooError(f"Odoo auth failed: {json.dumps(data['error'])}")
        result = data.get("result")
        if isinstance(result, int) and not isinstance(result, bool) and result > 0:
            self._uid = result
            return result
        raise OdooError(f"Odoo auth failed: {json.dumps(data)}")

    def rpc(
        self,
        model: str,
        method: str,
        args: list[Any] | None = None,
        kwargs: dict[str, Any] | None = None,
    ) -> Any:
        uid = self.authenticate()
        data = self._call(
            "object",
            "execute_kw",
            [self.config.db, uid, self.config.password, model, method, args or [], kwargs or {}],
        )
        error = data.get("error")
        if error:
            if not isinstance(error, dict):
                raise OdooError(f"Odoo RPC error: {error}")
            raise OdooError(
                f"Odoo RPC error: {error.get('message')} :: {json.dumps(error.get('data'))}"
            )
        return data.get("result")

    # ── generic helpers ──────────────────────────────────────────────────

    def search_read(
        self,
        model: str,
        domain: list[Any] | None = None,
        fields: list[str] | None = None,
        **kwargs: Any,
    ) -> list[dict[str, Any]]:
        options: dict[str, Any] = {"fields": fields} if fields else {}
        options.update(kwargs)
        return self.rpc(model, "search_read", [domain or []], options) or []

    def search_count(self, model: str, domain: list[Any] | None = None) -> int:
        return int(self.rpc(model, "search_count", [domain or []]) or 0)

    def ping(self) -> dict[str, int]:
        """Authenticate and run a tiny ``search_count`` on ``res.partner``."""
        uid = self.authenticate()
        partner_count = self.search_count("res.partner")
        return {"uid": uid, "partner_count": partner_count}

    def model_exists(self, model_name: str) -> bool:
        return self.search_count("ir.model", [["model", "=", model_name]]) > 0

    # ── partners and products ────────────────────────────────────────────

    def find_or_create_partner(self, partner: dict[str, Any]) -> int:
        values = {k: v for k, v in partner.items() if v is not None}
        if values.get("email"):
            domain = [["email", "=", values["email"]]]
        elif values.get("phone"):
            domain = [["phone", "=", values["phone"]]]
        else:
            domain = [["name", "=", values.get("name")]]

        ids = self.rpc("res.partner", "search", [domain, 0, 1])
        if ids:
            try:
                self.rpc("res.partner", "write", [ids, values])
            except (OdooError, httpx.HTTPError):
                logger.warning("Could not update Odoo partner %s", ids[0], exc_info=True)
            return ids[0]

        return self.rpc("res.partner", "create", [values])

    def _partner_for(self, order: Order, partner: PartnerInput | None) -> int:
        hint = partner.model_dump() if partner else {}
        values = {field: hint.get(field) for field in _PARTNER_FIELDS}
        values["name"] = values["name"] or f"Website User {order.user_id}"
        return self.find_or_create_partner(values)

    def find_or_create_product(self, line: OrderItem) -> int:
        """Resolve an order line to a ``product.product`` id, keyed by SKU."""
        sku = line.menu_item_id
        name = line.menu_item.name if line.menu_item else line.menu_item_id
        domain = [["default_code", "=", sku]] if sku else [["name", "=", name]]

        ids = self.rpc("product.product", "search", [domain, 0, 1])
        if ids:
            return ids[0]

        return self.rpc(
            "product.product",
            "create",
            [{
                "name": name,
                "default_code": sku,
                "list_price": line.unit_price,
                "sale_ok": True,
                "purchase_ok": False,
                "type": "consu",
            }],
        )

    # ── sales ────────────────────────────────────────────────────────────

    def create_sale_order(self, order: Order, partner: PartnerInput | None = None) -> int:
        """Create a quotation for *order*; an existing one with the same ref is reused."""
        existing = self.rpc(
            "sale.order", "search", [[["client_order_ref", "=", order.id]]], {"limit": 1},
        )
        if existing:
            return existing[0]

        partner_id = self._partner_for(order, partner)

        lines: list[Any] = []
        for line in order.items:
            product_id = self.find_or_create_product(line)
            lines.append([0, 0, {
                "product_id": product_id,
                "name": line.menu_item.name if line.menu_item else line.menu_item_id,
                "product_uom_qty": line.quantity,
                "price_unit": line.unit_price,
            }])

        return self.rpc("sale.order", "create", [{
            "partner_id": partner_id,
            "client_order_ref": order.id,
            "order_line": lines,
            "note": order.notes or f"Created from website order {order.order_number}",
        }])

    def confirm_sale_order(self, sale_id: int) -> bool:
        self.rpc("sale.order", "action_confirm", [[sale_id]])
        return True

    # ── point of sale ────────────────────────────────────────────────────

    def get_pos_configs(self) -> list[dict[str, Any]]:
        return self.search_read("pos.config", [["active", "=", True]], ["id", "name"])

    def get_open_pos_session(self, config_id: int) -> int | None:
        ids = self.rpc(
            "pos.session",
            "search",
            [[["config_id", "=", config_id], ["state", "=", "opened"]]],
            {"limit": 1},
        )
        return ids[0] if ids else None

    def _ensure_available_in_pos(self, product_id: int) -> None:
        try:
            records = self.search_read(
                "product.product",
                [["id", "=", product_id]],
                ["id", "product_tmpl_id", "available_in_pos"],
            )
            if not records:
                return
            template_id = _first_id(records[0].get("product_tmpl_id"))
            if template_id and not records[0].get("available_in_pos"):
                self.rpc("product.template", "write", [[template_id], {"available_in_pos": True}])
        except (OdooError, httpx.HTTPError):
            logger.warning("Could not enable product %s for POS", product_id, exc_info=True)

    def _resolve_pos_config(self, config_id: int | None, config_name: str | None) -> int:
        if config_id:
            return config_id
        if config_name:
            found = self.search_read("pos.config", [["name", "=", config_name]], ["id", "name"], limit=1)
            if found:
                return found[0]["id"]
        configs = self.get_pos_configs()
        if not configs:
            raise OdooError("No POS configuration found (install and configure Point of Sale)")
        return configs[0]["id"]

    def create_pos_order(
        self,
        order: Order,
        partner: PartnerInput | None = None,
        pos_config_id: int | None = None,
        pos_config_name: str | None = None,
        customer_note_per_line: str | None = None,
    ) -> int:
        """Create a POS order so it shows up on the kitchen display.

        Needs the POS module and an open session for the chosen config.
        """
        config_id = self._resolve_pos_config(pos_config_id, pos_config_name)
        session_id = self.get_open_pos_session(config_id)
        if not session_id:
            raise OdooError(
                "No open POS session found. Open a POS session in Odoo to send orders to the kitchen."
            )

        partner_id = self._partner_for(order, partner)
        customer_note = customer_note_per_line or order.notes

        lines: list[Any] = []
        for line in order.items:
            product_id = self.find_or_create_product(line)
            self._ensure_available_in_pos(product_id)
            values: dict[str, Any] = {
                "product_id": product_id,
                "qty": line.quantity,
                "price_unit": line.unit_price,
                "discount": 0,
            }
            if customer_note:
                values["customer_note"] = customer_note
            lines.append([0, 0, values])

        amount_total = sum(line.quantity * line.unit_price for line in order.items)
        order_data = {
            "uid": f"webpos_{order.id}",
            "to_invoice": False,
            "data": {
                "name": order.order_number,
                "partner_id": partner_id,
                "pos_session_id": session_id,
                "sequence_number": 1,
                "lines": lines,
                "amount_total": amount_total,
                "amount_tax": 0,
                "amount_paid": 0,
                "amount_return": 0,
                "note": order.notes,
            },
        }

        last_error: Exception | None = None
        for method in ("create_orders_from_ui", "create_from_ui"):
            try:
                result = self.rpc("pos.order", method, [[order_data]])
            except (OdooError, httpx.HTTPError) as exc:
                last_error = exc
                continue
            created = _created_id(result)
            if created:
                return created
            last_error = OdooError(f"Unexpected response from POS {method}: {json.dumps(result)}")

        # Direct creation may not trigger kitchen display events.
        try:
            order_id = self.rpc("pos.order", "create", [[{
                "partner_id": partner_id,
                "session_id": session_id,
                "amount_total": amount_total,
                "amount_tax": 0,
                "amount_paid": 0,
                "amount_return": 0,
            }]])
            order_id = _first_id(order_id) if isinstance(order_id, list) else order_id
            for _, _, values in lines:
                self.rpc("pos.order.line", "create", [[{"order_id": order_id, **values}]])
            return order_id
        except (OdooError, httpx.HTTPError) as fallback_error:
            raise OdooError(
                "Failed to create POS order via RPC methods (create_orders_from_ui/create_from_ui) "
                f"and direct create. Last error: {last_error} | Fallback error: {fallback_error}"
            ) from fallback_error


def _created_id(result: Any) -> int | None:
    if isinstance(result, list) and result:
        result = result[0]
    if isinstance(result, int) and not isinstance(result, bool):
        return result
    if isinstance(result, dict):
        return result.get("id")
    return None


def create_odoo_client() -> OdooClient | None:
    config = OdooConfig.from_env()
    if config is None:
        return None
    return OdooClient(config)
