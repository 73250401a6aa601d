"""
Staff-facing Odoo operations: connectivity checks, diagnostics, direct
sale/POS order creation and raw product listing.

Unlike checkout sync these do not swallow Odoo failures; the caller turns
them into error responses.
"""
from __future__ import annotations

import logging
import random
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

import httpx

from ..errors import BadRequestError, ServiceUnavailableError
from ..menu.models import MenuItem
from ..orders.models import Order, OrderItem, PaymentMethod
from .client import OdooClient, create_odoo_client
from .errors import OdooError
from .models import ConnectivityTestRequest, DirectOrderLine, DirectPosOrderRequest, DirectSaleOrderRequest

logger = logging.getLogger(__name__)

PRODUCT_MODELS = ("product.product", "product.template")
DEFAULT_PRODUCT_FIELDS = ["id", "name", "default_code", "list_price", "type", "active"]


@contextmanager
def odoo_session() -> Iterator[OdooClient]:
    client = create_odoo_client()
    if client is None:
        raise ServiceUnavailableError("Odoo is not configured. Set ODOO_* env vars.", code="ODOO_NOT_CONFIGURED")
    with client:
        yield client


def _safe(call, default):
    try:
        return call()
    except (OdooError, httpx.HTTPError):
        logger.warning("Odoo diagnostic call failed", exc_info=True)
        return default


def _gen_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


def _order_from_lines(
    lines: list[DirectOrderLine],
    notes: str | None,
    order_number: str | None,
    user_id: str | None,
) -> Order:
    for line in lines:
        if not line.menu_item_id and not line.name:
            raise BadRequestError("each item must include menu_item_id or name")

    order_id = order_number or _gen_id("web")
    items: list[OrderItem] = []
    for index, line in enumerate(lines):
        sku = line.menu_item_id or line.name or f"item-{index}"
        items.append(OrderItem(
            id=_gen_id(f"item{index}"),
            menu_item_id=sku,
            quantity=line.quantity,
            unit_price=line.unit_price,
            total_price=line.quantity * line.unit_price,
            menu_item=MenuItem(
                id=sku,
                name=line.name,
                description=line.name,
                price=line.unit_price,
                category="website",
                sub_category="website",
            ) if line.name else None,
        ))

    subtotal = sum(item.total_price for item in items)
    now = datetime.now(timezone.utc)
    return Order(
        id=order_id,
        order_number=order_id.upper(),
        user_id=user_id or "website-user",
        payment_method=PaymentMethod.ONLINE,
        subtotal=subtotal,
        total=subtotal,
        notes=notes,
        items=items,
        created_at=now,
        updated_at=now,
    )


def connectivity_check() -> dict[str, Any]:
    with odoo_session() as client:
        return client.ping()


def connectivity_check_with_partner(body: ConnectivityTestRequest) -> dict[str, Any]:
    with odoo_session() as client:
        ping = _safe(client.ping, None)
        partner_id = client.find_or_create_partner({
            "name": body.name or "API Test User",
            "email": body.email,
            "phone": body.phone,
        })
        return {"partner_id": partner_id, "ping": ping}


def sale_diagnostics() -> dict[str, Any]:
    with odoo_session() as client:
        return {
            "configured": True,
            "ping": client.ping(),
            "has_sale": _safe(lambda: client.model_exists("sale.order"), False),
            "product_count": _safe(
                lambda: client.search_count("product.product", [["sale_ok", "=", True]]), 0,
            ),
        }


def create_direct_sale_order(body: DirectSaleOrderRequest) -> tuple[dict[str, Any], str]:
    """Create a quotation from raw lines. Returns ``(data, message)``."""
    order = _order_from_lines(body.items, body.notes, body.order_number, body.user_id)
    with odoo_session() as client:
        if not _safe(lambda: client.model_exists("sale.order"), False):
            raise BadRequestError(
                "Odoo 'sale.order' model isn't available. Install the Sales app "
                "(sale_management) in this database to create sale orders."
            )
        sale_id = client.create_sale_order(order, body.partner)

        confirmed = False
        if body.auto_confirm:
            try:
                confirmed = client.confirm_sale_order(sale_id)
            except (OdooError, httpx.HTTPError):
                logger.warning("Failed to confirm sale order %s", sale_id, exc_info=True)

        data = {
            "sale_id": sale_id,
            "quotation_number": order.id,
            "confirmed": confirmed,
            "web_url": client.config.record_url("sale.order", sale_id),
        }

    if confirmed:
        message = "Sale order created and confirmed"
    elif body.auto_confirm:
        message = "Quotation created (confirmation attempted)"
    else:
        message = "Quotation created"
    return data, message


def pos_diagnostics() -> tuple[dict[str, Any], str]:
    with odoo_session() as client:
        ping = _safe(client.ping, None)
        has_pos = _safe(lambda: client.model_exists("pos.order"), False)
        if not has_pos:
            return {"configured": True, "has_pos": False, "configs": [], "ping": ping}, "POS module not available"

        configs = [
            {**config, "open_session_id": client.get_open_pos_session(config["id"])}
            for config in client.get_pos_configs()
        ]
        return (
            {"configured": True, "has_pos": True, "ping": ping, "configs": configs},
            f"Found {len(configs)} POS configs",
        )


def create_direct_pos_order(body: DirectPosOrderRequest) -> dict[str, Any]:
    order = _order_from_lines(body.items, body.notes, body.order_number, body.user_id)
    with odoo_session() as client:
        if not _safe(lambda: client.model_exists("pos.order"), False):
            raise BadRequestError(
                "Odoo 'pos.order' model isn't available. Install the Point of Sale "
                "(Restaurant) app in this database."
            )
        pos_order_id = client.create_pos_order(
            order,
            body.partner,
            pos_config_id=body.pos_config_id,
            pos_config_name=body.pos_config_name,
        )
        return {
            "pos_order_id": pos_order_id,
            "order_number": order.id,
            "web_url": client.config.record_url("pos.order", pos_order_id),
        }


def list_products(
    model: str = "product.product",
    fields: str | None = None,
    limit: int | None = None,
    page: int = 1,
    page_size: int = 0,
    include_inactive: bool = False,
    sample_randomly: bool = False,
) -> tuple[list[dict[str, Any]], str]:
    """Read saleable products straight from Odoo.

    ``fields`` is a comma separated list, or ``all`` for every readable field.
    Random sampling reads a random window of ``limit`` records.
    """
    target = "product.template" if model == "product.template" else "product.product"
    field_list = (
        [f.strip() for f in fields.split(",") if f.strip()]
        if fields and fields.lower() != "all"
        else (None if fields else DEFAULT_PRODUCT_FIELDS)
    )
    domain: list[Any] = [["sale_ok", "=", True]]
    if not include_inactive:
        domain.append(["active", "=", True])

    with odoo_session() as client:
        if not _safe(lambda: client.model_exists(target), False):
            fallback = target == "product.product" and _safe(
                lambda: client.model_exists("product.template"), False,
            )
            if not fallback:
                raise BadRequestError(
                    f"Odoo '{target}' model isn't available. Install Inventory/Sales "
                    "(sale_management) and Inventory (stock) modules."
                )
            logger.warning("Falling back to product.template; product.product is unavailable")
            target = "product.template"

        if sample_randomly:
            if not limit:
                raise BadRequestError("When random=true, you must provide a limit parameter.")
            total = client.search_count(target, domain)
            if total == 0:
                return [], "No saleable products found"
            window = max(1, min(limit, total))
            offset = random.randint(0, total - window - 1) if total > window else 0
            records = client.search_read(target, domain, field_list, limit=window, offset=offset)
        else:
            options: dict[str, int] = {}
            if limit:
                options = {"limit": limit, "offset": 0}
            elif page_size > 0:
                options = {"limit": page_size, "offset": (max(page, 1) - 1) * page_size}
            records = client.search_read(target, domain, field_list, **options)

    noun = "templates" if target == "product.template" else "products"
    return records, f"Fetched {len(records)} {noun}"
