from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime, timezone

import httpx

from ..cart import store as cart_store
from ..errors import BadRequestError, ConflictError, NotFoundError
from ..menu.models import MenuItem
from ..odoo.client import create_odoo_client
from ..odoo.config import is_odoo_configured
from ..odoo.errors import OdooError, describe_odoo_error
from ..odoo.models import PartnerInput
from . import store
from .models import (
    CreateOrderRequest,
    InternetCard,
    OdooIntegration,
    OdooOrderOptions,
    Order,
    OrderIntegrations,
    OrderItem,
    OrderStatus,
    OrderType,
    PaymentStatus,
    StatusChange,
    SyncStatus,
)
from .status import FINAL_ORDER_STATUSES

logger = logging.getLogger(__name__)

INTERNET_CARD_UNIT_SIZE_GB = 1.5
INTERNET_CARD_UNIT_PRICE = 10.0
INTERNET_CARD_MENU_ID = "internet-card-1_5gb"
INTERNET_CARD_MENU_ITEM = MenuItem(
    id=INTERNET_CARD_MENU_ID,
    name="Internet Card (1.5 GB)",
    description="Add 1.5 GB of internet connectivity to your order.",
    price=INTERNET_CARD_UNIT_PRICE,
    category="add-ons",
    sub_category="connectivity",
)
DELIVERY_FEE = 15.0
DEFAULT_PARTNER_NAME = "Website Customer"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _millis() -> int:
    return int(time.time() * 1000)


def _order_lines(user_id: str, card_quantity: int) -> list[OrderItem]:
    cart = cart_store.get(user_id)
    lines = [
        OrderItem(
            id=f"order-item-{_millis()}-{uuid.uuid4().hex[:8]}",
            menu_item_id=item.menu_item_id,
            quantity=item.quantity,
            size=item.size,
            flavor=item.flavor,
            toppings=list(item.toppings),
            unit_price=item.price / item.quantity,
            total_price=item.price,
            menu_item=item.menu_item,
        )
        for item in cart
    ]
    if card_quantity > 0:
        lines.append(OrderItem(
            id=f"order-item-{_millis()}-internet-card",
            menu_item_id=INTERNET_CARD_MENU_ID,
            quantity=card_quantity,
            unit_price=INTERNET_CARD_UNIT_PRICE,
            total_price=card_quantity * INTERNET_CARD_UNIT_PRICE,
            menu_item=INTERNET_CARD_MENU_ITEM,
        ))
    return lines


def _sync_to_odoo(order: Order, options: OdooOrderOptions | None) -> dict | None:
    """Mirror *order* into Odoo and return the order fields to update.

    Nothing here raises: every Odoo failure becomes a warning on the order.
    """
    if not is_odoo_configured():
        return None

    options = options or OdooOrderOptions()
    enable_sale = not (options.sale and options.sale.enable is False)
    enable_pos = bool(options.pos and options.pos.enable is True)
    auto_confirm = bool(options.sale and options.sale.auto_confirm)

    hint = options.partner or PartnerInput()
    partner = hint.model_copy(update={"name": hint.name or DEFAULT_PARTNER_NAME})

    integration = OdooIntegration()
    warnings: list[str] = []
    confirmed = False

    try:
        client = create_odoo_client()
        if client is None:
            return None
        with client:
            if enable_sale:
                try:
                    integration.sale_order_id = client.create_sale_order(order, partner)
                    integration.sale_sync_status = SyncStatus.SUCCESS
                except (OdooError, httpx.HTTPError) as exc:
                    integration.sale_sync_status = SyncStatus.FAILED
                    warnings.append(describe_odoo_error(exc, "Odoo sales sync"))
                    logger.warning("Odoo sale sync failed for %s", order.id, exc_info=True)

                if integration.sale_order_id and auto_confirm:
                    try:
                        client.confirm_sale_order(integration.sale_order_id)
                        confirmed = True
                    except (OdooError, httpx.HTTPError) as exc:
                        warnings.append(describe_odoo_error(exc, "Odoo sale auto-confirm"))
                        logger.warning("Odoo sale auto-confirm failed for %s", order.id, exc_info=True)

            if enable_pos:
                try:
                    integration.pos_order_id = client.create_pos_order(
                        order,
                        partner,
                        pos_config_id=options.pos.pos_config_id,
                        pos_config_name=options.pos.pos_config_name,
                        customer_note_per_line=options.pos.customer_note_per_line,
                    )
                    integration.pos_sync_status = SyncStatus.SUCCESS
                except (OdooError, httpx.HTTPError) as exc:
                    integration.pos_sync_status = SyncStatus.FAILED
                    warnings.append(describe_odoo_error(exc, "Odoo POS sync"))
                    logger.warning("Odoo POS sync failed for %s", order.id, exc_info=True)

            if integration.sale_order_id:
                integration.url = client.config.record_url("sale.order", integration.sale_order_id)
    except (OdooError, httpx.HTTPError) as exc:
        warnings.append(describe_odoo_error(exc, "Odoo sync"))
        logger.warning("Odoo sync skipped for %s", order.id, exc_info=True)

    integration.warnings = warnings or None
    updates: dict = {"integrations": OrderIntegrations(odoo=integration)}

    if integration.sale_order_id:
        prefix = f"{order.notes} | " if order.notes else ""
        updates["notes"] = f"{prefix}Odoo saleId: {integration.sale_order_id}"

    if confirmed:
        stamp = _now()
        integration.last_status = OrderStatus.CONFIRMED
        integration.last_status_sync = stamp.isoformat()
        updates["status"] = OrderStatus.CONFIRMED
        updates["status_history"] = [
            *order.status_history,
            StatusChange(status=OrderStatus.CONFIRMED, note="Confirmed in Odoo", at=stamp),
        ]
        updates["updated_at"] = stamp

    return updates


def place_order(user_id: str, request: CreateOrderRequest) -> Order:
    """Turn the user's cart into an order, mirror it to Odoo and empty the cart."""
    card_quantity = request.internet_card.quantity if request.internet_card else 0
    if not cart_store.get(user_id):
        if card_quantity > 0:
            raise BadRequestError("Internet cards must be ordered with at least one drink")
        raise BadRequestError("Cart is empty")

    lines = _order_lines(user_id, card_quantity)
    card_total = card_quantity * INTERNET_CARD_UNIT_PRICE
    subtotal = sum(line.total_price for line in lines)
    delivery_fee = DELIVERY_FEE if request.order_type == OrderType.DELIVERY else 0.0
    created_at = _now()
    stamp = _millis()

    order = store.create(Order(
        id=f"order-{stamp}-{uuid.uuid4().hex[:6]}",
        order_number=f"ORD-{stamp}",
        user_id=user_id,
        status=OrderStatus.PENDING,
        payment_status=PaymentStatus.PENDING,
        payment_method=request.payment_method,
        order_type=request.order_type,
        subtotal=round(subtotal, 2),
        delivery_fee=delivery_fee,
        discount=0.0,
        total=round(subtotal + delivery_fee, 2),
        notes=request.notes,
        internet_card=InternetCard(
            quantity=card_quantity,
            unit_size_gb=INTERNET_CARD_UNIT_SIZE_GB,
            unit_price=INTERNET_CARD_UNIT_PRICE,
            total_price=card_total,
        ) if card_quantity > 0 else None,
        items=lines,
        status_history=[StatusChange(status=OrderStatus.PENDING, note="Order placed", at=created_at)],
        created_at=created_at,
        updated_at=created_at,
    ))

    updates = _sync_to_odoo(order, request.odoo)
    if updates:
        order = store.update(order.id, updates) or order

    cart_store.clear(user_id)
    return order


def get_user_order(user_id: str, order_id: str) -> Order:
    order = next((o for o in store.get_by_user_id(user_id) if o.id == order_id), None)
    if order is None:
        raise NotFoundError("Order not found")
    return order


def update_order_status(order_id: str, status: OrderStatus, note: str | None = None) -> Order:
    order = store.get_by_id(order_id)
    if order is None:
        raise NotFoundError("Order not found")
    if order.status in FINAL_ORDER_STATUSES and status != order.status:
        raise ConflictError(
            f"Order is already {order.status.value.lower()} and cannot change status",
            code="ORDER_FINALIZED",
        )

    stamp = _now()
    updated = store.update(order_id, {
        "status": status,
        "status_history": [*order.status_history, StatusChange(status=status, note=note, at=stamp)],
        "updated_at": stamp,
    })
    if updated is None:
        raise NotFoundError("Order not found")
    return updated
