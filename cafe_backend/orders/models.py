from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from ..menu.models import MenuItem
from ..odoo.models import PartnerInput


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PREPARING = "PREPARING"
    READY = "READY"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CARD = "CARD"
    WALLET = "WALLET"
    ONLINE = "ONLINE"


class OrderType(str, Enum):
    PICKUP = "PICKUP"
    DELIVERY = "DELIVERY"


class SyncStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class OrderItem(BaseModel):
    id: str
    menu_item_id: str
    quantity: float
    size: str | None = None
    flavor: str | None = None
    toppings: list[str] = Field(default_factory=list)
    unit_price: float
    total_price: float
    menu_item: MenuItem | None = None


class InternetCard(BaseModel):
    quantity: int
    unit_size_gb: float
    unit_price: float
    total_price: float


class OdooIntegration(BaseModel):
    sale_order_id: int | None = None
    pos_order_id: int | None = None
    url: str | None = None
    sale_sync_status: SyncStatus | None = None
    pos_sync_status: SyncStatus | None = None
    warnings: list[str] | None = None
    last_status: OrderStatus | None = None
    last_status_sync: str | None = None


class OrderIntegrations(BaseModel):
    odoo: OdooIntegration | None = None


class StatusChange(BaseModel):
    status: OrderStatus
    note: str | None = None
    at: datetime


class Order(BaseModel):
    id: str
    order_number: str
    user_id: str
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: PaymentMethod
    order_type: OrderType = OrderType.PICKUP
    subtotal: float
    delivery_fee: float = 0.0
    discount: float = 0.0
    total: float
    notes: str | None = None
    internet_card: InternetCard | None = None
    integrations: OrderIntegrations = Field(default_factory=OrderIntegrations)
    items: list[OrderItem]
    status_history: list[StatusChange] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


# ── Request bodies ───────────────────────────────────────────────────────


class InternetCardRequest(BaseModel):
    quantity: int = Field(default=0, ge=0)


class OdooSaleOptions(BaseModel):
    enable: bool | None = None
    auto_confirm: bool | None = None


class OdooPosOptions(BaseModel):
    enable: bool | None = None
    pos_config_id: int | None = None
    pos_config_name: str | None = None
    customer_note_per_line: str | None = None


class OdooOrderOptions(BaseModel):
    partner: PartnerInput | None = None
    sale: OdooSaleOptions | None = None
    pos: OdooPosOptions | None = None


class CreateOrderRequest(BaseModel):
    payment_method: PaymentMethod
    order_type: OrderType
    address_id: str | None = Field(default=None, min_length=1)
    notes: str | None = Field(default=None, max_length=500)
    internet_card: InternetCardRequest | None = None
    odoo: OdooOrderOptions | None = None


class UpdateOrderStatusRequest(BaseModel):
    status: OrderStatus
    note: str | None = Field(default=None, max_length=500)
