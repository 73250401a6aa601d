from __future__ import annotations

from pydantic import BaseModel, Field

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


class PartnerInput(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    phone: str | None = None
    street: str | None = None
    city: str | None = None
    zip: str | None = None


class RequiredPartner(PartnerInput):
    name: str = Field(..., min_length=1)


class DirectOrderLine(BaseModel):
    menu_item_id: str | None = None
    name: str | None = None
    quantity: float = Field(..., gt=0)
    unit_price: float = Field(..., gt=0)


class DirectSaleOrderRequest(BaseModel):
    items: list[DirectOrderLine] = Field(..., min_length=1)
    partner: RequiredPartner
    notes: str | None = None
    auto_confirm: bool = False
    order_number: str | None = None
    user_id: str | None = None


class DirectPosOrderRequest(BaseModel):
    items: list[DirectOrderLine] = Field(..., min_length=1)
    partner: RequiredPartner
    notes: str | None = None
    order_number: str | None = None
    user_id: str | None = None
    pos_config_id: int | None = None
    pos_config_name: str | None = None


class ConnectivityTestRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
