from __future__ import annotations

from .models import OrderStatus

ORDER_STATUS_FLOW: list[dict[str, str]] = [
    {
        "value": OrderStatus.PENDING.value,
        "label": "Pending",
        "description": "We received your order and are getting things ready",
    },
    {
        "value": OrderStatus.CONFIRMED.value,
        "label": "Confirmed",
        "description": "Your order is confirmed and queued",
    },
    {
        "value": OrderStatus.PREPARING.value,
        "label": "Preparing",
        "description": "Our baristas are crafting your drinks",
    },
    {
        "value": OrderStatus.READY.value,
        "label": "Ready",
        "description": "Pickup customers can collect now",
    },
    {
        "value": OrderStatus.OUT_FOR_DELIVERY.value,
        "label": "On the Way",
        "description": "Courier has your order in transit",
    },
    {
        "value": OrderStatus.DELIVERED.value,
        "label": "Delivered",
        "description": "Enjoy your drinks!",
    },
    {
        "value": OrderStatus.CANCELLED.value,
        "label": "Cancelled",
        "description": "This order will not progress further.",
    },
]

FINAL_ORDER_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


def format_status_label(status: OrderStatus) -> str:
    """``OUT_FOR_DELIVERY`` -> ``Out For Delivery``."""
    return " ".join(word.capitalize() for word in status.value.split("_"))
