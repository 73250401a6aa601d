from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from ..orders.models import Order
from .engine import MAX_ALTERNATIVES
from .models import SuggestionResponse

FAVORITES_LIMIT = 3


def _item_id(result) -> str | None:
    item = result.item
    if isinstance(item, dict):
        return item.get("id")
    return getattr(item, "id", None)


def favorite_item_ids(orders: Iterable[Order], limit: int = FAVORITES_LIMIT) -> list[str]:
    """Most-ordered menu item ids across *orders*, by total quantity."""
    counts: Counter[str] = Counter()
    for order in orders:
        for line in order.items:
            counts[line.menu_item_id] += line.quantity
    # most_common keeps first-seen order for equal counts.
    return [item_id for item_id, _ in counts.most_common(limit)]


def promote_favorite(response: SuggestionResponse, favorites: list[str]) -> SuggestionResponse:
    """Swap a favorite runner-up into ``top`` when it scores within a point."""
    top = response.top
    if top is None or not favorites:
        return response

    favorite = next((alt for alt in response.alternatives if _item_id(alt) in favorites), None)
    if favorite is None or favorite.score < top.score - 1:
        return response

    others = [alt for alt in response.alternatives if alt is not favorite]
    return SuggestionResponse(top=favorite, alternatives=[top, *others][:MAX_ALTERNATIVES])
