from __future__ import annotations

from datetime import datetime, timezone

from cafe_backend.orders.models import Order, OrderItem, PaymentMethod
from cafe_backend.recommendations.models import SuggestionResponse, SuggestionResult
from cafe_backend.recommendations.personalization import favorite_item_ids, promote_favorite


def _order(*lines: tuple[str, int]) -> Order:
    now = datetime.now(timezone.utc)
    items = [
        OrderItem(id=f"line-{i}", menu_item_id=item_id, quantity=qty, unit_price=10, total_price=10 * qty)
        for i, (item_id, qty) in enumerate(lines)
    ]
    total = sum(item.total_price for item in items)
    return Order(
        id="order-1",
        order_number="ORD-1",
        user_id="u1",
        payment_method=PaymentMethod.CASH,
        subtotal=total,
        total=total,
        items=items,
        created_at=now,
        updated_at=now,
    )


def _result(item_id: str, score: int) -> SuggestionResult:
    return SuggestionResult(item={"id": item_id}, score=score)


def test_favorites_rank_by_total_quantity():
    orders = [_order(("latte", 1), ("mocha", 2)), _order(("latte", 3), ("americano", 1), ("cortado", 1))]
    assert favorite_item_ids(orders) == ["latte", "mocha", "americano"]


def test_favorites_ties_keep_first_seen_order():
    orders = [_order(("cortado", 1), ("americano", 1))]
    assert favorite_item_ids(orders, limit=1) == ["cortado"]


def test_favorites_empty_history():
    assert favorite_item_ids([]) == []


def test_promotes_close_favorite():
    response = SuggestionResponse(
        top=_result("cappuccino", 10),
        alternatives=[_result("flat-white", 9), _result("latte", 9), _result("mocha", 8)],
    )
    promoted = promote_favorite(response, ["latte"])
    assert promoted.top.item["id"] == "latte"
    assert [a.item["id"] for a in promoted.alternatives] == ["cappuccino", "flat-white", "mocha"]


def test_does_not_promote_distant_favorite():
    response = SuggestionResponse(top=_result("cappuccino", 10), alternatives=[_result("latte", 8)])
    assert promote_favorite(response, ["latte"]) is response


def test_only_first_favorite_alternative_is_considered():
    response = SuggestionResponse(
        top=_result("cappuccino", 10),
        alternatives=[_result("latte", 7), _result("mocha", 10)],
    )
    assert promote_favorite(response, ["latte", "mocha"]).top.item["id"] == "cappuccino"


def test_no_top_is_left_alone():
    response = SuggestionResponse()
    assert promote_favorite(response, ["latte"]) is response
