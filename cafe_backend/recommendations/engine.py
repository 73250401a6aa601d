"""Heuristic drink scorer.

Every available menu item gets an integer score built from the customer's
preferences. Attributes such as "is this milk based" or "is this hot only"
are inferred from the item's id, name, description and allergen tags, so the
catalog does not need any extra metadata.
"""
from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from typing import Any

from ..menu.models import MenuItem
from .models import DerivedAttributes, PreferenceInput, SuggestionResponse, SuggestionResult

CAFFEINE_ORDER = ["none", "low", "medium", "high"]
SWEETNESS_ORDER = ["low", "medium", "high"]

HOT_ONLY_PENALTY = 100
MAX_BUDGET_PENALTY = 3
MAX_ALTERNATIVES = 3


def _field(item: Any, name: str, default: Any = None) -> Any:
    if isinstance(item, Mapping):
        return item.get(name, default)
    return getattr(item, name, default)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _level_distance(actual: str, desired: str, order: list[str]) -> int:
    """Ordinal distance; an unknown level costs a neutral 2."""
    try:
        return abs(order.index(actual) - order.index(desired))
    except ValueError:
        return 2


def derive_attributes(item: Any) -> DerivedAttributes:
    item_id = _text(_field(item, "id")).lower()
    name = _text(_field(item, "name")).lower()
    description = _field(item, "description")
    desc = description.lower() if isinstance(description, str) else ""
    allergens = _field(item, "allergens") or []
    if not isinstance(allergens, (list, tuple, set)):
        allergens = []
    key = item_id + name

    is_milk_based = "Milk" in allergens or bool(
        re.search(r"latte|cappuccino|frappuccino|macchiato|cortado|karak", key)
    )
    has_chocolate = "Chocolate" in allergens or bool(re.search(r"mocha|chocolate", key))
    is_tea = bool(re.search(r"matcha|tea|chai", key))
    is_espresso = "espresso" in item_id or "espresso" in name
    is_turkish = "turkish" in key
    is_americano = "americano" in key

    supports_iced = "hot & iced" in desc or bool(re.search(r"iced|frappuccino", key))
    hot_only = "hot only" in desc

    if has_chocolate and not is_espresso:
        caffeine_level = "low"
    elif is_tea:
        caffeine_level = "medium"
    elif is_turkish or is_espresso or is_americano:
        caffeine_level = "high"
    elif "chocolate" in key:
        # Unreachable while the chocolate check above runs first; kept as is.
        caffeine_level = "none"
    else:
        caffeine_level = "medium"

    if re.search(r"spanish-latte|mocha|chocolate|frappuccino", item_id):
        sweetness_level = "high"
    elif is_americano or is_espresso or is_turkish:
        sweetness_level = "low"
    else:
        sweetness_level = "medium"

    return DerivedAttributes(
        is_milk_based=is_milk_based,
        has_chocolate=has_chocolate,
        is_tea=is_tea,
        is_espresso=is_espresso,
        is_turkish=is_turkish,
        is_americano=is_americano,
        supports_iced=supports_iced,
        hot_only=hot_only,
        caffeine_level=caffeine_level,
        sweetness_level=sweetness_level,
    )


def _price(item: Any) -> float:
    value = _field(item, "price", 0)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def _suggested_size(item: Any, preferred: str | None) -> str | None:
    sizes = _field(item, "sizes") or []
    if not isinstance(sizes, (list, tuple)):
        sizes = []
    available: list[str] = []
    for size in sizes:
        name = _field(size, "name")
        if _field(size, "available", False) is True and isinstance(name, str):
            available.append(name)
    if preferred and preferred in available:
        return preferred
    if "Medium" in available:
        return "Medium"
    return available[0] if available else None


def _score(item: Any, prefs: PreferenceInput) -> SuggestionResult:
    attrs = derive_attributes(item)
    item_id = _text(_field(item, "id")).lower()
    score = 0
    reasons: list[str] = []

    if prefs.temperature == "iced":
        if attrs.hot_only:
            score -= HOT_ONLY_PENALTY
            reasons.append("Hot-only drink, not suitable for iced")
        elif attrs.supports_iced:
            score += 3
            reasons.append("Works well iced")
        else:
            score += 1
    elif prefs.temperature == "hot":
        score += 2
        reasons.append("Great as a hot drink")

    caffeine_distance = _level_distance(attrs.caffeine_level, prefs.caffeine, CAFFEINE_ORDER)
    score += 3 - caffeine_distance
    if caffeine_distance == 0:
        reasons.append(f"Matches caffeine: {prefs.caffeine}")

    sweetness_distance = _level_distance(attrs.sweetness_level, prefs.sweetness, SWEETNESS_ORDER)
    score += 2 - sweetness_distance
    if sweetness_distance == 0:
        reasons.append(f"Sweetness: {prefs.sweetness}")

    if prefs.milk == "no-milk":
        if attrs.is_milk_based:
            score -= 3
            reasons.append("Milk-based by default")
        else:
            score += 2
            reasons.append("Naturally dairy-free")
    elif prefs.milk == "non-dairy":
        if attrs.is_milk_based:
            score += 1
            reasons.append("Can be made with non-dairy milk")
    elif prefs.milk == "dairy":
        if attrs.is_milk_based:
            score += 1
            reasons.append("Creamy milk-based drink")

    wanted = [flavor.lower() for flavor in prefs.flavors]
    if wanted:
        if any("choc" in flavor for flavor in wanted) and attrs.has_chocolate:
            score += 3
            reasons.append("Chocolate-forward")
        if any(re.search(r"vanilla|caramel|hazelnut|pistachio", f) for f in wanted) and re.search(
            r"latte|frappuccino", item_id
        ):
            score += 2
            reasons.append("Pairs well with syrups")
        if any(re.search(r"spice|cinnamon|cardamom|chai", f) for f in wanted) and re.search(
            r"karak|chai", item_id
        ):
            score += 3
            reasons.append("Spiced tea profile")
        if any(re.search(r"matcha|green", f) for f in wanted) and "matcha" in item_id:
            score += 3
            reasons.append("Matcha flavor")

    if prefs.budget is not None and prefs.budget > 0:
        over = _price(item) - prefs.budget
        if over <= 0:
            score += 2
            reasons.append("Within budget")
        else:
            score -= min(MAX_BUDGET_PENALTY, math.ceil(over / 10))
            reasons.append("May exceed budget")

    if prefs.featured_boost and _field(item, "featured", False) is True:
        score += 1
        reasons.append("Popular choice")

    if prefs.time_of_day == "morning":
        if attrs.is_espresso or attrs.is_americano or attrs.is_turkish:
            score += 1
    elif prefs.time_of_day == "evening":
        if attrs.caffeine_level in ("low", "none"):
            score += 1

    return SuggestionResult(
        item=item,
        score=score,
        reasons=reasons,
        suggested_size=_suggested_size(item, prefs.size_preference),
        suggested_flavors=list(prefs.flavors[:2]),
    )


def suggest_drinks(
    prefs: PreferenceInput, menu: Iterable[Any] | None = None,
) -> SuggestionResponse:
    """Rank the available menu against *prefs*.

    Returns the best match as ``top`` and up to three runners-up. ``top`` is
    ``None`` only when nothing on the menu is available.
    """
    if menu is None:
        from ..menu.service import get_all_menu_items

        menu = get_all_menu_items()

    results: list[SuggestionResult] = []
    for item in menu or []:
        if not isinstance(item, (Mapping, MenuItem)):
            continue
        if _field(item, "available", False) is not True:
            continue
        results.append(_score(item, prefs))

    # sorted() is stable, so ties keep menu order.
    results = sorted(results, key=lambda result: result.score, reverse=True)
    if not results:
        return SuggestionResponse(top=None, alternatives=[])
    return SuggestionResponse(top=results[0], alternatives=results[1:1 + MAX_ALTERNATIVES])
