from __future__ import annotations

import re
from typing import Any

from ..odoo.client import create_odoo_client
from ..odoo.config import is_odoo_configured
from ..odoo.errors import OdooError
from .cache import cache_get, cache_set, clear_cache
from .config import MenuConfig
from .data_store import get_seed_menu
from .models import MenuCategory, MenuItem, PackageOffer, RecommendedItem, SubCategory

_PRODUCT_FIELDS = [
    "id",
    "name",
    "default_code",
    "list_price",
    "description_sale",
    "categ_id",
    "active",
    "sale_ok",
    "image_128",
    "image_512",
    "image_1024",
    "image_1920",
    "product_tmpl_id",
]
_IMAGE_FIELDS = ("image_512", "image_1920", "image_1024", "image_128")
_MAX_RECOMMENDATIONS = 6


def slugify(text: str, fallback: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug or fallback


def _pick_icon(name: str) -> str:
    lower = name.lower()
    if re.search(r"food|sandwich|cake|cookie|pastry|snack", lower):
        return "utensils"
    if re.search(r"home|retail|beans|merch", lower):
        return "home"
    if re.search(r"tea|matcha|herbal", lower):
        return "sparkles"
    return "coffee"


def _many2one_id(value: Any) -> int | None:
    if isinstance(value, (list, tuple)) and value:
        return value[0]
    return None


def _extract_image(product: dict[str, Any], fallback: str) -> str:
    for field in _IMAGE_FIELDS:
        encoded = product.get(field)
        if isinstance(encoded, str) and encoded.strip():
            # Odoo stores base64 without a mimetype.
            return f"data:image/png;base64,{encoded}"
    return fallback


def _fetch_categories(client, initial_ids: set[int]) -> dict[int, dict[str, Any]]:
    """Read product categories plus every ancestor they reference."""
    found: dict[int, dict[str, Any]] = {}
    queue = set(initial_ids)
    while queue:
        ids = sorted(queue)
        queue.clear()
        records = client.search_read(
            "product.category",
            [["id", "in", ids]],
            ["id", "name", "parent_id", "complete_name"],
            limit=len(ids),
        )
        for record in records:
            if record["id"] in found:
                continue
            found[record["id"]] = record
            parent = _many2one_id(record.get("parent_id"))
            if parent and parent not in found:
                queue.add(parent)
    return found


def _top_category(
    record: dict[str, Any] | None, categories: dict[int, dict[str, Any]],
) -> dict[str, Any] | None:
    current = record
    visited: set[int] = set()
    while current and current.get("parent_id"):
        parent_id = _many2one_id(current["parent_id"])
        if not parent_id or parent_id in visited:
            break
        visited.add(parent_id)
        parent = categories.get(parent_id)
        if not parent:
            break
        current = parent
    return current


def _subcategory_meta(
    record: dict[str, Any] | None, top: dict[str, Any] | None,
) -> tuple[str, str, str]:
    if not record:
        return "general", "General", "Assorted items"
    name = record.get("name") or "General"
    if top and record["id"] == top["id"]:
        return (
            slugify(f"{name}-{record['id']}", f"category-{record['id']}"),
            name,
            record.get("complete_name") or f"All {record.get('name') or 'items'}",
        )
    return (
        slugify(f"{name}-{record['id']}", f"subcategory-{record['id']}"),
        name,
        record.get("complete_name") or f"Assorted {name.lower()}",
    )


def _load_from_odoo(config: MenuConfig) -> list[MenuCategory]:
    client = create_odoo_client()
    if client is None:
        raise OdooError("Failed to initialize Odoo client")

    with client:
        products = client.search_read(
            "product.product", [["type", "in", ["product", "consu"]]], _PRODUCT_FIELDS,
        )
        category_ids = {cid for p in products if (cid := _many2one_id(p.get("categ_id")))}
        categories = _fetch_categories(client, category_ids)

    builders: dict[str, tuple[MenuCategory, dict[str, SubCategory]]] = {}
    for product in products:
        categ_id = _many2one_id(product.get("categ_id"))
        record = categories.get(categ_id) if categ_id else None
        top = _top_category(record, categories)

        category_name = (top or {}).get("name") or (record or {}).get("name") or "Menu"
        anchor = (top or record or {}).get("id", "root")
        category_id = slugify(f"{category_name}-{anchor}", "menu")

        if category_id not in builders:
            builders[category_id] = (
                MenuCategory(
                    id=category_id,
                    name=category_name,
                    description=(top or {}).get("complete_name") or f"Items from {category_name}",
                    icon=_pick_icon(category_name),
                ),
                {},
            )
        category, subs = builders[category_id]

        sub_id, sub_name, sub_description = _subcategory_meta(record, top)
        if sub_id not in subs:
            subs[sub_id] = SubCategory(id=sub_id, name=sub_name, description=sub_description)
            category.sub_categories.append(subs[sub_id])
        sub = subs[sub_id]

        default_code = product.get("default_code")
        has_code = isinstance(default_code, str) and default_code.strip()
        description = product.get("description_sale")
        sub.items.append(MenuItem(
            id=default_code.strip() if has_code else f"odoo-{product['id']}",
            name=product["name"],
            description=description if isinstance(description, str) and description else product["name"],
            price=float(product.get("list_price") or 0),
            category=category.id,
            sub_category=sub.id,
            images=[_extract_image(product, config.fallback_image)],
            featured=bool(product.get("sale_ok") and product.get("active") is not False),
            available=bool(product.get("active", True)),
            odoo_product_id=product["id"],
            odoo_template_id=_many2one_id(product.get("product_tmpl_id")),
            odoo_default_code=default_code if isinstance(default_code, str) else None,
            odoo_category_id=categ_id,
        ))

    result: list[MenuCategory] = []
    for category, _ in builders.values():
        for sub in category.sub_categories:
            sub.items.sort(key=lambda item: item.name)
        category.sub_categories.sort(key=lambda sub: sub.name)
        result.append(category)
    result.sort(key=lambda category: category.name)
    return result


def _load(config: MenuConfig) -> list[MenuCategory]:
    if config.source == "odoo" and is_odoo_configured():
        return _load_from_odoo(config)
    return get_seed_menu(config)


def get_menu_categories(force_refresh: bool = False, config: MenuConfig | None = None) -> list[MenuCategory]:
    """Return the full catalog, served from cache while the TTL allows."""
    config = config or MenuConfig.from_env()
    ttl = config.cache_ttl_seconds
    cache_key = f"menu:{config.source}"
    if ttl > 0 and not force_refresh:
        cached = cache_get(cache_key)
        if cached is not None:
            return cached

    categories = _load(config)
    if ttl > 0:
        cache_set(cache_key, categories, ttl)
    return categories


def clear_menu_cache() -> None:
    clear_cache()


def get_category_by_id(category_id: str) -> MenuCategory | None:
    return next((c for c in get_menu_categories() if c.id == category_id), None)


def get_subcategory_by_id(category_id: str, sub_category_id: str) -> SubCategory | None:
    category = get_category_by_id(category_id)
    if category is None:
        return None
    return next((s for s in category.sub_categories if s.id == sub_category_id), None)


def _iter_items(categories: list[MenuCategory]):
    for category in categories:
        for sub in category.sub_categories:
            yield from sub.items


def get_item_by_id(item_id: str) -> MenuItem | None:
    return next((item for item in _iter_items(get_menu_categories()) if item.id == item_id), None)


def get_all_menu_items() -> list[MenuItem]:
    return list(_iter_items(get_menu_categories()))


def get_recommended_items(item: MenuItem) -> list[RecommendedItem]:
    """Pairings for *item*: same-category items first, then featured picks elsewhere."""
    categories = get_menu_categories()
    recommendations: list[RecommendedItem] = []

    own = next((c for c in categories if c.id == item.category), None)
    if own:
        for candidate in _iter_items([own]):
            if candidate.id != item.id and candidate.available:
                recommendations.append(RecommendedItem(
                    item_id=candidate.id,
                    reason=f"More from {own.name}",
                    package_offer=PackageOffer(
                        name=f"{item.name} + {candidate.name}",
                        description=f"Perfect pairing from {own.name}",
                        discount=10,
                    ),
                ))

    for other in categories:
        if other.id == item.category:
            continue
        for candidate in _iter_items([other]):
            if candidate.featured and candidate.available:
                recommendations.append(RecommendedItem(
                    item_id=candidate.id,
                    reason=f"Featured {other.name}",
                    package_offer=PackageOffer(
                        name=f"{item.name} + {candidate.name}",
                        description=f"Try something new from {other.name}",
                        discount=15,
                    ),
                ))

    return recommendations[:_MAX_RECOMMENDATIONS]
