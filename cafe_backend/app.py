from __future__ import annotations

import logging
import os
from typing import Any

import httpx
from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.middleware.sessions import SessionMiddleware

from .auth.dependencies import get_user_id, require_admin, require_user
from .auth.models import LoginRequest
from .auth.users import authenticate
from .cart import service as cart_service
from .cart import store as cart_store
from .cart.models import AddToCartRequest, CartOut, UpdateCartItemRequest
from .errors import ApiError, BadRequestError, NotFoundError
from .menu.cache import get_cache_stats
from .menu.service import get_category_by_id, get_item_by_id, get_menu_categories, get_recommended_items
from .odoo import service as odoo_service
from .odoo.errors import OdooError
from .odoo.models import ConnectivityTestRequest, DirectPosOrderRequest, DirectSaleOrderRequest
from .orders import service as order_service
from .orders import store as order_store
from .orders.models import CreateOrderRequest, UpdateOrderStatusRequest
from .orders.status import ORDER_STATUS_FLOW
from .recommendations.engine import suggest_drinks
from .recommendations.models import PreferenceInput
from .recommendations.personalization import favorite_item_ids, promote_favorite

logger = logging.getLogger(__name__)

app = FastAPI(title="Café Ordering API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "cafe-secret-change-in-production"),
)


def success(data: Any = None, message: str | None = None) -> dict[str, Any]:
    return {"success": True, "data": data, "message": message}


def _dump(model) -> dict[str, Any]:
    return model.model_dump(mode="json")


@app.exception_handler(ApiError)
def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message, "code": exc.code},
    )


@app.exception_handler(OdooError)
def handle_odoo_error(request: Request, exc: OdooError) -> JSONResponse:
    logger.warning("Odoo request failed: %s", exc)
    return JSONResponse(
        status_code=502,
        content={"success": False, "error": str(exc), "code": "ODOO_ERROR"},
    )


@app.exception_handler(httpx.HTTPError)
def handle_odoo_transport_error(request: Request, exc: httpx.HTTPError) -> JSONResponse:
    logger.warning("Odoo unreachable: %s", exc)
    return JSONResponse(
        status_code=502,
        content={"success": False, "error": f"Odoo unreachable: {exc}", "code": "ODOO_UNREACHABLE"},
    )


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/menu")
def menu(refresh: bool = False) -> dict:
    return success([_dump(c) for c in get_menu_categories(force_refresh=refresh)])


@app.get("/api/menu/items/{slug}")
def menu_item(slug: str) -> dict:
    item = get_item_by_id(slug)
    if item is None:
        raise NotFoundError("Menu item not found")
    data = _dump(item)
    data["recommended_items"] = [_dump(r) for r in get_recommended_items(item)]
    return success(data)


@app.get("/api/menu/{category_id}")
def menu_category(category_id: str) -> dict:
    category = get_category_by_id(category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return success(_dump(category))


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Cart ─────────────────────────────────────────────────────────────────


@app.get("/api/cart")
def get_cart(user_id: str = Depends(get_user_id)) -> dict:
    items = cart_store.get(user_id)
    cart = CartOut(items=items, totals=cart_service.calculate_totals(items))
    return success(_dump(cart))


@app.post("/api/cart", status_code=201)
def add_to_cart(body: AddToCartRequest, user_id: str = Depends(get_user_id)) -> dict:
    line = cart_service.add_to_cart(user_id, body)
    return success(_dump(line), "Item added to cart successfully")


@app.delete("/api/cart")
def clear_cart(user_id: str = Depends(get_user_id)) -> dict:
    cart_store.clear(user_id)
    return success(None, "Cart cleared successfully")


@app.patch("/api/cart/{item_id}")
def update_cart_item(
    item_id: str, body: UpdateCartItemRequest, user_id: str = Depends(get_user_id),
) -> dict:
    cart_service.update_cart_item(user_id, item_id, body.quantity)
    return success(None, "Cart item updated")


@app.delete("/api/cart/{item_id}")
def remove_cart_item(item_id: str, user_id: str = Depends(get_user_id)) -> dict:
    cart_store.remove_item(user_id, item_id)
    return success(None, "Item removed from cart")


# ── Orders ───────────────────────────────────────────────────────────────


@app.get("/api/orders")
def list_orders(
    limit: int = Query(default=20, ge=0),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(get_user_id),
) -> dict:
    orders = order_store.get_by_user_id(user_id)
    page = orders[offset:offset + limit]
    return success({"orders": [_dump(o) for o in page], "total": len(orders)})


@app.post("/api/orders", status_code=201)
def create_order(body: CreateOrderRequest, user_id: str = Depends(get_user_id)) -> dict:
    order = order_service.place_order(user_id, body)
    return success(_dump(order), "Order created successfully")


@app.get("/api/orders/status-flow")
def order_status_flow() -> dict:
    return success(ORDER_STATUS_FLOW)


@app.get("/api/orders/{order_id}")
def get_order(order_id: str, user_id: str = Depends(get_user_id)) -> dict:
    return success(_dump(order_service.get_user_order(user_id, order_id)))


# ── Recommendations ──────────────────────────────────────────────────────


@app.post("/api/recommendations")
def recommendations(payload: Any = Body(default=None), user_id: str = Depends(get_user_id)) -> Any:
    try:
        prefs = PreferenceInput.model_validate(payload if payload is not None else {})
    except ValidationError as exc:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "Invalid request body",
                "message": "; ".join(error["msg"] for error in exc.errors()),
            },
        )

    history = order_store.get_by_user_id(user_id)
    favorites = favorite_item_ids(history)

    result = promote_favorite(suggest_drinks(prefs), favorites)
    if result.top is None:
        raise BadRequestError("No available items to suggest")

    def _suggestion(s) -> dict:
        return s.model_dump(mode="json", include={"item", "suggested_size", "suggested_flavors", "reasons"})

    return success(
        {
            "user_id": user_id,
            "recommendation": _suggestion(result.top),
            "alternatives": [_suggestion(a) for a in result.alternatives],
            "personalization": {"favorites": favorites, "used_history": bool(history)},
        },
        "Drink suggestion generated",
    )


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.patch("/api/orders/{order_id}")
def update_order_status(
    order_id: str, body: UpdateOrderStatusRequest, user: dict = Depends(require_admin),
) -> dict:
    order = order_service.update_order_status(order_id, body.status, body.note)
    return success(_dump(order), "Order status updated")


@app.get("/cache/stats")
def cache_stats(user: dict = Depends(require_admin)) -> dict:
    return get_cache_stats()


# ── Odoo (admin) ─────────────────────────────────────────────────────────


@app.get("/api/odoo/test")
def odoo_test(user: dict = Depends(require_admin)) -> dict:
    return success(odoo_service.connectivity_check(), "Odoo connectivity OK")


@app.post("/api/odoo/test")
def odoo_test_partner(
    body: ConnectivityTestRequest | None = None, user: dict = Depends(require_admin),
) -> dict:
    data = odoo_service.connectivity_check_with_partner(body or ConnectivityTestRequest())
    return success(data, "Odoo connectivity OK")


@app.get("/api/odoo/orders")
def odoo_order_diagnostics(user: dict = Depends(require_admin)) -> dict:
    return success(odoo_service.sale_diagnostics(), "Odoo orders diagnostics")


@app.post("/api/odoo/orders")
def odoo_create_sale_order(body: DirectSaleOrderRequest, user: dict = Depends(require_admin)) -> dict:
    data, message = odoo_service.create_direct_sale_order(body)
    return success(data, message)


@app.get("/api/odoo/pos")
def odoo_pos_diagnostics(user: dict = Depends(require_admin)) -> dict:
    data, message = odoo_service.pos_diagnostics()
    return success(data, message)


@app.post("/api/odoo/pos/orders")
def odoo_create_pos_order(body: DirectPosOrderRequest, user: dict = Depends(require_admin)) -> dict:
    return success(
        odoo_service.create_direct_pos_order(body),
        "POS order created (sent to kitchen if Kitchen Display is configured)",
    )


@app.get("/api/odoo/products")
def odoo_products(
    model: str = "product.product",
    fields: str | None = None,
    limit: int | None = Query(default=None, gt=0),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=0, ge=0),
    include_inactive: bool = False,
    random: bool = False,
    user: dict = Depends(require_admin),
) -> dict:
    records, message = odoo_service.list_products(
        model=model,
        fields=fields,
        limit=limit,
        page=page,
        page_size=page_size,
        include_inactive=include_inactive,
        sample_randomly=random,
    )
    return success(records, message)
