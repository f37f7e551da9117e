import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Body, Depends, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware

import database
from config import Settings, get_settings, setup_logging
from database import (
    create_document,
    delete_document,
    distinct_values,
    get_document,
    get_document_by_id,
    get_documents,
    get_documents_by_ids,
    update_document,
)
from errors import (
    ApiError,
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationFailed,
    register_exception_handlers,
)
from orders import (
    compute_total,
    enrich_items,
    ensure_can_view,
    ensure_cancellation_allowed,
    ensure_status_update_allowed,
    requested_menu_item_ids,
)
from schemas import (
    AuthPayload,
    CurrentUser,
    DeliveryDetails,
    MenuItem,
    MenuItemOut,
    Order,
    OrderOut,
    OrderStatus,
    User,
    UserOut,
)
from security import create_access_token, get_current_user, hash_password, require_admin, verify_password
from seed import seed_menu
from validation import (
    ValidationResult,
    validate_login_input,
    validate_menu_item_input,
    validate_order_input,
    validate_order_status,
    validate_register_input,
)

settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s v%s", settings.app_name, settings.app_version)
    if database.connect(settings):
        database.ensure_indexes()
        if settings.seed_database:
            seed_menu()
    yield
    database.close()
    logger.info("Shutdown complete")


app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


def ok(data: Any = None, message: Optional[str] = None, **extra) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    body.update(extra)
    return body


def check(result: ValidationResult) -> None:
    if not result.valid:
        raise ValidationFailed(result.details())


# ===================== Public Endpoints =====================
@app.get("/")
def root():
    return ok(message=settings.app_name, version=settings.app_version)


@app.get("/health")
def health():
    response = {
        "success": True,
        "message": "Server is running",
        "timestamp": datetime.now(timezone.utc),
        "database": "Not Configured",
        "collections": [],
    }
    if database.db is not None:
        try:
            response["collections"] = database.db.list_collection_names()
            response["database"] = "Connected"
        except Exception as e:
            response["database"] = f"Error: {str(e)[:80]}"
    return response


# ===================== Auth =====================
@app.post("/api/auth/register", status_code=201)
def register(payload: Optional[dict] = Body(None), app_settings: Settings = Depends(get_settings)):
    payload = payload or {}
    check(validate_register_input(payload, app_settings.admin_secret_code))

    email = payload["email"].strip().lower()
    if get_document("user", {"email": email}):
        raise ConflictError("User already exists with this email")

    user = User(
        name=payload["name"].strip(),
        email=email,
        password_hash=hash_password(payload["password"]),
        role=payload["role"],
    )
    user_id = create_document("user", user)
    doc = get_document_by_id("user", user_id)
    logger.info("Registered %s user %s", user.role, user_id)

    token = create_access_token(doc, app_settings)
    return ok(AuthPayload(user=UserOut.from_doc(doc), token=token), "User registered successfully")


@app.post("/api/auth/login")
def login(payload: Optional[dict] = Body(None), app_settings: Settings = Depends(get_settings)):
    payload = payload or {}
    check(validate_login_input(payload))

    user = get_document("user", {"email": payload["email"].strip().lower()})
    if not user or not verify_password(payload["password"], user["password_hash"]):
        raise UnauthorizedError("Invalid email or password")

    token = create_access_token(user, app_settings)
    return ok(AuthPayload(user=UserOut.from_doc(user), token=token), "Login successful")


@app.get("/api/auth/me")
def me(current: CurrentUser = Depends(get_current_user)):
    user = get_document_by_id("user", current.user_id)
    if not user:
        raise NotFoundError("User not found")
    return ok({"user": UserOut.from_doc(user)})


@app.post("/api/auth/logout")
def logout(current: CurrentUser = Depends(get_current_user)):
    # Tokens are stateless; the client discards its copy
    return ok(message="Logged out successfully")


# ===================== Menu =====================
MENU_FIELDS = ("name", "description", "price", "image", "category", "available")


def _clean_menu_fields(data: dict) -> dict:
    cleaned = {}
    for key in MENU_FIELDS:
        if data.get(key) is None:
            continue
        value = data[key]
        cleaned[key] = value.strip() if isinstance(value, str) else value
    return cleaned


@app.get("/api/menu")
def list_menu(category: Optional[str] = None, available: Optional[str] = None):
    filter_q: Dict[str, Any] = {}
    if category:
        filter_q["category"] = category
    if available == "false":
        filter_q["available"] = False
    elif available != "all":
        filter_q["available"] = True
    items = get_documents("menuitem", filter_q, sort=[("category", 1), ("name", 1)])
    data = [MenuItemOut.from_doc(i) for i in items]
    return ok(data, count=len(data))


@app.get("/api/menu/categories")
def list_categories():
    return ok(distinct_values("menuitem", "category"))


@app.get("/api/menu/{item_id}")
def get_menu_item(item_id: str):
    item = get_document_by_id("menuitem", item_id)
    if not item:
        raise NotFoundError("Menu item not found")
    return ok(MenuItemOut.from_doc(item))


@app.post("/api/menu", status_code=201)
def create_menu_item(payload: Optional[dict] = Body(None), admin: CurrentUser = Depends(require_admin)):
    payload = payload or {}
    check(validate_menu_item_input(payload))

    item = MenuItem(**_clean_menu_fields(payload))
    item_id = create_document("menuitem", item)
    logger.info("Menu item %s created by %s", item_id, admin.user_id)
    return ok(MenuItemOut.from_doc(get_document_by_id("menuitem", item_id)), "Menu item created successfully")


@app.put("/api/menu/{item_id}")
def update_menu_item(item_id: str, payload: Optional[dict] = Body(None), admin: CurrentUser = Depends(require_admin)):
    existing = get_document_by_id("menuitem", item_id)
    if not existing:
        raise NotFoundError("Menu item not found")

    changes = _clean_menu_fields(payload or {})
    merged = {key: existing.get(key) for key in MENU_FIELDS}
    merged.update(changes)
    check(validate_menu_item_input(merged))

    updated = update_document("menuitem", item_id, changes)
    if not updated:
        raise NotFoundError("Menu item not found")
    logger.info("Menu item %s updated by %s", item_id, admin.user_id)
    return ok(MenuItemOut.from_doc(updated), "Menu item updated successfully")


@app.delete("/api/menu/{item_id}")
def delete_menu_item(item_id: str, admin: CurrentUser = Depends(require_admin)):
    if not delete_document("menuitem", item_id):
        raise NotFoundError("Menu item not found")
    logger.info("Menu item %s deleted by %s", item_id, admin.user_id)
    return ok(message="Menu item deleted successfully")


# ===================== Orders =====================
def _users_by_id(user_ids: List[str]) -> Dict[str, dict]:
    users = get_documents_by_ids("user", set(user_ids))
    return {u["_id"]: u for u in users}


def _parse_date(value: str, field: str) -> datetime:
    # fromisoformat only accepts a trailing "Z" from Python 3.11
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise ValidationFailed([f"{field}: Invalid date format"])
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _get_order(order_id: str) -> dict:
    order = get_document_by_id("order", order_id)
    if not order:
        raise NotFoundError("Order not found")
    return order


@app.post("/api/orders", status_code=201)
def create_order(payload: Optional[dict] = Body(None), current: CurrentUser = Depends(get_current_user)):
    payload = payload or {}
    check(validate_order_input(payload))

    items = payload["items"]
    menu_items = get_documents_by_ids("menuitem", requested_menu_item_ids(items))
    order_items = enrich_items(items, menu_items)

    total = compute_total(order_items)
    if total <= 0:
        raise ApiError("Order total must be greater than 0", 400)

    details = payload["deliveryDetails"]
    order = Order(
        user_id=current.user_id,
        items=order_items,
        total_amount=total,
        delivery_details=DeliveryDetails(
            name=details["name"].strip(),
            address=details["address"].strip(),
            phone=details["phone"].strip(),
        ),
        status=OrderStatus.ORDER_RECEIVED,
    )
    order_id = create_document("order", order)
    logger.info("Order %s placed by %s: %d items, total %.2f", order_id, current.user_id, len(order_items), total)

    owner = get_document_by_id("user", current.user_id)
    return ok(OrderOut.from_doc(get_document_by_id("order", order_id), owner), "Order placed successfully")


@app.get("/api/orders")
def list_my_orders(current: CurrentUser = Depends(get_current_user)):
    orders = get_documents("order", {"user_id": current.user_id}, sort=[("created_at", -1)])
    data = [OrderOut.from_doc(o) for o in orders]
    return ok(data, count=len(data))


@app.get("/api/orders/all")
def list_all_orders(
    status: Optional[str] = None,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    admin: CurrentUser = Depends(require_admin),
):
    filter_q: Dict[str, Any] = {}
    if status:
        check(validate_order_status(status))
        filter_q["status"] = status
    if start_date or end_date:
        created: Dict[str, datetime] = {}
        if start_date:
            created["$gte"] = _parse_date(start_date, "startDate")
        if end_date:
            created["$lte"] = _parse_date(end_date, "endDate")
        filter_q["created_at"] = created

    orders = get_documents("order", filter_q, sort=[("created_at", -1)])
    users = _users_by_id([o["user_id"] for o in orders])
    data = [OrderOut.from_doc(o, users.get(o["user_id"])) for o in orders]
    return ok(data, count=len(data))


@app.get("/api/orders/{order_id}")
def get_order(order_id: str, current: CurrentUser = Depends(get_current_user)):
    order = _get_order(order_id)
    ensure_can_view(order, current)
    return ok(OrderOut.from_doc(order))


@app.put("/api/orders/{order_id}/status")
def update_order_status(order_id: str, payload: Optional[dict] = Body(None), admin: CurrentUser = Depends(require_admin)):
    status = (payload or {}).get("status")
    check(validate_order_status(status))

    order = _get_order(order_id)
    ensure_status_update_allowed(order)

    updated = update_document("order", order_id, {"status": status})
    if not updated:
        raise NotFoundError("Order not found")
    logger.info("Order %s status %r -> %r by %s", order_id, order["status"], status, admin.user_id)
    return ok(OrderOut.from_doc(updated), "Order status updated successfully")


@app.put("/api/orders/{order_id}/cancel")
def cancel_order(order_id: str, current: CurrentUser = Depends(get_current_user)):
    order = _get_order(order_id)
    ensure_cancellation_allowed(order, current.user_id)

    updated = update_document("order", order_id, {"status": OrderStatus.CANCELLED.value})
    if not updated:
        raise NotFoundError("Order not found")
    logger.info("Order %s cancelled by %s", order_id, current.user_id)
    return ok(OrderOut.from_doc(updated), "Order cancelled successfully")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
