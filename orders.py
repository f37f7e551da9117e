"""
Order lifecycle guard and order pricing.

Lifecycle:

    Order Received -> Preparing -> Out for Delivery -> Delivered
    any non-terminal status -> Cancelled

Delivered and Cancelled are terminal. Admins may move a non-terminal order
to any status; intermediate states are not enforced. Customers may cancel
their own order until it is delivered.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List

from database import is_object_id
from errors import ApiError, ForbiddenError
from schemas import CurrentUser, OrderItem, OrderStatus

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED.value, OrderStatus.CANCELLED.value})

CENT = Decimal("0.01")


# ===================== Lifecycle =====================

def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def ensure_can_view(order: dict, user: CurrentUser) -> None:
    if order["user_id"] != user.user_id and not user.is_admin:
        raise ForbiddenError("Access denied")


def ensure_status_update_allowed(order: dict) -> None:
    """Reject admin status changes on delivered or cancelled orders."""
    current = order["status"]
    if is_terminal(current):
        raise ApiError(f"Cannot update status of {current.lower()} orders", 400)


def ensure_cancellation_allowed(order: dict, user_id: str) -> None:
    if order["user_id"] != user_id:
        raise ForbiddenError("Access denied")
    if order["status"] == OrderStatus.DELIVERED.value:
        raise ApiError("Cannot cancel delivered orders", 400)
    if order["status"] == OrderStatus.CANCELLED.value:
        raise ApiError("Order is already cancelled", 400)


# ===================== Pricing =====================

def round_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def compute_total(items: Iterable[OrderItem]) -> float:
    """Sum of price x quantity, rounded half away from zero to cents."""
    total = sum((Decimal(str(item.price)) * item.quantity for item in items), Decimal("0"))
    return float(round_money(total))


def enrich_items(items: List[dict], menu_items: List[dict]) -> List[OrderItem]:
    """
    Rebuild client order lines from the catalog.

    Only `menuItemId` and `quantity` are taken from the client; name and
    price come from the persisted menu item.
    """
    by_id: Dict[str, dict] = {m["_id"]: m for m in menu_items}

    missing = {item["menuItemId"] for item in items} - set(by_id)
    if missing:
        raise ApiError("One or more menu items not found", 400)

    unavailable = [m["name"] for m in menu_items if not m.get("available", True)]
    if unavailable:
        raise ApiError(f"Some items are not available: {', '.join(unavailable)}", 400)

    enriched = []
    for item in items:
        menu_item = by_id[item["menuItemId"]]
        enriched.append(OrderItem(
            menu_item_id=item["menuItemId"],
            name=menu_item["name"],
            price=menu_item["price"],
            quantity=int(item["quantity"]),
        ))
    return enriched


def requested_menu_item_ids(items: List[dict]) -> List[str]:
    """Distinct menu item ids in request order; malformed ids are rejected."""
    ids: List[str] = []
    for item in items:
        menu_item_id = item["menuItemId"]
        if not is_object_id(menu_item_id):
            raise ApiError("Invalid ID format", 400)
        if menu_item_id not in ids:
            ids.append(menu_item_id)
    return ids
