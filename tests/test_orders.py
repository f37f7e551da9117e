import pytest

from errors import ApiError, ForbiddenError
from orders import (
    compute_total,
    enrich_items,
    ensure_can_view,
    ensure_cancellation_allowed,
    ensure_status_update_allowed,
    is_terminal,
    requested_menu_item_ids,
)
from schemas import CurrentUser, OrderItem

OWNER = "64b7f0c2a1b2c3d4e5f60001"
STRANGER = "64b7f0c2a1b2c3d4e5f60002"
PIZZA = "64b7f0c2a1b2c3d4e5f6aaaa"
FRIES = "64b7f0c2a1b2c3d4e5f6bbbb"


def order(status="Order Received", user_id=OWNER):
    return {"_id": "64b7f0c2a1b2c3d4e5f6cccc", "user_id": user_id, "status": status}


def line(price, quantity):
    return OrderItem(menu_item_id=PIZZA, name="Pizza", price=price, quantity=quantity)


# ─── Totals ───────────────────────────────────────────────────────────────────

def test_total_is_sum_of_lines():
    assert compute_total([line(10, 2), line(5, 3)]) == 35.0


def test_total_avoids_float_drift():
    # 0.1 * 3 in binary floating point is 0.30000000000000004
    assert compute_total([line(0.1, 3)]) == 0.3
    assert compute_total([line(19.99, 3), line(4.49, 1)]) == 64.46


def test_total_of_free_items_is_zero():
    assert compute_total([line(0, 4)]) == 0.0


# ─── Enrichment ───────────────────────────────────────────────────────────────

MENU = [
    {"_id": PIZZA, "name": "Margherita Pizza", "price": 12.99, "available": True},
    {"_id": FRIES, "name": "French Fries", "price": 4.5, "available": True},
]


def test_enrichment_uses_catalog_name_and_price():
    items = [
        {"menuItemId": PIZZA, "name": "Cheap Pizza", "price": 0.01, "quantity": 2},
        {"menuItemId": FRIES, "name": "Fries", "price": 1, "quantity": 1.0},
    ]
    enriched = enrich_items(items, MENU)
    assert [(i.name, i.price, i.quantity) for i in enriched] == [
        ("Margherita Pizza", 12.99, 2),
        ("French Fries", 4.5, 1),
    ]
    assert compute_total(enriched) == 30.48


def test_enrichment_rejects_unknown_items():
    items = [{"menuItemId": "64b7f0c2a1b2c3d4e5f6dddd", "quantity": 1}]
    with pytest.raises(ApiError) as exc:
        enrich_items(items, MENU)
    assert exc.value.status_code == 400
    assert exc.value.message == "One or more menu items not found"


def test_enrichment_rejects_unavailable_items():
    menu = [dict(MENU[0], available=False), MENU[1]]
    items = [{"menuItemId": PIZZA, "quantity": 1}, {"menuItemId": FRIES, "quantity": 1}]
    with pytest.raises(ApiError) as exc:
        enrich_items(items, menu)
    assert exc.value.message == "Some items are not available: Margherita Pizza"


def test_repeated_item_lines_are_kept():
    items = [{"menuItemId": PIZZA, "quantity": 1}, {"menuItemId": PIZZA, "quantity": 2}]
    assert requested_menu_item_ids(items) == [PIZZA]
    assert len(enrich_items(items, MENU[:1])) == 2


def test_malformed_menu_item_id():
    with pytest.raises(ApiError) as exc:
        requested_menu_item_ids([{"menuItemId": "not-an-id", "quantity": 1}])
    assert exc.value.message == "Invalid ID format"


# ─── Lifecycle ────────────────────────────────────────────────────────────────

def test_terminal_statuses():
    assert is_terminal("Delivered")
    assert is_terminal("Cancelled")
    assert not is_terminal("Out for Delivery")


@pytest.mark.parametrize("status", ["Order Received", "Preparing", "Out for Delivery"])
def test_admin_may_update_open_orders(status):
    ensure_status_update_allowed(order(status))


@pytest.mark.parametrize("status, message", [
    ("Delivered", "Cannot update status of delivered orders"),
    ("Cancelled", "Cannot update status of cancelled orders"),
])
def test_terminal_orders_are_locked(status, message):
    with pytest.raises(ApiError) as exc:
        ensure_status_update_allowed(order(status))
    assert exc.value.status_code == 400
    assert exc.value.message == message


@pytest.mark.parametrize("status", ["Order Received", "Preparing"])
def test_owner_can_cancel(status):
    ensure_cancellation_allowed(order(status), OWNER)


def test_cannot_cancel_delivered_order():
    with pytest.raises(ApiError) as exc:
        ensure_cancellation_allowed(order("Delivered"), OWNER)
    assert exc.value.message == "Cannot cancel delivered orders"


def test_cancelling_twice_is_an_error():
    with pytest.raises(ApiError) as exc:
        ensure_cancellation_allowed(order("Cancelled"), OWNER)
    assert exc.value.message == "Order is already cancelled"


def test_only_owner_can_cancel():
    with pytest.raises(ForbiddenError):
        ensure_cancellation_allowed(order(), STRANGER)


def test_view_rules():
    ensure_can_view(order(), CurrentUser(user_id=OWNER, email="o@example.com", role="user"))
    ensure_can_view(order(), CurrentUser(user_id=STRANGER, email="a@example.com", role="admin"))
    with pytest.raises(ForbiddenError):
        ensure_can_view(order(), CurrentUser(user_id=STRANGER, email="s@example.com", role="user"))
