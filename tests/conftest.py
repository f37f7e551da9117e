import mongomock
import pytest
from fastapi.testclient import TestClient

import database
from config import Settings, get_settings
from main import app
from schemas import Category, MenuItem

ADMIN_CODE = "test-admin-code"


def auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def settings():
    return Settings(
        jwt_secret="test-jwt-secret-key-for-testing-only",
        jwt_expires_in="1h",
        admin_secret_code=ADMIN_CODE,
    )


@pytest.fixture
def db(monkeypatch):
    mock_db = mongomock.MongoClient()["food_ordering_test"]
    monkeypatch.setattr(database, "db", mock_db)
    database.ensure_indexes()
    return mock_db


@pytest.fixture
def client(db, settings):
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client, name, email, password="secret123", role="user", code=None):
    body = {"name": name, "email": email, "password": password, "role": role}
    if code is not None:
        body["adminSecretCode"] = code
    return client.post("/api/auth/register", json=body)


@pytest.fixture
def user_token(client):
    r = register(client, "Test User", "test@example.com")
    assert r.status_code == 201, r.text
    return r.json()["data"]["token"]


@pytest.fixture
def other_token(client):
    r = register(client, "Other User", "other@example.com")
    assert r.status_code == 201, r.text
    return r.json()["data"]["token"]


@pytest.fixture
def admin_token(client):
    r = register(client, "Admin User", "admin@example.com", role="admin", code=ADMIN_CODE)
    assert r.status_code == 201, r.text
    return r.json()["data"]["token"]


@pytest.fixture
def menu(db):
    """Ids of a small catalog: two available items and one sold out."""
    def add(name, price, category, available=True):
        item = MenuItem(
            name=name,
            description=f"{name} made fresh to order",
            price=price,
            image="https://example.com/food.jpg",
            category=category,
            available=available,
        )
        return database.create_document("menuitem", item)

    return {
        "pizza": add("Margherita Pizza", 12.99, Category.PIZZA),
        "fries": add("French Fries", 5, Category.SIDES),
        "cake": add("Lava Cake", 7.99, Category.DESSERTS, available=False),
    }


def order_payload(*lines):
    return {
        "items": [
            {"menuItemId": item_id, "name": "whatever", "price": price, "quantity": qty}
            for item_id, price, qty in lines
        ],
        "deliveryDetails": {
            "name": "Test User",
            "address": "123 Main Street, Springfield",
            "phone": "+1 (555) 123-4567",
        },
    }
