"""
Database Schemas for the Food Ordering API

Each persisted Pydantic model below corresponds to a MongoDB collection.
The collection name is the lowercase class name (e.g., MenuItem -> "menuitem").

Models describe shape only. Input is checked by the validation module before
it ever reaches these classes.

Field names are snake_case in the database and camelCase on the wire:
`model_dump()` feeds storage, FastAPI serializes responses by alias.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Category(str, Enum):
    PIZZA = "Pizza"
    BURGERS = "Burgers"
    PASTA = "Pasta"
    SIDES = "Sides"
    DESSERTS = "Desserts"
    DRINKS = "Drinks"
    OTHER = "Other"


class OrderStatus(str, Enum):
    ORDER_RECEIVED = "Order Received"
    PREPARING = "Preparing"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


# ===================== Collections =====================

class User(CamelModel):
    name: str = Field(..., description="Full name")
    email: str = Field(..., description="Unique, lowercased email address")
    password_hash: str = Field(..., description="BCrypt password hash")
    role: Role = Role.USER


class MenuItem(CamelModel):
    name: str = Field(..., description="Item name")
    description: str
    price: float = Field(..., description="Unit price, at most two decimals")
    image: str = Field(..., description="Image URL")
    category: Category
    available: bool = True


class OrderItem(CamelModel):
    """Embedded order line (not a collection)."""
    menu_item_id: str = Field(..., description="Referenced menu item _id as string")
    name: str = Field(..., description="Menu item name at time of order")
    price: float = Field(..., description="Unit price at time of order")
    quantity: int


class DeliveryDetails(CamelModel):
    name: str
    address: str
    phone: str


class Order(CamelModel):
    user_id: str = Field(..., description="User placing the order")
    items: List[OrderItem]
    total_amount: float = Field(..., description="Sum of price x quantity, recomputed server-side")
    delivery_details: DeliveryDetails
    status: OrderStatus = OrderStatus.ORDER_RECEIVED


# ===================== Responses =====================

class UserOut(CamelModel):
    id: str
    name: str
    email: str
    role: Role
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc: dict) -> "UserOut":
        return cls(id=doc["_id"], **doc)


class UserSummary(CamelModel):
    id: str
    name: str
    email: str


class AuthPayload(CamelModel):
    user: UserOut
    token: str


class MenuItemOut(MenuItem):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc: dict) -> "MenuItemOut":
        return cls(id=doc["_id"], **doc)


class OrderOut(Order):
    id: str
    user: Optional[UserSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc: dict, user: Optional[dict] = None) -> "OrderOut":
        summary = None
        if user:
            summary = UserSummary(id=user["_id"], name=user["name"], email=user["email"])
        return cls(id=doc["_id"], user=summary, **doc)


class CurrentUser(BaseModel):
    """Identity attached to an authenticated request."""
    user_id: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
