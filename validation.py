"""
Input Validation

Pure functions that check the shape, range and format of request payloads.
Each validator accepts an untyped record (usually a decoded JSON object),
evaluates every rule, and returns a ValidationResult listing all field-level
problems at once. Validators never raise.
"""
import re
from numbers import Real
from typing import Any, List, Optional

from pydantic import BaseModel

from schemas import Category, OrderStatus, Role

EMAIL_RE = re.compile(r"^\w+(?:[.-]\w+)*@\w+(?:[.-]\w+)*\.\w{2,3}$", re.ASCII)
PHONE_RE = re.compile(r"^[\d\s\-\+\(\)]{10,20}$", re.ASCII)
PRICE_RE = re.compile(r"\d+(\.\d{1,2})?", re.ASCII)

MIN_PASSWORD_LENGTH = 6
# Largest quantity MongoDB can store as a 64-bit integer
MAX_QUANTITY = 2 ** 63 - 1

CATEGORIES = [c.value for c in Category]
STATUSES = [s.value for s in OrderStatus]
ROLES = [r.value for r in Role]


class FieldError(BaseModel):
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ValidationResult(BaseModel):
    valid: bool
    errors: List[FieldError] = []

    @classmethod
    def from_errors(cls, errors: List[FieldError]) -> "ValidationResult":
        return cls(valid=not errors, errors=errors)

    def details(self) -> List[str]:
        return [str(e) for e in self.errors]


# ===================== Primitive checks =====================

def is_valid_email(email: Any) -> bool:
    return isinstance(email, str) and EMAIL_RE.fullmatch(email) is not None


def is_valid_phone(phone: Any) -> bool:
    return isinstance(phone, str) and PHONE_RE.fullmatch(phone) is not None


def is_valid_password(password: Any) -> bool:
    return isinstance(password, str) and len(password) >= MIN_PASSWORD_LENGTH


def is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid amount
    return isinstance(value, Real) and not isinstance(value, bool)


def has_two_decimals_at_most(value: Real) -> bool:
    # Compares the printed form so float formatting decides acceptance
    return PRICE_RE.fullmatch(str(value)) is not None


def _text(value: Any) -> Optional[str]:
    """Trimmed string, or None when missing, blank or not a string."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _check_length(errors: List[FieldError], field: str, value: Any, label: str,
                  min_len: int, max_len: int, required: str) -> None:
    text = _text(value)
    if text is None:
        errors.append(FieldError(field=field, message=required))
    elif len(text) < min_len:
        errors.append(FieldError(field=field, message=f"{label} must be at least {min_len} characters long"))
    elif len(text) > max_len:
        errors.append(FieldError(field=field, message=f"{label} cannot exceed {max_len} characters"))


def _check_email(errors: List[FieldError], value: Any) -> None:
    if _text(value) is None:
        errors.append(FieldError(field="email", message="Email is required"))
    elif not is_valid_email(value):
        errors.append(FieldError(field="email", message="Please enter a valid email address"))


def _as_record(data: Any) -> dict:
    return data if isinstance(data, dict) else {}


# ===================== Auth =====================

def validate_register_input(data: Any, admin_secret_code: str) -> ValidationResult:
    """
    Validate a registration payload.

    Admin registration needs `adminSecretCode` equal to the configured
    `admin_secret_code`; a missing code and a wrong code are reported
    with different messages.
    """
    data = _as_record(data)
    errors: List[FieldError] = []

    _check_length(errors, "name", data.get("name"), "Name", 2, 50, "Name is required")
    _check_email(errors, data.get("email"))

    password = data.get("password")
    if not isinstance(password, str) or len(password) == 0:
        errors.append(FieldError(field="password", message="Password is required"))
    elif not is_valid_password(password):
        errors.append(FieldError(
            field="password",
            message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
        ))

    role = data.get("role")
    if not role:
        errors.append(FieldError(field="role", message="Role is required"))
    elif role not in ROLES:
        errors.append(FieldError(field="role", message="Role must be either user or admin"))

    if role == Role.ADMIN.value:
        code = data.get("adminSecretCode")
        if code is None or (isinstance(code, str) and not code.strip()):
            errors.append(FieldError(
                field="adminSecretCode",
                message="Admin secret code is required for admin registration",
            ))
        elif code != admin_secret_code:
            errors.append(FieldError(field="adminSecretCode", message="Invalid admin secret code"))

    return ValidationResult.from_errors(errors)


def validate_login_input(data: Any) -> ValidationResult:
    data = _as_record(data)
    errors: List[FieldError] = []

    _check_email(errors, data.get("email"))

    password = data.get("password")
    if not isinstance(password, str) or len(password) == 0:
        errors.append(FieldError(field="password", message="Password is required"))

    return ValidationResult.from_errors(errors)


# ===================== Menu =====================

def validate_menu_item_input(data: Any) -> ValidationResult:
    data = _as_record(data)
    errors: List[FieldError] = []

    _check_length(errors, "name", data.get("name"), "Name", 2, 100, "Item name is required")
    _check_length(errors, "description", data.get("description"), "Description", 10, 500,
                  "Description is required")

    price = data.get("price")
    if price is None:
        errors.append(FieldError(field="price", message="Price is required"))
    elif not is_number(price):
        errors.append(FieldError(field="price", message="Price must be a number"))
    elif price < 0:
        errors.append(FieldError(field="price", message="Price cannot be negative"))
    elif not has_two_decimals_at_most(price):
        errors.append(FieldError(field="price", message="Price must have at most 2 decimal places"))

    if _text(data.get("image")) is None:
        errors.append(FieldError(field="image", message="Image URL is required"))

    category = data.get("category")
    if _text(category) is None:
        errors.append(FieldError(field="category", message="Category is required"))
    elif category not in CATEGORIES:
        errors.append(FieldError(
            field="category",
            message=f"Category must be one of: {', '.join(CATEGORIES)}",
        ))

    available = data.get("available")
    if available is not None and not isinstance(available, bool):
        errors.append(FieldError(field="available", message="Available must be true or false"))

    return ValidationResult.from_errors(errors)


# ===================== Orders =====================

def _validate_order_item(errors: List[FieldError], index: int, item: Any) -> None:
    prefix = f"items[{index}]"
    if not isinstance(item, dict):
        errors.append(FieldError(field=prefix, message="Order item must be an object"))
        return

    if not item.get("menuItemId"):
        errors.append(FieldError(field=f"{prefix}.menuItemId", message="Menu item ID is required"))
    if not item.get("name"):
        errors.append(FieldError(field=f"{prefix}.name", message="Item name is required"))

    price = item.get("price")
    if price is None:
        errors.append(FieldError(field=f"{prefix}.price", message="Item price is required"))
    elif not is_number(price):
        errors.append(FieldError(field=f"{prefix}.price", message="Item price must be a number"))
    elif price < 0:
        errors.append(FieldError(field=f"{prefix}.price", message="Price cannot be negative"))

    quantity = item.get("quantity")
    if quantity is None:
        errors.append(FieldError(field=f"{prefix}.quantity", message="Quantity is required"))
    elif not is_number(quantity):
        errors.append(FieldError(field=f"{prefix}.quantity", message="Quantity must be a whole number"))
    elif quantity < 1:
        errors.append(FieldError(field=f"{prefix}.quantity", message="Quantity must be at least 1"))
    elif isinstance(quantity, float) and not quantity.is_integer():
        errors.append(FieldError(field=f"{prefix}.quantity", message="Quantity must be a whole number"))
    elif quantity > MAX_QUANTITY:
        errors.append(FieldError(field=f"{prefix}.quantity", message="Quantity is too large"))


def validate_order_input(data: Any) -> ValidationResult:
    """
    Validate an order payload: the item list and the delivery details.

    Item problems are indexed (`items[1].quantity`) so a multi-item cart
    reports every offending line.
    """
    data = _as_record(data)
    errors: List[FieldError] = []

    items = data.get("items")
    if not isinstance(items, list):
        errors.append(FieldError(field="items", message="Order items are required"))
    elif not items:
        errors.append(FieldError(field="items", message="Order must contain at least one item"))
    else:
        for index, item in enumerate(items):
            _validate_order_item(errors, index, item)

    details = data.get("deliveryDetails")
    if not isinstance(details, dict):
        errors.append(FieldError(field="deliveryDetails", message="Delivery details are required"))
    else:
        _check_length(errors, "deliveryDetails.name", details.get("name"), "Name", 2, 50,
                      "Delivery name is required")
        _check_length(errors, "deliveryDetails.address", details.get("address"), "Address", 10, 200,
                      "Delivery address is required")

        phone = details.get("phone")
        if _text(phone) is None:
            errors.append(FieldError(field="deliveryDetails.phone", message="Phone number is required"))
        elif not is_valid_phone(phone):
            errors.append(FieldError(field="deliveryDetails.phone", message="Please enter a valid phone number"))

    return ValidationResult.from_errors(errors)


def validate_order_status(status: Any) -> ValidationResult:
    errors: List[FieldError] = []

    if not status:
        errors.append(FieldError(field="status", message="Status is required"))
    elif status not in STATUSES:
        errors.append(FieldError(field="status", message=f"Status must be one of: {', '.join(STATUSES)}"))

    return ValidationResult.from_errors(errors)
