"""
Password hashing, JWT issue/verify, and the FastAPI auth dependencies.
"""
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, Header
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from config import Settings, get_settings
from database import get_document_by_id, is_object_id
from errors import ApiError, ForbiddenError, UnauthorizedError
from schemas import CurrentUser, Role

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


# ─── Password Hashing ─────────────────────────────────────────────────────────

def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


# ─── JWT ──────────────────────────────────────────────────────────────────────

def parse_duration(value: str) -> timedelta:
    """Parse a lifetime such as "7d", "12h", "30m", "45s" or "3600"."""
    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _UNIT_SECONDS[unit])


def _secret(settings: Settings) -> str:
    if not settings.jwt_secret:
        raise ApiError("JWT_SECRET is not defined in environment variables", 500)
    return settings.jwt_secret


def create_access_token(user: dict, settings: Settings) -> str:
    now = datetime.now(tz=timezone.utc)
    payload = {
        "userId": user["_id"],
        "email": user["email"],
        "role": user["role"],
        "iat": now,
        "exp": now + parse_duration(settings.jwt_expires_in),
    }
    return jwt.encode(payload, _secret(settings), algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> Dict[str, Any]:
    """Decode and validate a JWT. Raises JWTError on failure."""
    return jwt.decode(token, _secret(settings), algorithms=[settings.jwt_algorithm])


# ─── Dependencies ─────────────────────────────────────────────────────────────

def get_current_user(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    if not authorization or not authorization.startswith("Bearer "):
        raise UnauthorizedError("Access denied. No token provided.")

    token = authorization[len("Bearer "):].strip()
    try:
        claims = decode_access_token(token, settings)
    except ExpiredSignatureError:
        raise UnauthorizedError("Token expired. Please login again.")
    except JWTError:
        raise UnauthorizedError("Invalid token.")

    user_id = claims.get("userId")
    user = get_document_by_id("user", user_id) if is_object_id(user_id) else None
    if not user:
        raise UnauthorizedError("User not found.")

    return CurrentUser(user_id=user["_id"], email=user["email"], role=user["role"])


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if user.role != Role.ADMIN:
        raise ForbiddenError("Access denied. Admin privileges required.")
    return user
