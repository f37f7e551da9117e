"""
Error taxonomy and the single formatting layer for failed requests.

Every failure, whether raised by a handler, the auth dependencies, FastAPI's
own request parsing or the database driver, leaves the API as

    {"success": false, "error": <message>, "details": [...]}
"""
import logging
from typing import List, Optional

from bson.errors import InvalidId
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import get_settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """An error with an HTTP status code and optional field-level details."""

    def __init__(self, message: str, status_code: int = 500, details: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class NotFoundError(ApiError):
    def __init__(self, message: str = "Not found"):
        super().__init__(message, 404)


class UnauthorizedError(ApiError):
    def __init__(self, message: str = "Access denied. Please authenticate."):
        super().__init__(message, 401)


class ForbiddenError(ApiError):
    def __init__(self, message: str = "Access denied"):
        super().__init__(message, 403)


class ConflictError(ApiError):
    def __init__(self, message: str, details: Optional[List[str]] = None):
        super().__init__(message, 409, details)


class ValidationFailed(ApiError):
    def __init__(self, details: List[str], message: str = "Validation failed"):
        super().__init__(message, 400, details)


def error_response(status_code: int, message: str, details: Optional[List[str]] = None) -> JSONResponse:
    content = {"success": False, "error": message}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def _log(request: Request, status_code: int, message: str) -> None:
    logger.warning("%s %s -> %d: %s", request.method, request.url.path, status_code, message)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    _log(request, exc.status_code, exc.message)
    return error_response(exc.status_code, exc.message, exc.details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = f"Route not found: {request.url.path}"
    else:
        message = str(exc.detail)
    _log(request, exc.status_code, message)
    return error_response(exc.status_code, message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        details.append(f"{loc or 'body'}: {err.get('msg')}")
    _log(request, 400, "Validation failed")
    return error_response(400, "Validation failed", details)


async def duplicate_key_handler(request: Request, exc: DuplicateKeyError) -> JSONResponse:
    key_value = (exc.details or {}).get("keyValue") or {}
    details = [f"{field} already exists" for field in key_value] or None
    _log(request, 409, "Duplicate entry")
    return error_response(409, "Duplicate entry", details)


async def invalid_id_handler(request: Request, exc: InvalidId) -> JSONResponse:
    _log(request, 400, "Invalid ID format")
    return error_response(400, "Invalid ID format")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    details = [str(exc)] if get_settings().debug else None
    return error_response(500, "Internal Server Error", details)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(DuplicateKeyError, duplicate_key_handler)
    app.add_exception_handler(InvalidId, invalid_id_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
