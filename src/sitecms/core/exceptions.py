# src/sitecms/core/exceptions.py
from typing import Any, Optional


class AppError(Exception):
    """Base for errors that map onto an HTTP status."""

    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, details: Optional[list[dict[str, Any]]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request parameters"


class Unauthorized(AppError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(AppError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(AppError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(AppError):
    status_code = 409
    default_message = "Conflict"


class PayloadTooLarge(AppError):
    status_code = 413
    default_message = "Request body too large"


class PasswordHashingError(AppError):
    status_code = 500
    default_message = "Password hashing failed"


class EmailDeliveryError(AppError):
    status_code = 500
    default_message = "Failed to send message. Please try again later."


def field_errors(errors) -> list[dict[str, Any]]:
    """Flatten pydantic error dicts into [{field, message}]."""
    out = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        out.append({"field": ".".join(loc) or None, "message": err.get("msg", "Invalid value")})
    return out
