"""Domain errors surfaced by the exam services.

Each error carries a stable machine `code`, the HTTP `status_code` it maps
to at the API boundary, and a human readable `message`.
"""
from __future__ import annotations

from typing import Any


class DomainError(Exception):
    code: str = "error"
    status_code: int = 500
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None, original_exception: Exception | None = None):
        self.message = message or self.default_message
        self.original_exception = original_exception
        super().__init__(self.message)

    def to_output(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


class Unauthorized(DomainError):
    code = "unauthorized"
    status_code = 401
    default_message = "Could not validate credentials"


class Forbidden(DomainError):
    code = "forbidden"
    status_code = 403
    default_message = "Operation not permitted for this role"


class ValidationError(DomainError):
    """Malformed input. `errors` lists each violation as {loc, msg, type}."""

    code = "validation_error"
    status_code = 400
    default_message = "Invalid request data"

    def __init__(self, message: str | None = None, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.errors = errors or []

    def to_output(self) -> dict[str, Any]:
        output = super().to_output()
        output["errors"] = self.errors
        return output


class NotFound(DomainError):
    code = "not_found"
    status_code = 404
    default_message = "Resource not found"


class Conflict(DomainError):
    code = "already_submitted"
    status_code = 400
    default_message = "You have already submitted this test."


class EmailTaken(DomainError):
    code = "email_taken"
    status_code = 409
    default_message = "Email already registered"


class RateLimited(DomainError):
    code = "rate_limited"
    status_code = 429
    default_message = "Too many requests. Try again shortly."


class Internal(DomainError):
    code = "internal"
    status_code = 500
    default_message = "Internal error. Please try again later."


def errors_from_pydantic(exc: Any) -> list[dict[str, Any]]:
    """Flatten a pydantic ValidationError into {loc, msg, type} entries."""
    return [
        {
            "loc": [str(part) for part in err.get("loc", ())],
            "msg": err.get("msg", ""),
            "type": err.get("type", "value_error"),
        }
        for err in exc.errors()
    ]
