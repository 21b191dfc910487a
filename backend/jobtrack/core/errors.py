# jobtrack/core/errors.py
"""
Closed set of failure kinds the API can report.

Every failing operation raises ``AppError`` with one of the ``ErrorKind``
members below. The kind carries its HTTP status, the machine-readable code
sent as ``error`` in the response body, and a default client-safe message.
The translation to a response happens in exactly one place (``jobtrack.main``).
"""
from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    MISSING_CREDENTIAL = (401, "No token, authorization denied")
    MALFORMED_CREDENTIAL = (401, "Invalid token format")
    INVALID_CREDENTIAL = (401, "Token is not valid")
    EXPIRED_CREDENTIAL = (401, "Token has expired")
    UNKNOWN_IDENTITY = (401, "User not found")
    INVALID_CREDENTIALS = (401, "Invalid credentials")
    INVALID_INPUT = (400, "Invalid input")
    DUPLICATE_IDENTITY = (400, "User already exists")
    NOT_FOUND = (404, "Not found")
    INTERNAL_FAULT = (500, "Server error")

    def __init__(self, status_code: int, default_message: str) -> None:
        self.status_code = status_code
        self.default_message = default_message

    @property
    def code(self) -> str:
        return self.name

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


class AppError(Exception):
    """A classified failure, raised where it happens and rendered verbatim."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str | None = None,
        *,
        errors: dict[str, str] | None = None,
    ) -> None:
        self.kind = kind
        self.message = message or kind.default_message
        self.errors = errors or None
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.kind.code, "message": self.message}
        if self.errors:
            payload["errors"] = self.errors
        return payload

    def __repr__(self) -> str:
        return f"AppError({self.kind.name}, {self.message!r})"
