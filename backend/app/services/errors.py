"""Typed failures raised by the service layer.

Routers translate these into HTTP responses using ``status_code`` so every
failure maps to the same status regardless of the endpoint that raised it.
"""

from __future__ import annotations

from typing import Any, Optional


class ServiceError(RuntimeError):
    """Base class for expected service failures."""

    status_code = 400

    def __init__(self, message: str, *, context: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.context = context or {}


class NotFoundError(ServiceError):
    """Raised when a room, bill, tenant or other record does not exist."""

    status_code = 404


class ValidationError(ServiceError):
    """Raised for malformed dates, negative rates or inconsistent meter values."""

    status_code = 400


class ConflictError(ServiceError):
    """Raised when a record collides with an existing one (overlapping periods, duplicates)."""

    status_code = 409


class InvalidStateError(ServiceError):
    """Raised when the current state forbids the operation (e.g. mutating a paid bill)."""

    status_code = 400
