# kaga_health/core/errors.py
from __future__ import annotations

from fastapi import status


class ServiceError(Exception):
    """
    Base class for business-rule errors raised by the service layer.

    `kind` is the machine-readable category returned to the client and
    `code` names the exact rule that failed (e.g. "slot_already_booked").
    The HTTP mapping lives here so routers can stay thin.
    """

    kind: str = "service_error"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, code: str | None = None):
        self.code = code or self.kind
        super().__init__(self.code)


class ValidationError(ServiceError):
    """Missing or malformed field, or a value that breaks a booking rule."""

    kind = "validation_error"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class NotFoundError(ServiceError):
    """Referenced entity does not exist."""

    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ServiceError):
    """A uniqueness invariant would be violated (double booking, duplicates)."""

    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


class InvalidTransitionError(ServiceError):
    """Status change outside the appointment lifecycle graph."""

    kind = "invalid_transition"
    status_code = status.HTTP_409_CONFLICT


class PermissionDenied(ServiceError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class AuthenticationError(ServiceError):
    kind = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED


__all__ = [
    "ServiceError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "InvalidTransitionError",
    "PermissionDenied",
    "AuthenticationError",
]
