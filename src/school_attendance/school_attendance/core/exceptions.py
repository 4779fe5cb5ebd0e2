from __future__ import annotations

from typing import Optional

from .enums import AttendanceStatus


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class MalformedInputError(ValidationError):
    """Raised when a payload cannot be parsed or misses a required field."""


class AuthenticationError(DomainError):
    """Raised when credentials are missing, invalid or expired."""


class AuthorizationError(DomainError):
    """Raised when a caller lacks the role or scope for an action."""


class NotFoundError(DomainError):
    """Raised when an entity, school or session does not exist."""


class ConcurrencyError(DomainError):
    """Raised when the per-entity day lock cannot be acquired in time."""


class InvalidTransitionError(DomainError):
    """Raised when a requested status does not follow today's path."""

    def __init__(
        self,
        message: str,
        *,
        last_status: Optional[AttendanceStatus],
        requested_status: AttendanceStatus,
    ):
        super().__init__(message)
        self.last_status = last_status
        self.requested_status = requested_status
