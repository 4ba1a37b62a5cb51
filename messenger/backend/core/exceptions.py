"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
"""

from typing import Any


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """
    Raised when a resource cannot be found.

    Also used for entities owned by another account, so that
    existence is never leaked across tenants.
    """

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class ValidationError(ApplicationError):
    """Raised when validation fails."""

    def __init__(self, message: str = "Validation failed", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class AuthenticationError(ApplicationError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, code="AUTH_UNAUTHORIZED")


class ConflictError(ApplicationError):
    """Raised when there is a state conflict."""

    def __init__(self, message: str = "Resource conflict") -> None:
        super().__init__(message, code="RES_CONFLICT")


class LimitExceededError(ApplicationError):
    """
    Raised by the transport layer when a plan ceiling denies an operation.

    The usage ledger itself never raises; it returns a denial which the
    HTTP endpoints convert into this error so it renders as a 429.
    """

    def __init__(
        self,
        message: str,
        limit_type: str,
        current: int,
        limit: int,
        reset_at: Any,
    ) -> None:
        self.details = {
            "limit_type": limit_type,
            "current": current,
            "limit": limit,
            "reset_at": reset_at.isoformat() if hasattr(reset_at, "isoformat") else reset_at,
        }
        super().__init__(message, code="LIMIT_EXCEEDED")


class ServiceUnavailableError(ApplicationError):
    """Raised when an optional capability is not configured."""

    def __init__(self, message: str = "Service unavailable", code: str = "SYS_UNAVAILABLE") -> None:
        super().__init__(message, code=code)


class ExternalServiceError(ApplicationError):
    """Raised when an external service call fails."""

    def __init__(self, message: str = "External service error") -> None:
        super().__init__(message, code="SYS_EXTERNAL_SERVICE_ERROR")


class DatabaseError(ApplicationError):
    """Raised when a database operation fails."""

    def __init__(self, message: str = "Database error") -> None:
        super().__init__(message, code="SYS_DATABASE_ERROR")
