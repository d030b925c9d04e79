"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error responses across the application
- Machine-readable error codes for client handling
- A single HTTP status per error class, so views never guess

Exception Hierarchy:
    BaseApplicationError (base, 500)
    ├── ValidationError - Input validation failures (400)
    ├── AuthError - Missing or invalid credentials (401)
    ├── PermissionDeniedError - Authorization failures (403)
    ├── ConflictError - State conflicts, duplicates (409)
    ├── ConfigurationError - Missing setup the caller can fix (400)
    ├── TransientInfraError - Backing store temporarily unavailable (503)
    ├── ExternalServiceError - Third-party service failures (502)
    └── InternalError - Unexpected failures (500)

Usage:
    from core.exceptions import ValidationError, ConflictError

    # Raise with message only
    raise ValidationError("Invalid period format")

    # Raise with error code and details
    raise ConflictError(
        "Payment already approved for this period",
        error_code="ALREADY_PAID",
        details={"period": "2024-05"},
    )

    # Convert to dict for API response
    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=e.http_status)

Note:
    These exceptions are for domain/business logic errors.
    DRF handles API-layer exceptions (serialization, authentication, etc.).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Provides a consistent interface for error handling across the application.
    All custom exceptions should inherit from this class.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, metadata, etc.)
        http_status: HTTP status code views should answer with

    Example:
        try:
            require_tenant_staff(request.user, tenant_id)
        except PermissionDeniedError as e:
            logger.info(f"Staff check failed: {e.error_code}")
            return Response(e.to_dict(), status=e.http_status)
    """

    default_error_code: str = "APPLICATION_ERROR"
    http_status: int = 500

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Returns:
            Dict with error, error_code, and details keys

        Example:
            {
                "error": "Member not found",
                "error_code": "MEMBER_NOT_FOUND",
                "details": {"member_id": "..."}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails.

    Use for:
    - Invalid field formats
    - Business rule violations on input
    - Missing required fields

    Example:
        raise ValidationError(
            "Validation failed",
            details={"period": ["Expected YYYY-MM or 'registration'"]},
        )

    Note:
        For DRF serializer validation, use DRF's built-in validation.
        Use this for service-layer validation logic.
    """

    default_error_code: str = "VALIDATION_ERROR"
    http_status: int = 400


class AuthError(BaseApplicationError):
    """
    Raised when a caller cannot be authenticated.

    Use for credentials that are missing, malformed or fail verification
    (for example a webhook signature that does not match).
    """

    default_error_code: str = "AUTHENTICATION_FAILED"
    http_status: int = 401


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when user lacks permission for an operation.

    Use for:
    - Unauthorized resource access
    - Role-based access control violations

    Note:
        For authentication failures (missing/invalid token), DRF's
        NotAuthenticated is raised by the permission classes. Use this
        for authorization failures.
    """

    default_error_code: str = "PERMISSION_DENIED"
    http_status: int = 403


class ConflictError(BaseApplicationError):
    """
    Raised when operation conflicts with current resource state.

    Use for:
    - Duplicate entries (unique constraint violations)
    - Concurrent modification conflicts
    - Invalid state transitions

    Note:
        HTTP 409 Conflict is the appropriate status for these errors.
    """

    default_error_code: str = "CONFLICT"
    http_status: int = 409


class ConfigurationError(BaseApplicationError):
    """
    Raised when an operation needs setup that has not been done yet.

    The message is shown to the user, so it must say what to configure.
    These are expected and frequent; log them at INFO, not as failures.
    """

    default_error_code: str = "CONFIGURATION_REQUIRED"
    http_status: int = 400


class TransientInfraError(BaseApplicationError):
    """
    Raised when a backing service is temporarily unavailable.

    Safe to retry. HTTP 503 Service Unavailable.
    """

    default_error_code: str = "SERVICE_UNAVAILABLE"
    http_status: int = 503


class ExternalServiceError(BaseApplicationError):
    """
    Raised when an external service call fails.

    Use for:
    - Third-party API failures
    - Network timeouts
    - Unexpected external service responses

    Note:
        Log the original error for debugging but don't expose
        internal details to clients in production.
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"
    http_status: int = 502


class InternalError(BaseApplicationError):
    """
    Raised for unexpected failures such as persistence errors.

    The message returned to clients is generic; the original error
    is attached to the log record only.
    """

    default_error_code: str = "INTERNAL_ERROR"
    http_status: int = 500
