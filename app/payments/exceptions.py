"""
Payment-specific exceptions.

Each class maps onto the core hierarchy so views can answer with
error_response(exc) and get the right status code.

Exception Hierarchy:
    PaymentAlreadyApprovedError - Period already paid (ConflictError, 409)
    PaymentNotConfiguredError - No dues amount for tenant (ConfigurationError, 400)
    ProviderNotConnectedError - Tenant has no provider account (ConfigurationError, 400)
    MemberNotInTenantError - Member missing or in another tenant (ValidationError, 400)
    InvalidOAuthStateError - Malformed or forged OAuth state (ValidationError, 400)
    └── ExpiredOAuthStateError - OAuth state older than its TTL
    WebhookSignatureError - Bad provider signature (AuthError, 401)
    IntegrationDisabledError - Provider not configured on the platform (503)
    ProviderError - Provider API failure (ExternalServiceError, 502)

Usage:
    from payments.exceptions import PaymentAlreadyApprovedError

    if PaymentLedger.find_approved_payment(member_id, period):
        raise PaymentAlreadyApprovedError(
            "Payment already approved for this period",
            details={"period": period},
        )
"""

from __future__ import annotations

from core.exceptions import (
    AuthError,
    BaseApplicationError,
    ConfigurationError,
    ConflictError,
    ExternalServiceError,
    ValidationError,
)


class PaymentAlreadyApprovedError(ConflictError):
    """Raised when an approved payment already exists for (member, period)."""

    default_error_code: str = "ALREADY_PAID"


class PaymentNotConfiguredError(ConfigurationError):
    """
    Raised when the tenant has no positive dues amount configured.

    The message tells staff where to set the amount.
    """

    default_error_code: str = "PAYMENT_NOT_CONFIGURED"


class ProviderNotConnectedError(ConfigurationError):
    """Raised when a provider needs a tenant connection that does not exist."""

    default_error_code: str = "PROVIDER_NOT_CONNECTED"


class MemberNotInTenantError(ValidationError):
    """Raised when a member id does not belong to the claimed tenant."""

    default_error_code: str = "MEMBER_NOT_IN_TENANT"


class InvalidOAuthStateError(ValidationError):
    """Raised when an OAuth state token is malformed or its signature fails."""

    default_error_code: str = "INVALID_OAUTH_STATE"


class ExpiredOAuthStateError(InvalidOAuthStateError):
    default_error_code: str = "EXPIRED_OAUTH_STATE"


class WebhookSignatureError(AuthError):
    default_error_code: str = "INVALID_WEBHOOK_SIGNATURE"


class IntegrationDisabledError(BaseApplicationError):
    """
    Raised when a provider integration lacks platform credentials.

    HTTP 503: the feature exists but is switched off on this deployment.
    """

    default_error_code: str = "INTEGRATION_DISABLED"
    http_status: int = 503


class ProviderError(ExternalServiceError):
    """
    Raised when a payment provider API call fails.

    Messages are generic; the provider response is only logged.

    Attributes:
        provider: Provider name (mercadopago, dlocal)
        status_code: HTTP status returned by the provider, if any
    """

    default_error_code: str = "PROVIDER_ERROR"

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
        error_code: str | None = None,
        details: dict | None = None,
    ):
        self.provider = provider
        self.status_code = status_code
        super().__init__(message, error_code=error_code, details=details)
