"""
Shared types for payment provider adapters.

Every adapter takes an immutable CreateCheckoutParams and returns a
CheckoutResult, so the intent service does not depend on any provider's
request format.

Usage:
    from payments.adapters import CreateCheckoutParams, get_adapter

    adapter = get_adapter("mercadopago")
    result = adapter.create_checkout(params, access_token=connection.access_token)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Protocol

import requests

from payments.exceptions import ProviderError

logger = logging.getLogger(__name__)


# =============================================================================
# Data Types
# =============================================================================


@dataclass(frozen=True)
class CreateCheckoutParams:
    """
    Parameters for starting a checkout with a provider.

    Attributes:
        member_id: Member being charged
        tenant_id: Tenant that receives the money
        period: "YYYY-MM" or "registration"
        amount: Server-computed amount
        currency: ISO 4217 currency code
        title: Line item shown to the payer
        payer_email: Optional payer email, pre-filled on the checkout
        notification_url: Webhook URL for this checkout
        back_url: Where the payer returns after paying
    """

    member_id: str
    tenant_id: str
    period: str
    amount: Decimal
    currency: str
    title: str
    payer_email: str = ""
    notification_url: str = ""
    back_url: str = ""

    def __post_init__(self) -> None:
        """Validate parameters after initialization."""
        if self.amount <= 0:
            raise ValueError("amount must be positive")
        if not self.currency:
            raise ValueError("currency is required")
        if not self.member_id or not self.tenant_id:
            raise ValueError("member_id and tenant_id are required")

    @property
    def external_reference(self) -> str:
        """Reference echoed back by providers on notifications."""
        return f"{self.tenant_id}:{self.member_id}:{self.period}"


@dataclass(frozen=True)
class CheckoutResult:
    """
    Result of starting a checkout.

    Attributes:
        checkout_url: URL the payer is redirected to
        provider_preference_id: Provider reference for the checkout
        raw_response: Full provider response (for debugging)
    """

    checkout_url: str
    provider_preference_id: str
    raw_response: dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class TokenExchangeResult:
    """
    Tokens returned by an OAuth code exchange.

    Never logged.
    """

    access_token: str
    refresh_token: str
    expires_in: int | None = None

    def __repr__(self) -> str:
        return f"TokenExchangeResult(expires_in={self.expires_in!r})"


class PaymentProviderAdapter(Protocol):
    """Protocol implemented by every provider adapter."""

    provider: str
    requires_connection: bool

    def create_checkout(
        self,
        params: CreateCheckoutParams,
        access_token: str | None = None,
    ) -> CheckoutResult: ...


# =============================================================================
# HTTP Helper
# =============================================================================


def post_json(
    provider: str,
    url: str,
    payload: dict[str, Any],
    timeout: float,
    headers: dict[str, str] | None = None,
    log_context: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    POST a JSON body and return the decoded JSON response.

    Raises:
        ProviderError: Network failure, non-2xx status or a non-JSON body.
            The provider's response body is logged, never returned.
    """
    log_context = {"provider": provider, **(log_context or {})}
    start_time = time.time()

    try:
        response = requests.post(
            url,
            json=payload,
            headers={"Content-Type": "application/json", **(headers or {})},
            timeout=timeout,
        )
    except requests.exceptions.RequestException as e:
        logger.error(
            "Provider request failed",
            extra={**log_context, "error_type": type(e).__name__},
            exc_info=True,
        )
        raise ProviderError(
            "Could not reach the payment provider. Please retry.",
            provider=provider,
        ) from e

    duration_ms = (time.time() - start_time) * 1000

    if not response.ok:
        logger.error(
            "Provider returned an error status",
            extra={
                **log_context,
                "status_code": response.status_code,
                "response_body": response.text[:500],
                "duration_ms": duration_ms,
            },
        )
        raise ProviderError(
            "The payment provider rejected the request.",
            provider=provider,
            status_code=response.status_code,
        )

    try:
        data = response.json()
    except ValueError as e:
        logger.error(
            "Provider returned a non-JSON body",
            extra={**log_context, "status_code": response.status_code},
        )
        raise ProviderError(
            "Unexpected response from the payment provider.",
            provider=provider,
            status_code=response.status_code,
        ) from e

    logger.info(
        "Provider request completed",
        extra={**log_context, "status_code": response.status_code, "duration_ms": duration_ms},
    )
    return data
