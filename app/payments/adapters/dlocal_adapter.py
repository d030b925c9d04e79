"""
dLocal Go adapter.

dLocal checkouts are created with platform-wide API keys; tenants do
not connect their own account.

Configuration (via settings):
- DLOCAL_API_KEY / DLOCAL_SECRET_KEY: Platform credentials
- DLOCAL_API_URL: API base URL (default: https://api.dlocalgo.com)
- DLOCAL_COUNTRY: Country code sent with payments (default: AR)

Notifications are signed with the platform secret key:

    Authorization: V2-HMAC-SHA256, Signature: <hex>

where <hex> is HMAC-SHA256(secret_key, api_key + raw request body).
"""

from __future__ import annotations

import hashlib
import hmac
import logging

from django.conf import settings

from payments.adapters.base import CheckoutResult, CreateCheckoutParams, post_json
from payments.exceptions import (
    IntegrationDisabledError,
    ProviderError,
    WebhookSignatureError,
)
from payments.state_machines import PaymentProvider

logger = logging.getLogger(__name__)


class DLocalAdapter:
    """Adapter for the dLocal Go payments API."""

    provider = PaymentProvider.DLOCAL
    requires_connection = False

    def __init__(
        self,
        api_key: str | None = None,
        secret_key: str | None = None,
        api_url: str | None = None,
        country: str | None = None,
        timeout: float | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.DLOCAL_API_KEY
        self.secret_key = secret_key if secret_key is not None else settings.DLOCAL_SECRET_KEY
        self.api_url = (api_url or settings.DLOCAL_API_URL).rstrip("/")
        self.country = country or settings.DLOCAL_COUNTRY
        self.timeout = timeout or getattr(settings, "DLOCAL_API_TIMEOUT_SECONDS", 10)

    @property
    def is_enabled(self) -> bool:
        return bool(self.api_key and self.secret_key)

    def create_checkout(
        self,
        params: CreateCheckoutParams,
        access_token: str | None = None,
    ) -> CheckoutResult:
        """
        Create a dLocal Go payment and return its redirect URL.

        Raises:
            IntegrationDisabledError: Platform keys missing
            ProviderError: Network failure or error response
        """
        if not self.is_enabled:
            raise IntegrationDisabledError(
                "dLocal integration is not enabled on this platform.",
                details={"provider": self.provider},
            )

        body = {
            "amount": float(params.amount),
            "currency": params.currency,
            "country": self.country,
            "order_id": params.external_reference,
            "description": params.title,
        }
        if params.notification_url:
            body["notification_url"] = params.notification_url
        if params.back_url:
            body["success_url"] = params.back_url
            body["back_url"] = params.back_url

        data = post_json(
            self.provider,
            f"{self.api_url}/v1/payments",
            body,
            timeout=self.timeout,
            headers={"Authorization": f"Bearer {self.api_key}:{self.secret_key}"},
            log_context={
                "operation": "create_checkout",
                "tenant_id": params.tenant_id,
                "member_id": params.member_id,
                "period": params.period,
            },
        )

        checkout_url = data.get("redirect_url")
        payment_id = data.get("id")
        if not checkout_url or not payment_id:
            logger.error(
                "dLocal payment response incomplete",
                extra={"operation": "create_checkout", "tenant_id": params.tenant_id},
            )
            raise ProviderError(
                "Unexpected response from the payment provider.",
                provider=self.provider,
            )

        return CheckoutResult(
            checkout_url=checkout_url,
            provider_preference_id=str(payment_id),
            raw_response=data,
        )

    def verify_webhook_signature(self, authorization_header: str, body: bytes) -> None:
        """
        Verify the "Authorization" header of a dLocal Go notification.

        Unlike Mercado Pago, a dLocal delivery is never accepted unsigned:
        without platform keys there is nothing to verify against and the
        delivery is rejected.

        Raises:
            WebhookSignatureError: Keys missing, header missing or mismatch
        """
        if not self.is_enabled:
            raise WebhookSignatureError(
                "dLocal notifications cannot be verified on this platform."
            )

        _, sep, received = (authorization_header or "").partition("Signature:")
        received = received.strip()
        if not sep or not received:
            raise WebhookSignatureError("Missing webhook signature")

        expected = hmac.new(
            self.secret_key.encode("utf-8"),
            self.api_key.encode("utf-8") + (body or b""),
            hashlib.sha256,
        ).hexdigest()
        if not hmac.compare_digest(expected, received):
            raise WebhookSignatureError("Invalid webhook signature")
