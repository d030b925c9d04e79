"""
Mercado Pago adapter.

Checkouts are Checkout Pro preferences created with the tenant's own
access token (obtained through OAuth), so money lands in the tenant's
account. The platform's client id/secret are only used for OAuth.

Configuration (via settings):
- MERCADOPAGO_CLIENT_ID / MERCADOPAGO_CLIENT_SECRET: OAuth application
- MERCADOPAGO_WEBHOOK_SECRET: Webhook signing secret (optional)
- MERCADOPAGO_USE_TEST_TOKENS: Request sandbox tokens on code exchange
- MERCADOPAGO_API_TIMEOUT_SECONDS: HTTP timeout (default: 10)

Usage:
    from payments.adapters import MercadoPagoAdapter

    adapter = MercadoPagoAdapter()
    url = adapter.get_authorize_url(redirect_uri, state)
    tokens = adapter.exchange_code(code, redirect_uri)
    result = adapter.create_checkout(params, access_token=tokens.access_token)
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from urllib.parse import urlencode

from django.conf import settings

from payments.adapters.base import (
    CheckoutResult,
    CreateCheckoutParams,
    TokenExchangeResult,
    post_json,
)
from payments.exceptions import (
    IntegrationDisabledError,
    ProviderError,
    ProviderNotConnectedError,
    WebhookSignatureError,
)
from payments.state_machines import PaymentProvider

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://auth.mercadopago.com/authorization"
TOKEN_URL = "https://api.mercadopago.com/oauth/token"
PREFERENCES_URL = "https://api.mercadopago.com/checkout/preferences"


class MercadoPagoAdapter:
    """
    Adapter for the Mercado Pago OAuth and Checkout Pro APIs.

    Stateless apart from settings; safe to share between threads.
    """

    provider = PaymentProvider.MERCADOPAGO
    requires_connection = True

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        use_test_tokens: bool | None = None,
        timeout: float | None = None,
    ):
        self.client_id = client_id if client_id is not None else settings.MERCADOPAGO_CLIENT_ID
        self.client_secret = (
            client_secret if client_secret is not None else settings.MERCADOPAGO_CLIENT_SECRET
        )
        self.use_test_tokens = (
            use_test_tokens
            if use_test_tokens is not None
            else settings.MERCADOPAGO_USE_TEST_TOKENS
        )
        self.timeout = timeout or getattr(settings, "MERCADOPAGO_API_TIMEOUT_SECONDS", 10)

    @property
    def is_enabled(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def require_enabled(self) -> None:
        if not self.is_enabled:
            raise IntegrationDisabledError(
                "Mercado Pago integration is not enabled on this platform.",
                details={"provider": self.provider},
            )

    # =========================================================================
    # OAuth
    # =========================================================================

    def get_authorize_url(self, redirect_uri: str, state: str) -> str:
        """Build the URL that sends the tenant admin to Mercado Pago's consent page."""
        self.require_enabled()
        query = urlencode(
            {
                "client_id": self.client_id,
                "response_type": "code",
                "platform_id": "mp",
                "state": state,
                "redirect_uri": redirect_uri,
            }
        )
        return f"{AUTHORIZE_URL}?{query}"

    def exchange_code(self, code: str, redirect_uri: str) -> TokenExchangeResult:
        """
        Exchange an authorization code for tokens.

        Raises:
            IntegrationDisabledError: Platform credentials missing
            ProviderError: Network failure or error response
        """
        self.require_enabled()

        body = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": redirect_uri,
        }
        if self.use_test_tokens:
            body["test_token"] = True

        data = post_json(
            self.provider,
            TOKEN_URL,
            body,
            timeout=self.timeout,
            log_context={"operation": "exchange_code"},
        )

        access_token = data.get("access_token")
        if not access_token:
            logger.error(
                "Mercado Pago token response missing access_token",
                extra={"operation": "exchange_code", "keys": sorted(data.keys())},
            )
            raise ProviderError(
                "Unexpected response from the payment provider.",
                provider=self.provider,
            )

        return TokenExchangeResult(
            access_token=access_token,
            refresh_token=data.get("refresh_token") or "",
            expires_in=data.get("expires_in"),
        )

    # =========================================================================
    # Checkout
    # =========================================================================

    def create_checkout(
        self,
        params: CreateCheckoutParams,
        access_token: str | None = None,
    ) -> CheckoutResult:
        """
        Create a Checkout Pro preference with the tenant's access token.

        Raises:
            ProviderNotConnectedError: No tenant access token
            ProviderError: Network failure or error response
        """
        if not access_token:
            raise ProviderNotConnectedError(
                "Connect your Mercado Pago account before accepting online payments.",
                details={"provider": self.provider},
            )

        body = {
            "items": [
                {
                    "title": params.title,
                    "quantity": 1,
                    "unit_price": float(params.amount),
                    "currency_id": params.currency,
                }
            ],
            "external_reference": params.external_reference,
            "metadata": {
                "member_id": params.member_id,
                "tenant_id": params.tenant_id,
                "period": params.period,
            },
        }
        if params.payer_email:
            body["payer"] = {"email": params.payer_email}
        if params.notification_url:
            body["notification_url"] = params.notification_url
        if params.back_url:
            body["back_urls"] = {
                "success": params.back_url,
                "pending": params.back_url,
                "failure": params.back_url,
            }
            body["auto_return"] = "approved"

        data = post_json(
            self.provider,
            PREFERENCES_URL,
            body,
            timeout=self.timeout,
            headers={"Authorization": f"Bearer {access_token}"},
            log_context={
                "operation": "create_checkout",
                "tenant_id": params.tenant_id,
                "member_id": params.member_id,
                "period": params.period,
            },
        )

        checkout_url = (
            data.get("sandbox_init_point") if self.use_test_tokens else None
        ) or data.get("init_point")
        preference_id = data.get("id")
        if not checkout_url or not preference_id:
            logger.error(
                "Mercado Pago preference response incomplete",
                extra={"operation": "create_checkout", "tenant_id": params.tenant_id},
            )
            raise ProviderError(
                "Unexpected response from the payment provider.",
                provider=self.provider,
            )

        return CheckoutResult(
            checkout_url=checkout_url,
            provider_preference_id=str(preference_id),
            raw_response=data,
        )

    # =========================================================================
    # Webhook Verification
    # =========================================================================

    @staticmethod
    def verify_webhook_signature(
        secret: str,
        signature_header: str,
        request_id: str,
        data_id: str,
    ) -> None:
        """
        Verify a Mercado Pago "x-signature" header.

        The header looks like "ts=1704908010,v1=<hex>"; v1 is the
        HMAC-SHA256 of "id:<data_id>;request-id:<request_id>;ts:<ts>;".

        Raises:
            WebhookSignatureError: Missing or mismatched signature
        """
        parts = {}
        for chunk in (signature_header or "").split(","):
            key, sep, value = chunk.strip().partition("=")
            if sep:
                parts[key] = value

        ts = parts.get("ts")
        received = parts.get("v1")
        if not ts or not received:
            raise WebhookSignatureError("Missing webhook signature")

        manifest = f"id:{str(data_id).lower()};request-id:{request_id};ts:{ts};"
        expected = hmac.new(
            secret.encode("utf-8"), manifest.encode("utf-8"), hashlib.sha256
        ).hexdigest()
        if not hmac.compare_digest(expected, received):
            raise WebhookSignatureError("Invalid webhook signature")
