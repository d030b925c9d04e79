"""
Per-tenant provider connections and the OAuth connect flow.

Usage:
    from payments.services import ConnectionService

    # Start the flow (staff endpoint)
    url = ConnectionService.build_connect_url(tenant_id)

    # Finish it (OAuth callback)
    tenant_id = ConnectionService.complete_oauth(code, state)

    # Use it
    connection = ConnectionService.require_connection(tenant_id, "mercadopago")
"""

from __future__ import annotations

import logging
from datetime import timedelta

from django.conf import settings
from django.urls import reverse

from core.clock import Clock, SystemClock
from core.exceptions import ValidationError
from core.services import BaseService
from payments.adapters import MercadoPagoAdapter, TokenExchangeResult
from payments.exceptions import ProviderNotConnectedError
from payments.models import ProviderConnection
from payments.oauth import OAuthStateSigner
from payments.state_machines import PaymentProvider
from tenants.models import Tenant

logger = logging.getLogger(__name__)


def oauth_redirect_uri() -> str:
    """Absolute callback URL registered with Mercado Pago."""
    return f"{settings.APP_BASE_URL.rstrip('/')}{reverse('payments:provider-callback')}"


class ConnectionService(BaseService):
    """Stores and reads provider credentials, scoped by tenant."""

    @staticmethod
    def get_connection(
        tenant_id, provider: str = PaymentProvider.MERCADOPAGO
    ) -> ProviderConnection | None:
        return ProviderConnection.objects.filter(tenant_id=tenant_id, provider=provider).first()

    @classmethod
    def require_connection(
        cls, tenant_id, provider: str = PaymentProvider.MERCADOPAGO
    ) -> ProviderConnection:
        """
        Return the tenant's connection.

        Raises:
            ProviderNotConnectedError: The tenant never connected an account
        """
        connection = cls.get_connection(tenant_id, provider)
        if connection is None:
            raise ProviderNotConnectedError(
                "Connect your Mercado Pago account in Payments > Settings "
                "before accepting online payments.",
                details={"provider": provider},
            )
        return connection

    @classmethod
    def store_connection(
        cls,
        tenant_id,
        provider: str,
        tokens: TokenExchangeResult,
        clock: Clock | None = None,
    ) -> ProviderConnection:
        """Save tokens for a tenant, replacing any previous connection."""
        now = (clock or SystemClock()).now()
        expires_at = now + timedelta(seconds=tokens.expires_in) if tokens.expires_in else None

        connection, created = ProviderConnection.objects.update_or_create(
            tenant_id=tenant_id,
            provider=provider,
            defaults={
                "access_token": tokens.access_token,
                "refresh_token": tokens.refresh_token,
                "expires_at": expires_at,
                "connected_at": now,
            },
        )
        cls.get_logger().info(
            "Provider connection stored",
            extra={"tenant_id": str(tenant_id), "provider": provider, "connection_created": created},
        )
        return connection

    @classmethod
    def connection_status(
        cls, tenant_id, provider: str = PaymentProvider.MERCADOPAGO
    ) -> dict:
        """Public view of a connection; never includes tokens."""
        connection = cls.get_connection(tenant_id, provider)
        return {
            "connected": connection is not None,
            "connected_at": connection.connected_at.isoformat() if connection else None,
        }

    # =========================================================================
    # OAuth flow
    # =========================================================================

    @staticmethod
    def build_connect_url(
        tenant_id,
        signer: OAuthStateSigner | None = None,
        adapter: MercadoPagoAdapter | None = None,
    ) -> str:
        """
        Mercado Pago consent URL for a tenant.

        Raises:
            IntegrationDisabledError: Platform credentials missing
        """
        adapter = adapter or MercadoPagoAdapter()
        adapter.require_enabled()
        signer = signer or OAuthStateSigner.from_settings()
        return adapter.get_authorize_url(oauth_redirect_uri(), signer.sign_state(str(tenant_id)))

    @classmethod
    def complete_oauth(
        cls,
        code: str,
        state: str,
        signer: OAuthStateSigner | None = None,
        adapter: MercadoPagoAdapter | None = None,
    ) -> str:
        """
        Verify the state, exchange the code and store the tokens.

        Nothing is stored unless every step succeeds.

        Returns:
            The tenant id bound to the state

        Raises:
            ValidationError: Missing parameters or unknown tenant
            InvalidOAuthStateError / ExpiredOAuthStateError: Bad state
            ProviderError: Token exchange failed
        """
        if not code or not state:
            raise ValidationError("Missing Mercado Pago parameters")

        adapter = adapter or MercadoPagoAdapter()
        signer = signer or OAuthStateSigner.from_settings()

        tenant_id = signer.verify_state(state)
        if not Tenant.objects.filter(id=tenant_id).exists():
            raise ValidationError("Unknown tenant")

        tokens = adapter.exchange_code(code, oauth_redirect_uri())
        cls.store_connection(tenant_id, adapter.provider, tokens)
        return tenant_id
