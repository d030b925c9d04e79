"""
ProviderConnection model for per-tenant provider credentials.

A tenant connects its own Mercado Pago account through OAuth. Checkouts
for that tenant are created with the stored access token, so payments
land in the tenant's account.

Usage:
    from payments.services import ConnectionService

    connection = ConnectionService.get_connection(tenant_id, "mercadopago")
    if connection is None:
        ...  # not connected

Note:
    Token fields are never serialized to clients. Only "connected" and
    connected_at are exposed.
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from payments.state_machines import PaymentProvider


class ProviderConnection(UUIDPrimaryKeyMixin, BaseModel):
    """
    OAuth credentials of a tenant's provider account.

    One row per (tenant, provider). Reconnecting overwrites the row.
    """

    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.CASCADE,
        related_name="provider_connections",
    )

    provider = models.CharField(
        max_length=20,
        choices=PaymentProvider.choices,
        default=PaymentProvider.MERCADOPAGO,
    )

    access_token = models.TextField(help_text="Provider access token")

    refresh_token = models.TextField(blank=True, help_text="Provider refresh token")

    expires_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the access token expires",
    )

    connected_at = models.DateTimeField(
        default=timezone.now,
        help_text="When the account was last connected",
    )

    class Meta:
        verbose_name = "Provider Connection"
        verbose_name_plural = "Provider Connections"
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "provider"],
                name="unique_provider_connection",
            ),
        ]

    def __str__(self) -> str:
        # Token material stays out of reprs and logs
        return f"ProviderConnection({self.tenant_id}, {self.provider})"

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and self.expires_at <= timezone.now()
