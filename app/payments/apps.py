"""
Payments app configuration.

This app provides member dues infrastructure:
- Payment ledger with database-enforced uniqueness
- Delinquency computation and notices
- Mercado Pago and dLocal checkouts
- Webhook ingestion
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
