"""
Payment domain models.

This module contains all payment-related models:
- Payment: Ledger entry for a member's obligation in one period
- PaymentIntent: A checkout started with a provider
- PaymentConfig: Tenant-wide dues amount and due day
- CategoryPricing: Dues override for a member category
- ProviderConnection: A tenant's provider OAuth credentials
"""

from payments.models.config import CategoryPricing, PaymentConfig
from payments.models.payment import Payment, PaymentIntent
from payments.models.provider_connection import ProviderConnection

__all__ = [
    "CategoryPricing",
    "Payment",
    "PaymentConfig",
    "PaymentIntent",
    "ProviderConnection",
]
