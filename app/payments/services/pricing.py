"""
Server-side dues amounts.

The amount a member owes is always resolved here; amounts sent by
clients are never trusted.

Usage:
    from payments.services.pricing import get_expected_amount_for_period

    amount = get_expected_amount_for_period(member, "2024-05")
    if amount is None:
        ...  # not configured
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings

from payments.models import CategoryPricing, PaymentConfig


@dataclass(frozen=True)
class ExpectedAmount:
    amount: Decimal
    currency: str


def get_payment_config(tenant_id) -> PaymentConfig | None:
    return PaymentConfig.objects.filter(tenant_id=tenant_id).first()


def get_expected_amount_for_period(
    member,
    period: str,
    config: PaymentConfig | None = None,
    category_prices: dict | None = None,
) -> ExpectedAmount | None:
    """
    Amount a member owes for a period.

    Category pricing wins over the tenant-wide config. The same amount
    applies to every period, registration included. Returns None when
    the resolved amount is not positive. config and category_prices can
    be passed in to avoid a query per member.
    """
    if member.category_id:
        if category_prices is not None:
            override = category_prices.get(member.category_id)
        else:
            override = CategoryPricing.objects.filter(
                tenant_id=member.tenant_id, category_id=member.category_id
            ).first()
        if override is not None and override.amount > 0:
            return ExpectedAmount(amount=override.amount, currency=override.currency)

    if config is None:
        config = get_payment_config(member.tenant_id)
    if config is None or config.amount <= 0:
        return None
    return ExpectedAmount(
        amount=config.amount,
        currency=config.currency or settings.DEFAULT_PAYMENT_CURRENCY,
    )


def category_prices_for_tenant(tenant_id) -> dict:
    """Map category id to CategoryPricing for one tenant."""
    return {
        pricing.category_id: pricing
        for pricing in CategoryPricing.objects.filter(tenant_id=tenant_id)
    }
