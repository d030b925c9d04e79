"""
Per-tenant dues configuration.

Models:
    PaymentConfig: Tenant-wide monthly amount and due day
    CategoryPricing: Amount override for members of one category
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from core.models import BaseModel


class PaymentConfig(BaseModel):
    """
    Dues configuration for a tenant.

    An amount of zero or less means dues are not configured, which
    blocks intent creation and excludes members from delinquency.
    """

    tenant = models.OneToOneField(
        "tenants.Tenant",
        on_delete=models.CASCADE,
        related_name="payment_config",
    )

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        help_text="Monthly dues amount",
    )

    currency = models.CharField(max_length=3, default="ARS")

    due_day_of_month = models.PositiveSmallIntegerField(
        default=10,
        validators=[MinValueValidator(1), MaxValueValidator(31)],
        help_text="Day dues fall due; clamped to the month's last day",
    )

    class Meta:
        verbose_name = "Payment Config"
        verbose_name_plural = "Payment Configs"

    def __str__(self) -> str:
        return f"PaymentConfig({self.tenant_id}, {self.amount} {self.currency})"

    @property
    def is_configured(self) -> bool:
        return self.amount > 0


class CategoryPricing(BaseModel):
    """Dues amount for members of a specific category."""

    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.CASCADE,
        related_name="category_pricing",
    )

    category = models.ForeignKey(
        "tenants.Category",
        on_delete=models.CASCADE,
        related_name="pricing",
    )

    amount = models.DecimalField(max_digits=12, decimal_places=2)

    currency = models.CharField(max_length=3, default="ARS")

    class Meta:
        verbose_name = "Category Pricing"
        verbose_name_plural = "Category Pricing"
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "category"],
                name="unique_category_pricing",
            ),
        ]

    def __str__(self) -> str:
        return f"CategoryPricing({self.category_id}, {self.amount} {self.currency})"
