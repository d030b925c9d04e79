"""
Payment and PaymentIntent models.

Payment is the ledger entry for a member's obligation in one period.
PaymentIntent records that a checkout was started; it is never proof of
payment.

Usage:
    from payments.models import Payment
    from payments.state_machines import PaymentStatus

    Payment.objects.filter(
        member_id=member_id, period="2024-05", status=PaymentStatus.APPROVED
    ).exists()

    # Refund an approved payment
    payment.refund()
    payment.save()

Constraints:
    - unique_approved_payment_per_period: one approved row per (member, period)
    - unique_provider_payment_id: one row per (provider, provider_payment_id)
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone

from django_fsm import FSMField, transition

from core.model_mixins import MetadataMixin, UUIDPrimaryKeyMixin
from core.models import BaseModel
from payments.state_machines import IntentStatus, PaymentProvider, PaymentStatus


class Payment(UUIDPrimaryKeyMixin, MetadataMixin, BaseModel):
    """
    A payment recorded against a member for one period.

    Rows are written once. Webhook and manual payments are created
    directly as APPROVED; the FSM transitions cover the remaining
    lifecycle.

    State Flow:
        PENDING -> APPROVED -> REFUNDED
        PENDING -> REJECTED

    Fields:
        member: Member the payment is for
        tenant: Tenant that owns the member
        period: "YYYY-MM" or "registration"
        amount / currency: Amount collected
        provider: mercadopago, dlocal or manual
        provider_payment_id: Provider reference (null for manual payments)
        status: Current FSM state
        paid_at: When the payment was approved
        metadata: Operator details for manual payments
    """

    # ==========================================================================
    # Relationships
    # ==========================================================================

    member = models.ForeignKey(
        "tenants.Member",
        on_delete=models.PROTECT,
        related_name="payments",
        help_text="Member the payment is for",
    )

    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.PROTECT,
        related_name="payments",
        help_text="Tenant that owns the member",
    )

    # ==========================================================================
    # Obligation
    # ==========================================================================

    period = models.CharField(
        max_length=20,
        db_index=True,
        help_text="Billing period: YYYY-MM or 'registration'",
    )

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Amount collected",
    )

    currency = models.CharField(
        max_length=3,
        default="ARS",
        help_text="ISO 4217 currency code",
    )

    # ==========================================================================
    # Provider & State
    # ==========================================================================

    provider = models.CharField(
        max_length=20,
        choices=PaymentProvider.choices,
        help_text="Where the payment was collected",
    )

    provider_payment_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Provider payment reference (webhook dedup key)",
    )

    status = FSMField(
        default=PaymentStatus.PENDING,
        choices=PaymentStatus.choices,
        db_index=True,
        protected=False,  # Webhook and manual paths create rows already approved
        help_text="Current state of the payment (managed by FSM)",
    )

    paid_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the payment was approved",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Payment"
        verbose_name_plural = "Payments"
        indexes = [
            models.Index(fields=["tenant", "status"], name="payment_tenant_status_idx"),
            models.Index(fields=["member", "period"], name="payment_member_period_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["member", "period"],
                condition=models.Q(status="approved"),
                name="unique_approved_payment_per_period",
            ),
            models.UniqueConstraint(
                fields=["provider", "provider_payment_id"],
                condition=models.Q(provider_payment_id__isnull=False),
                name="unique_provider_payment_id",
            ),
        ]

    def __str__(self) -> str:
        return f"Payment({self.id}, {self.period}, {self.status}, {self.amount} {self.currency})"

    @property
    def is_approved(self) -> bool:
        return self.status == PaymentStatus.APPROVED

    # ==========================================================================
    # State Transitions
    # ==========================================================================

    @transition(
        field=status,
        source=PaymentStatus.PENDING,
        target=PaymentStatus.APPROVED,
    )
    def approve(self):
        """
        Mark the payment as approved.

        Transition: PENDING -> APPROVED
        """
        self.paid_at = timezone.now()

    @transition(
        field=status,
        source=PaymentStatus.PENDING,
        target=PaymentStatus.REJECTED,
    )
    def reject(self):
        """Transition: PENDING -> REJECTED"""
        pass

    @transition(
        field=status,
        source=PaymentStatus.APPROVED,
        target=PaymentStatus.REFUNDED,
    )
    def refund(self):
        """
        Mark an approved payment as refunded.

        Transition: APPROVED -> REFUNDED

        The refund itself happens at the provider; this only records it.
        Once refunded, the period counts as unpaid again.
        """
        pass


class PaymentIntent(UUIDPrimaryKeyMixin, BaseModel):
    """
    A checkout started with a provider.

    The amount is always the server-computed amount for the period.
    """

    member = models.ForeignKey(
        "tenants.Member",
        on_delete=models.PROTECT,
        related_name="payment_intents",
    )

    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.PROTECT,
        related_name="payment_intents",
    )

    period = models.CharField(max_length=20)

    amount = models.DecimalField(max_digits=12, decimal_places=2)

    currency = models.CharField(max_length=3, default="ARS")

    provider = models.CharField(
        max_length=20,
        choices=PaymentProvider.choices,
    )

    provider_preference_id = models.CharField(
        max_length=255,
        help_text="Checkout reference returned by the provider",
    )

    checkout_url = models.URLField(
        max_length=2000,
        help_text="URL the payer is sent to",
    )

    status = models.CharField(
        max_length=20,
        choices=IntentStatus.choices,
        default=IntentStatus.PENDING,
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Payment Intent"
        verbose_name_plural = "Payment Intents"
        indexes = [
            models.Index(fields=["member", "period"], name="intent_member_period_idx"),
        ]

    def __str__(self) -> str:
        return f"PaymentIntent({self.id}, {self.provider}, {self.period})"
