"""
Outbound email dedup ledger.

Models:
    EmailEvent: One row per email sent for (type, member, period)

EmailEvent rows are append-only: they record that an email was handed
to the relay and are never updated.

Usage:
    from notifications.models import EmailEvent, EmailEventType

    EmailEvent.objects.filter(
        idempotency_key=EmailEvent.build_key(
            EmailEventType.PAYMENT_RECEIPT, member.id, "2024-05"
        )
    ).exists()
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone

from core.models import BaseModel


class EmailEventType(models.TextChoices):
    """Kinds of member emails; each value is also a template name."""

    PAYMENT_RECEIPT = "payment_receipt", "Payment receipt"
    DELINQUENCY_REMINDER = "delinquency_reminder", "Delinquency reminder"
    SUSPENSION_NOTICE = "suspension_notice", "Suspension notice"


class EmailEvent(BaseModel):
    """
    Record of an email handed to the relay.

    Fields:
        event_type: payment_receipt, delinquency_reminder or suspension_notice
        member / tenant: Who the email was about
        period: Billing period the email refers to
        recipient: Address the email was sent to
        idempotency_key: "<type>:<member_id>:<period>", unique
        sent_at: When the email was enqueued
    """

    event_type = models.CharField(
        max_length=40,
        choices=EmailEventType.choices,
    )

    member = models.ForeignKey(
        "tenants.Member",
        on_delete=models.CASCADE,
        related_name="email_events",
    )

    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.CASCADE,
        related_name="email_events",
    )

    period = models.CharField(max_length=20)

    recipient = models.EmailField(blank=True)

    idempotency_key = models.CharField(
        max_length=255,
        unique=True,
        help_text="<type>:<member_id>:<period>",
    )

    sent_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "notifications_email_event"
        ordering = ["-sent_at"]
        verbose_name = "email event"
        verbose_name_plural = "email events"

    def __str__(self) -> str:
        return f"EmailEvent({self.idempotency_key})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("EmailEvent rows are append-only")
        super().save(*args, **kwargs)

    @staticmethod
    def build_key(event_type: str, member_id, period: str) -> str:
        return f"{event_type}:{member_id}:{period}"
