"""
Idempotent member email dispatch.

EmailEventService.send_email_event sends at most one email per
(type, member, period). The dedup record is claimed before the email
is enqueued, so of two concurrent callers only one enqueues. A failed
enqueue releases the claim so a later run can retry.

Usage:
    from notifications.models import EmailEventType
    from notifications.services import EmailEventService

    sent = EmailEventService.send_email_event(
        EmailEventType.PAYMENT_RECEIPT,
        member=member,
        period="2024-05",
        context={"amount": "15000.00", "currency": "ARS"},
    )
"""

from __future__ import annotations

import logging
from typing import Any

from django.template.loader import render_to_string

from core.services import BaseService
from notifications.models import EmailEvent, EmailEventType
from notifications.tasks import send_email_task

logger = logging.getLogger(__name__)


SUBJECTS = {
    EmailEventType.PAYMENT_RECEIPT: "Payment receipt - {period_label}",
    EmailEventType.DELINQUENCY_REMINDER: "Payment reminder - {period_label}",
    EmailEventType.SUSPENSION_NOTICE: "Membership suspended - {period_label}",
}


def period_label(period: str) -> str:
    if period == "registration":
        return "Registration fee"
    return period


class EmailEventService(BaseService):
    """Sends member emails at most once per (type, member, period)."""

    @staticmethod
    def render(event_type: str, context: dict[str, Any]) -> tuple[str, str, str]:
        """Return (subject, text body, html body) for an event type."""
        subject = SUBJECTS[EmailEventType(event_type)].format(**context)
        body_text = render_to_string(f"notifications/email/{event_type}.txt", context)
        body_html = render_to_string(f"notifications/email/{event_type}.html", context)
        return subject, body_text, body_html

    @classmethod
    def send_email_event(
        cls,
        event_type: str,
        member,
        period: str,
        context: dict[str, Any] | None = None,
    ) -> bool:
        """
        Send an email unless one was already sent for this key.

        Args:
            event_type: An EmailEventType value
            member: Member the email is about (recipient is member.email)
            period: Billing period the email refers to
            context: Extra template variables

        Returns:
            True if an email was enqueued, False if it was a duplicate or
            the member has no email address

        Raises:
            Whatever send_email_task.delay raises; the claim is released first
        """
        log = cls.get_logger()
        key = EmailEvent.build_key(event_type, member.id, period)
        log_context = {"event_type": event_type, "member_id": str(member.id), "period": period}

        if not member.email:
            log.info("Member has no email address, skipping", extra=log_context)
            return False

        template_context = {
            "member_name": member.display_name,
            "tenant_name": member.tenant.name,
            "period": period,
            "period_label": period_label(period),
            **(context or {}),
        }
        subject, body_text, body_html = cls.render(event_type, template_context)

        event, created = EmailEvent.objects.get_or_create(
            idempotency_key=key,
            defaults={
                "event_type": event_type,
                "member": member,
                "tenant_id": member.tenant_id,
                "period": period,
                "recipient": member.email,
            },
        )
        if not created:
            log.info("Email already sent, skipping", extra=log_context)
            return False

        try:
            send_email_task.delay(
                to=member.email,
                subject=subject,
                body_text=body_text,
                body_html=body_html,
            )
        except Exception:
            event.delete()
            raise

        log.info("Email enqueued", extra=log_context)
        return True
