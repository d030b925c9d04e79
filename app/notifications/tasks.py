"""
Celery tasks for email delivery.

Tasks:
    send_email_task: Deliver a rendered email through the email backend

Usage:
    from notifications.tasks import send_email_task

    # Called by EmailEventService.send_email_event()
    send_email_task.delay(
        to="parent@example.com",
        subject="Payment receipt",
        body_text="...",
        body_html="...",
    )
"""

from __future__ import annotations

import logging

from celery import shared_task

from notifications.email import EmailService

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_kwargs={"max_retries": 3},
)
def send_email_task(
    self,
    to: str,
    subject: str,
    body_text: str,
    body_html: str | None = None,
) -> bool:
    """
    Send one rendered email.

    Transient backend errors are retried with backoff. The dedup record
    is written by the caller, so a retry never duplicates an EmailEvent.

    Returns:
        True if the backend accepted the message
    """
    logger.info(
        "Delivering email",
        extra={"subject": subject, "attempt": self.request.retries + 1},
    )
    return EmailService.send_raw(
        to=to,
        subject=subject,
        body_text=body_text,
        body_html=body_html,
    )
