"""
Email delivery through Django's email backend.

Configuration:
    Email settings are read from Django settings:
    - EMAIL_BACKEND
    - EMAIL_HOST, EMAIL_PORT
    - DEFAULT_FROM_EMAIL

Usage:
    from notifications.email import EmailService

    EmailService.send_raw(
        to="parent@example.com",
        subject="Payment receipt",
        body_text="Plain text content",
        body_html="<p>HTML content</p>",
    )
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives

logger = logging.getLogger(__name__)


class EmailService:
    """Thin wrapper around EmailMultiAlternatives."""

    @staticmethod
    def send_raw(
        to: str | list[str],
        subject: str,
        body_text: str,
        body_html: str | None = None,
        from_email: str | None = None,
        reply_to: str | None = None,
    ) -> bool:
        """
        Send an already-rendered email.

        Backend errors propagate so the calling task can retry.

        Returns:
            True if the backend accepted the message
        """
        if isinstance(to, str):
            to = [to]

        email = EmailMultiAlternatives(
            subject=subject,
            body=body_text,
            from_email=from_email or settings.DEFAULT_FROM_EMAIL,
            to=to,
            reply_to=[reply_to] if reply_to else None,
        )
        if body_html:
            email.attach_alternative(body_html, "text/html")

        try:
            sent = email.send(fail_silently=False)
        except Exception:
            logger.error(
                "Failed to send email",
                extra={"recipient_count": len(to), "subject": subject},
                exc_info=True,
            )
            raise

        logger.info("Email sent", extra={"recipient_count": len(to), "subject": subject})
        return bool(sent)
