"""
Notifications app for member emails.

This app provides:
- EmailEvent model, an append-only dedup ledger for sent emails
- EmailEventService for idempotent email dispatch
- Celery task for async delivery through the email backend

Usage:
    from notifications.services import EmailEventService

    EmailEventService.send_email_event(
        "payment_receipt", member=member, period="2024-05", context={...}
    )
"""
