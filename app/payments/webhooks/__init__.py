"""
Webhook handling for provider payment notifications.

Usage:
    # In urls.py
    from payments.webhooks import payment_webhook

    urlpatterns = [
        path("webhook/", payment_webhook, name="webhook"),
    ]
"""

from payments.webhooks.handlers import handle_payment_notification
from payments.webhooks.views import payment_webhook

__all__ = [
    "handle_payment_notification",
    "payment_webhook",
]
