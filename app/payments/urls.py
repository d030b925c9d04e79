"""
URL configuration for the payments app.

All routes are prefixed with /api/v1/payments/ when included in the main URLconf.

Usage:
    # In config/urls.py
    api_v1_patterns = [
        path("payments/", include("payments.urls")),
    ]
"""

from django.urls import path

from payments import views
from payments.webhooks.views import payment_webhook

app_name = "payments"

urlpatterns = [
    path("", views.PaymentListView.as_view(), name="payment-list"),
    path("intent/", views.CreateIntentView.as_view(), name="intent"),
    path("manual/", views.ManualPaymentView.as_view(), name="manual"),
    path("delinquents/", views.DelinquentListView.as_view(), name="delinquents"),
    # Provider connection
    path("provider/connect/", views.ProviderConnectView.as_view(), name="provider-connect"),
    path("provider/callback/", views.ProviderCallbackView.as_view(), name="provider-callback"),
    path("provider/status/", views.ProviderStatusView.as_view(), name="provider-status"),
    # Webhook endpoints
    path("webhook/", payment_webhook, name="webhook"),
]
