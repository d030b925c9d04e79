"""
URL configuration for the Django application.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/payments/              - Payment endpoints
        intent/                    - Start a checkout (POST)
        manual/                    - Record a staff-collected payment (POST)
        delinquents/               - Delinquent members (GET)
        webhook/                   - Provider payment notifications (POST)
        provider/connect/          - Mercado Pago consent URL (GET)
        provider/callback/         - Mercado Pago OAuth callback (GET)
        provider/status/           - Mercado Pago connection status (GET)

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# All routes here are prefixed with /api/v1/
api_v1_patterns = [
    path("payments/", include("payments.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

admin.site.site_header = "Member Dues Admin"
admin.site.site_title = "Member Dues"
admin.site.index_title = "Tenants, members and payments"
