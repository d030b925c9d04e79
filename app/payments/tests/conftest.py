"""
Pytest fixtures for payment tests.

Fixtures provide a tenant with dues configured, a member and a staff
user, plus API clients authenticated with a JWT.

Usage:
    def test_manual_payment(staff_client, member, tenant):
        response = staff_client.post("/api/v1/payments/manual/", {...})
"""

from unittest.mock import patch

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from payments.tests.factories import PaymentConfigFactory, ProviderConnectionFactory
from tenants.tests.factories import (
    MemberFactory,
    StaffMembershipFactory,
    TenantFactory,
    UserFactory,
)


# =============================================================================
# Tenant Fixtures
# =============================================================================


@pytest.fixture
def tenant(db):
    return TenantFactory()


@pytest.fixture
def other_tenant(db):
    return TenantFactory()


@pytest.fixture
def payment_config(tenant):
    """Tenant-wide dues of 15000.00 ARS due on the 10th."""
    return PaymentConfigFactory(tenant=tenant)


@pytest.fixture
def member(tenant):
    return MemberFactory(tenant=tenant, email="ana@example.com")


@pytest.fixture
def connection(tenant):
    """Mercado Pago connection for `tenant`."""
    return ProviderConnectionFactory(tenant=tenant, access_token="APP_USR-tenant-token")


# =============================================================================
# User and Client Fixtures
# =============================================================================


@pytest.fixture
def staff_user(tenant):
    """A user with staff access to `tenant`."""
    user = UserFactory()
    StaffMembershipFactory(user=user, tenant=tenant, display_name="Coach Ana")
    return user


@pytest.fixture
def api_client():
    """Unauthenticated API client for public endpoints."""
    return APIClient()


@pytest.fixture
def authenticated_client_factory(db):
    """Factory to create JWT-authenticated clients for any user."""

    def _make_client(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
        return client

    return _make_client


@pytest.fixture
def staff_client(authenticated_client_factory, staff_user):
    return authenticated_client_factory(staff_user)


# =============================================================================
# Mock Fixtures for External Services
# =============================================================================


@pytest.fixture
def mock_email_delay():
    """Patch email delivery so no Celery broker is needed."""
    with patch("notifications.services.send_email_task.delay") as mock_delay:
        yield mock_delay
