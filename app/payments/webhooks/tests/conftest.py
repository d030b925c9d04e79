"""
Pytest fixtures for webhook tests.
"""

from unittest.mock import patch

import pytest
from django.test import RequestFactory

from tenants.tests.factories import MemberFactory, TenantFactory


@pytest.fixture
def rf():
    """Request factory for creating test requests."""
    return RequestFactory()


@pytest.fixture
def tenant(db):
    return TenantFactory()


@pytest.fixture
def member(tenant):
    return MemberFactory(tenant=tenant, email="ana@example.com")


@pytest.fixture
def mock_email_delay():
    """Patch email delivery so no Celery broker is needed."""
    with patch("notifications.services.send_email_task.delay") as mock_delay:
        yield mock_delay


@pytest.fixture
def notification(member):
    """Approved Mercado Pago notification for `member`, period 2024-05."""
    return {
        "provider": "mercadopago",
        "provider_payment_id": "123456789",
        "status": "approved",
        "member_id": str(member.id),
        "tenant_id": str(member.tenant_id),
        "period": "2024-05",
        "amount": "15000.00",
        "currency": "ARS",
    }

