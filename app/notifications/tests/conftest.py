"""
Fixtures for notification tests.

Usage:
    def test_example(member, mock_email_delay):
        EmailEventService.send_email_event("payment_receipt", member, "2024-05")
        mock_email_delay.assert_called_once()
"""

from unittest.mock import patch

import pytest

from tenants.tests.factories import MemberFactory, TenantFactory


@pytest.fixture
def tenant(db):
    return TenantFactory(name="Club Atletico")


@pytest.fixture
def member(tenant):
    return MemberFactory(
        tenant=tenant, first_name="Ana", last_name="Gomez", email="ana@example.com"
    )


@pytest.fixture
def mock_email_delay():
    """Capture enqueued emails instead of talking to the broker."""
    with patch("notifications.services.send_email_task.delay") as mock:
        yield mock
