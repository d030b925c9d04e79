"""
Pytest fixtures for tenant tests.
"""

import pytest

from tenants.tests.factories import (
    MemberFactory,
    StaffMembershipFactory,
    TenantFactory,
    UserFactory,
)


@pytest.fixture
def tenant(db):
    return TenantFactory()


@pytest.fixture
def other_tenant(db):
    return TenantFactory()


@pytest.fixture
def member(db, tenant):
    return MemberFactory(tenant=tenant)


@pytest.fixture
def staff_user(db, tenant):
    """A user with staff access to `tenant`."""
    user = UserFactory()
    StaffMembershipFactory(user=user, tenant=tenant)
    return user
