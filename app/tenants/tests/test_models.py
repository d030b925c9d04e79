"""
Tests for tenant models.
"""

import pytest

from tenants.models import Member, MemberStatus
from tenants.tests.factories import MemberFactory


@pytest.mark.django_db
class TestMemberStatusChanges:
    def test_suspend_active_member(self, member):
        """Suspending an active member should persist and return True."""
        assert member.suspend() is True

        member.refresh_from_db()
        assert member.status == MemberStatus.SUSPENDED

    def test_suspend_is_noop_when_not_active(self, tenant):
        """Suspending an inactive member should change nothing."""
        member = MemberFactory(tenant=tenant, status=MemberStatus.INACTIVE)

        assert member.suspend() is False

        member.refresh_from_db()
        assert member.status == MemberStatus.INACTIVE

    def test_reactivate_suspended_member(self, tenant):
        """Reactivating a suspended member should set it active."""
        member = MemberFactory(tenant=tenant, status=MemberStatus.SUSPENDED)

        assert member.reactivate() is True

        member.refresh_from_db()
        assert member.status == MemberStatus.ACTIVE

    def test_reactivate_active_member_returns_false(self, member):
        """Reactivating an active member should report no change."""
        assert member.reactivate() is False


@pytest.mark.django_db
class TestMemberQuerySet:
    def test_billable_excludes_inactive(self, tenant):
        """Inactive members are not billable."""
        active = MemberFactory(tenant=tenant)
        suspended = MemberFactory(tenant=tenant, status=MemberStatus.SUSPENDED)
        MemberFactory(tenant=tenant, status=MemberStatus.INACTIVE)

        billable = set(Member.objects.for_tenant(tenant.id).billable())

        assert billable == {active, suspended}

    def test_for_tenant_scopes_members(self, tenant, other_tenant):
        """Members of other tenants are never returned."""
        mine = MemberFactory(tenant=tenant)
        MemberFactory(tenant=other_tenant)

        assert list(Member.objects.for_tenant(tenant.id)) == [mine]


class TestMemberDisplayName:
    def test_full_name(self):
        member = Member(first_name="Ana", last_name="Gomez")
        assert member.display_name == "Ana Gomez"

    def test_falls_back_when_nameless(self):
        member = Member(first_name="", last_name="")
        assert member.display_name == "Member"
