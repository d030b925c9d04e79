"""
Tests for server-side pricing and delinquency computation.
"""

from datetime import date, datetime
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import OperationalError, ProgrammingError
from django.utils import timezone

from core.clock import FixedClock
from core.exceptions import InternalError, TransientInfraError
from payments.services import DelinquencyEngine, get_expected_amount_for_period
from payments.tests.factories import (
    CategoryPricingFactory,
    PaymentConfigFactory,
    PaymentFactory,
)
from tenants.models import MemberStatus
from tenants.tests.factories import CategoryFactory, MemberFactory


def aware(*args):
    return timezone.make_aware(datetime(*args))


# =============================================================================
# Pricing
# =============================================================================


@pytest.mark.django_db
class TestExpectedAmount:
    def test_uses_tenant_config(self, member, payment_config):
        expected = get_expected_amount_for_period(member, "2024-05")

        assert expected.amount == Decimal("15000.00")
        assert expected.currency == "ARS"

    def test_registration_uses_same_amount(self, member, payment_config):
        expected = get_expected_amount_for_period(member, "registration")
        assert expected.amount == Decimal("15000.00")

    def test_category_pricing_wins(self, tenant, payment_config):
        """A member's category price overrides the tenant-wide amount."""
        category = CategoryFactory(tenant=tenant)
        CategoryPricingFactory(tenant=tenant, category=category, amount=Decimal("9000.00"))
        member = MemberFactory(tenant=tenant, category=category)

        assert get_expected_amount_for_period(member, "2024-05").amount == Decimal("9000.00")

    def test_none_without_config(self, member):
        assert get_expected_amount_for_period(member, "2024-05") is None

    def test_none_when_amount_is_zero(self, tenant, member):
        PaymentConfigFactory(tenant=tenant, amount=Decimal("0"))
        assert get_expected_amount_for_period(member, "2024-05") is None


# =============================================================================
# Delinquency
# =============================================================================


@pytest.mark.django_db
class TestComputeDelinquents:
    TODAY = aware(2024, 6, 15, 12, 0)

    @pytest.fixture
    def engine(self):
        return DelinquencyEngine(clock=FixedClock(self.TODAY))

    def test_earliest_unpaid_month(self, engine, tenant, payment_config):
        """
        Member joined 2024-01-05, paid registration and Jan-Apr.

        On 2024-06-15 the earliest unpaid obligation is 2024-05, due on
        2024-05-10, 36 days overdue.
        """
        member = MemberFactory(tenant=tenant, joined_at=aware(2024, 1, 5))
        for period in ["registration", "2024-01", "2024-02", "2024-03", "2024-04"]:
            PaymentFactory(member=member, period=period)

        delinquents = engine.compute_delinquents(tenant.id)

        assert len(delinquents) == 1
        info = delinquents[0]
        assert info.member_id == member.id
        assert info.period == "2024-05"
        assert info.due_date == date(2024, 5, 10)
        assert info.days_overdue == 36
        assert info.amount == Decimal("15000.00")
        assert info.currency == "ARS"

    def test_registration_reported_first(self, engine, tenant, payment_config):
        member = MemberFactory(tenant=tenant, joined_at=aware(2024, 6, 1))

        (info,) = engine.compute_delinquents(tenant.id)

        assert info.member_id == member.id
        assert info.period == "registration"
        assert info.due_date == date(2024, 6, 1)
        assert info.days_overdue == 14

    def test_fully_paid_member_omitted(self, engine, tenant, payment_config):
        member = MemberFactory(tenant=tenant, joined_at=aware(2024, 5, 20))
        for period in ["registration", "2024-05", "2024-06"]:
            PaymentFactory(member=member, period=period)

        assert engine.compute_delinquents(tenant.id) == []

    def test_not_yet_due_omitted(self, tenant):
        """The current month is not delinquent before its due day."""
        PaymentConfigFactory(tenant=tenant, due_day_of_month=20)
        member = MemberFactory(tenant=tenant, joined_at=aware(2024, 6, 1))
        PaymentFactory(member=member, period="registration")

        engine = DelinquencyEngine(clock=FixedClock(self.TODAY))

        assert engine.compute_delinquents(tenant.id) == []

    def test_due_today_is_zero_days_overdue(self, tenant):
        PaymentConfigFactory(tenant=tenant, due_day_of_month=15)
        member = MemberFactory(tenant=tenant, joined_at=aware(2024, 6, 1))
        PaymentFactory(member=member, period="registration")

        engine = DelinquencyEngine(clock=FixedClock(self.TODAY))
        (info,) = engine.compute_delinquents(tenant.id)

        assert info.period == "2024-06"
        assert info.days_overdue == 0

    def test_non_approved_payments_do_not_count(self, engine, tenant, payment_config):
        member = MemberFactory(tenant=tenant, joined_at=aware(2024, 6, 1))
        PaymentFactory(member=member, period="registration", status="rejected", paid_at=None)

        (info,) = engine.compute_delinquents(tenant.id)

        assert info.period == "registration"

    def test_inactive_members_ignored(self, engine, tenant, payment_config):
        MemberFactory(tenant=tenant, status=MemberStatus.INACTIVE, joined_at=aware(2024, 1, 1))

        assert engine.compute_delinquents(tenant.id) == []

    def test_suspended_members_included(self, engine, tenant, payment_config):
        MemberFactory(tenant=tenant, status=MemberStatus.SUSPENDED, joined_at=aware(2024, 1, 1))

        assert len(engine.compute_delinquents(tenant.id)) == 1

    def test_unconfigured_tenant_reports_nobody(self, engine, tenant):
        MemberFactory(tenant=tenant, joined_at=aware(2024, 1, 1))

        assert engine.compute_delinquents(tenant.id) == []

    def test_other_tenants_ignored(self, engine, tenant, other_tenant, payment_config):
        PaymentConfigFactory(tenant=other_tenant)
        MemberFactory(tenant=other_tenant, joined_at=aware(2024, 1, 1))

        assert engine.compute_delinquents(tenant.id) == []

    def test_operational_error_is_transient(self, engine, tenant):
        with patch(
            "payments.services.delinquency.get_payment_config",
            side_effect=OperationalError("connection refused"),
        ):
            with pytest.raises(TransientInfraError):
                engine.compute_delinquents(tenant.id)

    def test_other_database_error_is_internal(self, engine, tenant):
        with patch(
            "payments.services.delinquency.get_payment_config",
            side_effect=ProgrammingError("relation does not exist"),
        ):
            with pytest.raises(InternalError):
                engine.compute_delinquents(tenant.id)
