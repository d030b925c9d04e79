"""
Tests for PaymentLedger.

Tests cover:
- Insert with database-enforced uniqueness
- create_if_absent returning the winning row
- Filtering and paging
- Manual payments and approval side effects
"""

from datetime import date, datetime
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.utils import timezone

from core.exceptions import InternalError
from notifications.models import EmailEvent
from payments.exceptions import MemberNotInTenantError, PaymentAlreadyApprovedError
from payments.models import Payment
from payments.services.ledger import PaymentFilters, PaymentLedger, PaymentRecord
from payments.state_machines import PaymentProvider, PaymentStatus
from payments.tests.factories import PaymentFactory
from tenants.models import MemberStatus
from tenants.tests.factories import MemberFactory


def make_record(member, **overrides):
    values = {
        "member_id": member.id,
        "tenant_id": member.tenant_id,
        "period": "2024-05",
        "amount": Decimal("15000.00"),
        "currency": "ARS",
        "provider": PaymentProvider.MERCADOPAGO,
        "provider_payment_id": "mp-123",
    }
    values.update(overrides)
    return PaymentRecord(**values)


# =============================================================================
# Create
# =============================================================================


@pytest.mark.django_db
class TestCreatePayment:
    def test_creates_approved_payment(self, member):
        payment = PaymentLedger.create_payment(make_record(member))

        assert payment.status == PaymentStatus.APPROVED
        assert payment.paid_at is not None
        assert Payment.objects.count() == 1

    def test_duplicate_period_raises_already_approved(self, member):
        """A second approved payment for the period is a conflict."""
        PaymentLedger.create_payment(make_record(member))

        with pytest.raises(PaymentAlreadyApprovedError):
            PaymentLedger.create_payment(make_record(member, provider_payment_id="mp-456"))

        assert Payment.objects.count() == 1

    def test_duplicate_provider_id_raises_already_approved(self, member):
        PaymentLedger.create_payment(make_record(member))

        with pytest.raises(PaymentAlreadyApprovedError):
            PaymentLedger.create_payment(make_record(member, period="2024-06"))

    def test_database_error_raises_internal_error(self, member):
        with patch.object(Payment, "save", side_effect=DatabaseError("down")):
            with pytest.raises(InternalError):
                PaymentLedger.create_payment(make_record(member))


@pytest.mark.django_db
class TestCreateIfAbsent:
    def test_first_call_creates(self, member):
        payment, created = PaymentLedger.create_if_absent(make_record(member))

        assert created is True
        assert payment.provider_payment_id == "mp-123"

    def test_replay_returns_existing(self, member):
        """The same provider payment delivered twice yields one row."""
        first, _ = PaymentLedger.create_if_absent(make_record(member))
        second, created = PaymentLedger.create_if_absent(make_record(member))

        assert created is False
        assert second.pk == first.pk
        assert Payment.objects.count() == 1

    def test_other_payment_for_paid_period_returns_winner(self, member):
        """A different provider payment for a paid period returns the paid row."""
        first, _ = PaymentLedger.create_if_absent(make_record(member))

        winner, created = PaymentLedger.create_if_absent(
            make_record(member, provider_payment_id="mp-999")
        )

        assert created is False
        assert winner.pk == first.pk
        assert not Payment.objects.filter(provider_payment_id="mp-999").exists()


# =============================================================================
# Read
# =============================================================================


@pytest.mark.django_db
class TestQueries:
    def test_find_approved_payment_ignores_other_statuses(self, member):
        PaymentFactory(member=member, status=PaymentStatus.REJECTED, paid_at=None)

        assert PaymentLedger.find_approved_payment(member.id, "2024-05") is None

    def test_approved_periods(self, tenant):
        ana = MemberFactory(tenant=tenant)
        bob = MemberFactory(tenant=tenant)
        PaymentFactory(member=ana, period="registration")
        PaymentFactory(member=ana, period="2024-05")
        PaymentFactory(member=bob, period="2024-05", status=PaymentStatus.PENDING, paid_at=None)

        paid = PaymentLedger.approved_periods([ana.id, bob.id])

        assert paid == {ana.id: {"registration", "2024-05"}}

    def test_find_many_scopes_to_tenant(self, member, other_tenant):
        mine = PaymentFactory(member=member)
        PaymentFactory(member=MemberFactory(tenant=other_tenant))

        page = PaymentLedger.find_many(member.tenant_id)

        assert page.total == 1
        assert page.payments == [mine]

    def test_find_many_filters(self, member):
        PaymentFactory(member=member, period="2024-04", provider=PaymentProvider.DLOCAL)
        match = PaymentFactory(member=member, period="2024-05")

        page = PaymentLedger.find_many(
            member.tenant_id,
            PaymentFilters(
                member_id=member.id,
                status=PaymentStatus.APPROVED,
                period="2024-05",
                provider=PaymentProvider.MERCADOPAGO,
                date_from=date(2000, 1, 1),
            ),
        )

        assert page.payments == [match]

    def test_find_many_pages_newest_first(self, member):
        payments = [PaymentFactory(member=member, period=f"2024-0{i}") for i in range(1, 6)]
        for day, payment in enumerate(payments, start=1):
            Payment.objects.filter(pk=payment.pk).update(
                created_at=timezone.make_aware(datetime(2024, 6, day))
            )

        page = PaymentLedger.find_many(member.tenant_id, limit=2, offset=1)

        assert page.total == 5
        assert page.limit == 2
        assert page.offset == 1
        assert page.payments == [payments[3], payments[2]]

    def test_find_many_clamps_limit(self, member):
        page = PaymentLedger.find_many(member.tenant_id, limit=1000)
        assert page.limit == 100


# =============================================================================
# Manual payments
# =============================================================================


@pytest.mark.django_db
class TestRecordManualPayment:
    def test_records_collector_metadata(self, staff_user, member, mock_email_delay):
        payment = PaymentLedger.record_manual_payment(
            user=staff_user,
            tenant_id=member.tenant_id,
            member_id=member.id,
            period="2024-05",
            amount=Decimal("12000.00"),
            currency="ARS",
        )

        assert payment.provider == PaymentProvider.MANUAL
        assert payment.provider_payment_id is None
        assert payment.amount == Decimal("12000.00")
        assert payment.metadata["collected_by_id"] == str(staff_user.pk)
        assert payment.metadata["collected_by_email"] == staff_user.email
        assert payment.metadata["collected_by_display_name"] == "Coach Ana"

    def test_sends_receipt(self, staff_user, member, mock_email_delay):
        PaymentLedger.record_manual_payment(
            staff_user, member.tenant_id, member.id, "2024-05", Decimal("1.00"), "ARS"
        )

        mock_email_delay.assert_called_once()
        assert mock_email_delay.call_args.kwargs["to"] == member.email
        assert EmailEvent.objects.filter(
            idempotency_key=f"payment_receipt:{member.id}:2024-05"
        ).exists()

    def test_reactivates_suspended_member(self, staff_user, tenant, mock_email_delay):
        member = MemberFactory(tenant=tenant, status=MemberStatus.SUSPENDED)

        PaymentLedger.record_manual_payment(
            staff_user, tenant.id, member.id, "2024-05", Decimal("1.00"), "ARS"
        )

        member.refresh_from_db()
        assert member.status == MemberStatus.ACTIVE

    def test_rejects_already_paid_period(self, staff_user, member):
        PaymentFactory(member=member, period="2024-05")

        with pytest.raises(PaymentAlreadyApprovedError):
            PaymentLedger.record_manual_payment(
                staff_user, member.tenant_id, member.id, "2024-05", Decimal("1.00"), "ARS"
            )

    def test_registration_conflict_message(self, staff_user, member):
        PaymentFactory(member=member, period="registration")

        with pytest.raises(PaymentAlreadyApprovedError) as exc_info:
            PaymentLedger.record_manual_payment(
                staff_user, member.tenant_id, member.id, "registration", Decimal("1.00"), "ARS"
            )

        assert "registration" in exc_info.value.message

    def test_rejects_member_of_other_tenant(self, staff_user, other_tenant, tenant):
        outsider = MemberFactory(tenant=other_tenant)

        with pytest.raises(MemberNotInTenantError):
            PaymentLedger.record_manual_payment(
                staff_user, tenant.id, outsider.id, "2024-05", Decimal("1.00"), "ARS"
            )

    def test_receipt_failure_does_not_fail_payment(self, staff_user, member, mock_email_delay):
        """The payment stands even if the receipt cannot be enqueued."""
        mock_email_delay.side_effect = RuntimeError("broker down")

        payment = PaymentLedger.record_manual_payment(
            staff_user, member.tenant_id, member.id, "2024-05", Decimal("1.00"), "ARS"
        )

        assert Payment.objects.filter(pk=payment.pk).exists()
