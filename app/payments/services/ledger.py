"""
Payment ledger: the only writer of Payment rows.

Uniqueness is enforced by the database, not by read-then-write checks:
    - one approved Payment per (member, period)
    - one Payment per (provider, provider_payment_id)

create_if_absent performs the insert inside a savepoint; a unique
violation means a concurrent writer won, and the winner is returned
with created=False.

Usage:
    from payments.services.ledger import PaymentLedger, PaymentRecord

    payment, created = PaymentLedger.create_if_absent(
        PaymentRecord(
            member_id=member.id,
            tenant_id=tenant.id,
            period="2024-05",
            amount=Decimal("15000"),
            currency="ARS",
            provider="mercadopago",
            provider_payment_id="123456",
        )
    )
    if not created:
        ...  # already processed
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from django.db import DatabaseError, IntegrityError
from django.utils import timezone

from core.exceptions import InternalError
from core.services import BaseService
from payments.exceptions import MemberNotInTenantError, PaymentAlreadyApprovedError
from payments.models import Payment
from payments.periods import REGISTRATION_PERIOD
from payments.state_machines import PaymentProvider, PaymentStatus
from tenants.services import MemberDirectory, StaffAccess

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


# =============================================================================
# Data Types
# =============================================================================


@dataclass(frozen=True)
class PaymentRecord:
    """
    Values for a new Payment row.

    Webhook and manual payments default to approved and paid now.
    """

    member_id: uuid.UUID | str
    tenant_id: uuid.UUID | str
    period: str
    amount: Decimal
    currency: str
    provider: str
    provider_payment_id: str | None = None
    status: str = PaymentStatus.APPROVED
    paid_at: datetime | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PaymentFilters:
    """Optional filters for PaymentLedger.find_many."""

    member_id: uuid.UUID | str | None = None
    status: str | None = None
    period: str | None = None
    provider: str | None = None
    date_from: date | None = None
    date_to: date | None = None


@dataclass
class PaymentPage:
    payments: list[Payment]
    total: int
    limit: int
    offset: int


# =============================================================================
# Ledger
# =============================================================================


class PaymentLedger(BaseService):
    """
    Repository for Payment rows.

    All methods raise InternalError when the database fails for reasons
    other than a unique violation.
    """

    @staticmethod
    def _build(record: PaymentRecord) -> Payment:
        paid_at = record.paid_at
        if paid_at is None and record.status == PaymentStatus.APPROVED:
            paid_at = timezone.now()
        return Payment(
            member_id=record.member_id,
            tenant_id=record.tenant_id,
            period=record.period,
            amount=record.amount,
            currency=record.currency,
            provider=record.provider,
            provider_payment_id=record.provider_payment_id or None,
            status=record.status,
            paid_at=paid_at,
            metadata=dict(record.metadata),
        )

    @classmethod
    def create_payment(cls, record: PaymentRecord) -> Payment:
        """
        Insert a Payment.

        Raises:
            PaymentAlreadyApprovedError: The period is already paid, or the
                provider payment id was already recorded
            InternalError: Any other persistence failure
        """
        payment = cls._build(record)
        try:
            with cls.atomic():
                payment.save(force_insert=True)
        except IntegrityError as e:
            cls.get_logger().info(
                "Payment insert hit a unique constraint",
                extra={"member_id": str(record.member_id), "period": record.period},
            )
            raise PaymentAlreadyApprovedError(
                "An approved payment already exists for this member and period.",
                details={"period": record.period},
            ) from e
        except DatabaseError as e:
            cls.get_logger().error(
                "Failed to persist payment",
                extra={"member_id": str(record.member_id), "period": record.period},
                exc_info=True,
            )
            raise InternalError("Failed to persist payment") from e

        cls.get_logger().info(
            "Payment recorded",
            extra={
                "payment_id": str(payment.id),
                "member_id": str(record.member_id),
                "period": record.period,
                "provider": record.provider,
            },
        )
        return payment

    @classmethod
    def create_if_absent(cls, record: PaymentRecord) -> tuple[Payment, bool]:
        """
        Insert a Payment unless an equivalent one exists.

        Equivalent means the same (provider, provider_payment_id), or an
        approved payment for the same (member, period). Both are decided
        by the database, so concurrent callers cannot both insert.

        Returns:
            (payment, created); on created=False the payment is the row
            that won
        """
        try:
            return cls.create_payment(record), True
        except PaymentAlreadyApprovedError:
            pass

        existing = None
        if record.provider_payment_id:
            existing = cls.find_payment_by_provider_id(
                record.provider, record.provider_payment_id
            )
        if existing is None:
            existing = cls.find_approved_payment(record.member_id, record.period)
        if existing is None:
            # Unique violation but no conflicting row visible
            raise InternalError("Payment conflict could not be resolved")
        return existing, False

    @classmethod
    def find_approved_payment(cls, member_id, period: str) -> Payment | None:
        try:
            return Payment.objects.filter(
                member_id=member_id,
                period=period,
                status=PaymentStatus.APPROVED,
            ).first()
        except DatabaseError as e:
            cls.get_logger().error("Failed to read payments", exc_info=True)
            raise InternalError("Failed to read payments") from e

    @classmethod
    def find_payment_by_provider_id(
        cls, provider: str, provider_payment_id: str
    ) -> Payment | None:
        try:
            return Payment.objects.filter(
                provider=provider,
                provider_payment_id=provider_payment_id,
            ).first()
        except DatabaseError as e:
            cls.get_logger().error("Failed to read payments", exc_info=True)
            raise InternalError("Failed to read payments") from e

    @classmethod
    def approved_periods(cls, member_ids) -> dict[Any, set[str]]:
        """Map member id to the set of periods with an approved payment."""
        paid: dict[Any, set[str]] = {}
        rows = Payment.objects.filter(
            member_id__in=member_ids, status=PaymentStatus.APPROVED
        ).values_list("member_id", "period")
        for member_id, period in rows:
            paid.setdefault(member_id, set()).add(period)
        return paid

    @classmethod
    def find_many(
        cls,
        tenant_id,
        filters: PaymentFilters | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> PaymentPage:
        """List a tenant's payments, newest first."""
        filters = filters or PaymentFilters()
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        offset = max(0, offset)

        queryset = Payment.objects.filter(tenant_id=tenant_id)
        if filters.member_id:
            queryset = queryset.filter(member_id=filters.member_id)
        if filters.status:
            queryset = queryset.filter(status=filters.status)
        if filters.period:
            queryset = queryset.filter(period=filters.period)
        if filters.provider:
            queryset = queryset.filter(provider=filters.provider)
        if filters.date_from:
            queryset = queryset.filter(created_at__date__gte=filters.date_from)
        if filters.date_to:
            queryset = queryset.filter(created_at__date__lte=filters.date_to)

        try:
            total = queryset.count()
            payments = list(
                queryset.select_related("member").order_by("-created_at")[
                    offset : offset + limit
                ]
            )
        except DatabaseError as e:
            cls.get_logger().error(
                "Failed to list payments",
                extra={"tenant_id": str(tenant_id)},
                exc_info=True,
            )
            raise InternalError("Failed to list payments") from e

        return PaymentPage(payments=payments, total=total, limit=limit, offset=offset)

    # =========================================================================
    # Approval side effects
    # =========================================================================

    @classmethod
    def after_approval(cls, payment: Payment, member) -> None:
        """
        Reactivate the member and send a receipt.

        The receipt is best-effort: failures are logged and never raised,
        since the payment is already recorded.
        """
        from notifications.models import EmailEventType
        from notifications.services import EmailEventService

        if member.reactivate():
            cls.get_logger().info(
                "Member reactivated after payment",
                extra={"member_id": str(member.id), "payment_id": str(payment.id)},
            )

        try:
            EmailEventService.send_email_event(
                EmailEventType.PAYMENT_RECEIPT,
                member=member,
                period=payment.period,
                context={
                    "amount": payment.amount,
                    "currency": payment.currency,
                    "paid_at": timezone.localtime(payment.paid_at).strftime("%Y-%m-%d")
                    if payment.paid_at
                    else "",
                },
            )
        except Exception:
            cls.get_logger().error(
                "Failed to send payment receipt",
                extra={"payment_id": str(payment.id), "member_id": str(member.id)},
                exc_info=True,
            )

    # =========================================================================
    # Manual payments
    # =========================================================================

    @classmethod
    def record_manual_payment(
        cls,
        user,
        tenant_id,
        member_id,
        period: str,
        amount: Decimal,
        currency: str,
    ) -> Payment:
        """
        Record a payment collected in person by tenant staff.

        Raises:
            MemberNotInTenantError: Member missing or in another tenant
            PaymentAlreadyApprovedError: Period already paid
        """
        member = MemberDirectory.get_member_in_tenant(tenant_id, member_id)
        if member is None:
            raise MemberNotInTenantError(
                "The member does not belong to this tenant.",
                details={"member_id": str(member_id)},
            )

        if cls.find_approved_payment(member.id, period):
            message = (
                "An approved registration payment already exists for this member."
                if period == REGISTRATION_PERIOD
                else "An approved payment already exists for this member and period."
            )
            raise PaymentAlreadyApprovedError(message, details={"period": period})

        payment = cls.create_payment(
            PaymentRecord(
                member_id=member.id,
                tenant_id=member.tenant_id,
                period=period,
                amount=amount,
                currency=currency,
                provider=PaymentProvider.MANUAL,
                metadata={
                    "collected_by_id": str(user.pk),
                    "collected_by_email": getattr(user, "email", "") or "",
                    "collected_by_display_name": StaffAccess.display_name_for(
                        user, member.tenant_id
                    ),
                },
            )
        )
        cls.after_approval(payment, member)
        return payment
