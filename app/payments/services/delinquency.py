"""
Delinquency computation.

For every billable member the engine walks the member's obligations in
order, "registration" first and then each month from the join month to
the current month, and reports the earliest one without an approved
payment once its due date has passed.

Usage:
    from core.clock import SystemClock
    from payments.services.delinquency import DelinquencyEngine

    delinquents = DelinquencyEngine(clock=SystemClock()).compute_delinquents(tenant_id)
    for info in delinquents:
        print(info.member_name, info.period, info.days_overdue)
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from django.db import DatabaseError, OperationalError
from django.utils import timezone

from core.clock import Clock, SystemClock
from core.exceptions import InternalError, TransientInfraError
from core.services import BaseService
from payments.periods import REGISTRATION_PERIOD, due_date_for_month, iter_months
from payments.services.ledger import PaymentLedger
from payments.services.pricing import (
    category_prices_for_tenant,
    get_expected_amount_for_period,
    get_payment_config,
)
from tenants.models import Member

logger = logging.getLogger(__name__)

DEFAULT_DUE_DAY = 10


@dataclass(frozen=True)
class DelinquentInfo:
    """
    A member's earliest overdue obligation.

    Attributes:
        member_id: Member that owes the payment
        member_name: Display name
        period: "YYYY-MM" or "registration"
        amount / currency: Server-computed amount owed
        due_date: When the obligation fell due
        days_overdue: Whole days between due_date and today (never negative)
    """

    member_id: uuid.UUID
    member_name: str
    period: str
    amount: Decimal
    currency: str
    due_date: date
    days_overdue: int


class DelinquencyEngine(BaseService):
    """
    Derives delinquents from members and approved payments.

    The clock is injected so "today" is controlled by the caller.
    """

    def __init__(self, clock: Clock | None = None):
        self.clock = clock or SystemClock()

    def compute_delinquents(self, tenant_id) -> list[DelinquentInfo]:
        """
        List the earliest overdue obligation of every billable member.

        Members that are fully paid, whose earliest unpaid obligation is
        not yet due, or whose amount is not configured are omitted.

        Raises:
            TransientInfraError: Database temporarily unavailable
            InternalError: Any other persistence failure
        """
        log = self.get_logger()
        today = self.clock.today()

        try:
            config = get_payment_config(tenant_id)
            category_prices = category_prices_for_tenant(tenant_id)
            members = list(
                Member.objects.for_tenant(tenant_id).billable().select_related("tenant")
            )
            paid = PaymentLedger.approved_periods([member.id for member in members])
        except OperationalError as e:
            log.warning(
                "Database unavailable while computing delinquents",
                extra={"tenant_id": str(tenant_id)},
                exc_info=True,
            )
            raise TransientInfraError(
                "Payment data is temporarily unavailable. Please retry shortly."
            ) from e
        except DatabaseError as e:
            log.error(
                "Failed to load data for delinquency computation",
                extra={"tenant_id": str(tenant_id)},
                exc_info=True,
            )
            raise InternalError("Failed to compute delinquents") from e

        due_day = config.due_day_of_month if config else DEFAULT_DUE_DAY

        delinquents = []
        for member in members:
            period, due_date = self.first_unpaid_obligation(
                member, paid.get(member.id, set()), due_day, today
            )
            if period is None or due_date > today:
                continue

            expected = get_expected_amount_for_period(
                member, period, config=config, category_prices=category_prices
            )
            if expected is None:
                continue

            delinquents.append(
                DelinquentInfo(
                    member_id=member.id,
                    member_name=member.display_name,
                    period=period,
                    amount=expected.amount,
                    currency=expected.currency,
                    due_date=due_date,
                    days_overdue=max(0, (today - due_date).days),
                )
            )

        log.info(
            "Computed delinquents",
            extra={
                "tenant_id": str(tenant_id),
                "members_scanned": len(members),
                "delinquent_count": len(delinquents),
            },
        )
        return delinquents

    @staticmethod
    def first_unpaid_obligation(
        member: Member,
        paid_periods: set[str],
        due_day: int,
        today: date,
    ) -> tuple[str | None, date | None]:
        """
        Return (period, due_date) of the earliest unpaid obligation.

        Returns (None, None) when everything up to the current month is paid.
        """
        joined = timezone.localtime(member.joined_at).date()

        if REGISTRATION_PERIOD not in paid_periods:
            return REGISTRATION_PERIOD, joined

        for period in iter_months(joined, today):
            if period not in paid_periods:
                return period, due_date_for_month(period, due_day)
        return None, None
