"""
Celery tasks for member dues.

This module provides periodic tasks for:
- Sending delinquency reminders
- Suspending members that stay overdue

Usage:
    # Scheduled daily via celery-beat (see migration 0002)
    from payments.tasks import send_delinquency_notices
    send_delinquency_notices.delay()
"""

from __future__ import annotations

import logging

from celery import shared_task
from django.conf import settings

from core.clock import SystemClock
from core.exceptions import BaseApplicationError
from notifications.models import EmailEventType
from notifications.services import EmailEventService
from payments.services import DelinquencyEngine
from tenants.models import Member, Tenant

logger = logging.getLogger(__name__)


@shared_task
def send_delinquency_notices() -> dict:
    """
    Periodic task to remind and suspend overdue members.

    For every active tenant:
    1. Compute delinquents
    2. Send a reminder once days_overdue reaches DELINQUENCY_REMINDER_DAYS
    3. Suspend and notify once it reaches DELINQUENCY_SUSPENSION_DAYS

    Emails are deduped per (type, member, period), so running the task
    more than once a day sends nothing new. A failing tenant is logged
    and skipped. A failing email or suspension for one member is logged,
    counted, and the sweep moves on to the next step and member.

    Returns:
        Dict with counts of reminders, suspensions and notices sent
    """
    reminder_days = settings.DELINQUENCY_REMINDER_DAYS
    suspension_days = settings.DELINQUENCY_SUSPENSION_DAYS
    engine = DelinquencyEngine(clock=SystemClock())

    counts = {
        "tenants_processed": 0,
        "tenants_failed": 0,
        "reminders_sent": 0,
        "members_suspended": 0,
        "suspension_notices_sent": 0,
        "member_failures": 0,
    }

    for tenant_id in Tenant.objects.filter(is_active=True).values_list("id", flat=True):
        try:
            delinquents = engine.compute_delinquents(tenant_id)
        except BaseApplicationError:
            logger.error(
                "Failed to compute delinquents for tenant",
                extra={"tenant_id": str(tenant_id)},
                exc_info=True,
            )
            counts["tenants_failed"] += 1
            continue

        overdue = [info for info in delinquents if info.days_overdue >= reminder_days]
        members = Member.objects.select_related("tenant").in_bulk(
            [info.member_id for info in overdue]
        )

        for info in overdue:
            member = members.get(info.member_id)
            if member is None:
                continue

            context = {
                "amount": info.amount,
                "currency": info.currency,
                "due_date": info.due_date,
                "days_overdue": info.days_overdue,
            }

            if _send(EmailEventType.DELINQUENCY_REMINDER, member, info, context, counts):
                counts["reminders_sent"] += 1

            if info.days_overdue < suspension_days:
                continue

            try:
                suspended = member.suspend()
            except Exception:
                logger.error(
                    "Failed to suspend overdue member",
                    extra=_member_context(member, info),
                    exc_info=True,
                )
                counts["member_failures"] += 1
                continue

            if suspended:
                counts["members_suspended"] += 1
                logger.info(
                    "Suspended overdue member",
                    extra={
                        "member_id": str(member.id),
                        "tenant_id": str(tenant_id),
                        "period": info.period,
                        "days_overdue": info.days_overdue,
                    },
                )

            if _send(EmailEventType.SUSPENSION_NOTICE, member, info, context, counts):
                counts["suspension_notices_sent"] += 1

        counts["tenants_processed"] += 1

    logger.info("Delinquency sweep finished", extra=counts)
    return counts


def _member_context(member, info) -> dict:
    return {
        "member_id": str(member.id),
        "tenant_id": str(member.tenant_id),
        "period": info.period,
    }


def _send(event_type, member, info, context, counts) -> bool:
    """Send one sweep email; failures are logged and counted, never raised."""
    try:
        return EmailEventService.send_email_event(event_type, member, info.period, context)
    except Exception:
        logger.error(
            "Failed to send delinquency email",
            extra={**_member_context(member, info), "event_type": event_type},
            exc_info=True,
        )
        counts["member_failures"] += 1
        return False
