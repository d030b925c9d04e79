"""
Processing of approved-payment notifications.

A delivery moves through Validated -> Deduplicated -> Recorded ->
Notified. Deliveries may arrive any number of times and in any order;
every step is safe to repeat.

Usage:
    from payments.webhooks.handlers import handle_payment_notification

    result = handle_payment_notification(serializer.validated_data)
    if result.data.created:
        ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from core.services import ServiceResult
from payments.exceptions import MemberNotInTenantError
from payments.models import Payment, PaymentIntent
from payments.services.ledger import PaymentLedger, PaymentRecord
from payments.state_machines import IntentStatus, PaymentStatus
from tenants.services import MemberDirectory

logger = logging.getLogger(__name__)

ALREADY_PROCESSED = "Already processed"


@dataclass
class NotificationOutcome:
    payment: Payment
    created: bool
    message: str


def handle_payment_notification(data: dict[str, Any]) -> ServiceResult[NotificationOutcome]:
    """
    Record an approved payment from a validated notification.

    Args:
        data: WebhookPaymentSerializer.validated_data

    Returns:
        ServiceResult whose data says whether a payment was created

    Raises:
        MemberNotInTenantError: The member is not part of the claimed tenant
        InternalError: Persistence failure
    """
    provider = data["provider"]
    provider_payment_id = data["provider_payment_id"]
    log_context = {
        "provider": provider,
        "provider_payment_id": provider_payment_id,
        "tenant_id": str(data["tenant_id"]),
        "member_id": str(data["member_id"]),
        "period": data["period"],
    }

    # Deduplicated
    existing = PaymentLedger.find_payment_by_provider_id(provider, provider_payment_id)
    if existing is not None and existing.status == PaymentStatus.APPROVED:
        logger.info("Webhook already processed", extra=log_context)
        return ServiceResult.success(
            NotificationOutcome(payment=existing, created=False, message=ALREADY_PROCESSED)
        )

    # Recorded
    member = MemberDirectory.get_member_in_tenant(data["tenant_id"], data["member_id"])
    if member is None:
        logger.warning("Webhook member does not belong to tenant", extra=log_context)
        raise MemberNotInTenantError(
            "The member does not belong to this tenant.",
            details={"member_id": str(data["member_id"])},
        )

    payment, created = PaymentLedger.create_if_absent(
        PaymentRecord(
            member_id=member.id,
            tenant_id=member.tenant_id,
            period=data["period"],
            amount=data["amount"],
            currency=data["currency"],
            provider=provider,
            provider_payment_id=provider_payment_id,
        )
    )

    if not created:
        if payment.provider_payment_id != provider_payment_id:
            logger.warning(
                "Period already paid under another payment; acknowledging",
                extra={**log_context, "existing_payment_id": str(payment.id)},
            )
        else:
            logger.info("Concurrent delivery recorded first", extra=log_context)
        return ServiceResult.success(
            NotificationOutcome(payment=payment, created=False, message=ALREADY_PROCESSED)
        )

    PaymentIntent.objects.filter(
        member=member,
        period=payment.period,
        provider=provider,
        status=IntentStatus.PENDING,
    ).update(status=IntentStatus.COMPLETED)

    # Notified
    PaymentLedger.after_approval(payment, member)

    logger.info(
        "Webhook payment recorded",
        extra={**log_context, "payment_id": str(payment.id)},
    )
    return ServiceResult.success(
        NotificationOutcome(payment=payment, created=True, message="Payment recorded")
    )
