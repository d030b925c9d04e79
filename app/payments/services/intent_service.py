"""
Checkout intent creation.

Starts a checkout with a provider for a member's period. The amount is
always computed server-side; no Payment is recorded here, that only
happens when the provider confirms through the webhook.

Usage:
    from payments.services import IntentService

    intent = IntentService.create_intent(
        provider="mercadopago",
        tenant_id=tenant.id,
        member_id=member.id,
        period="2024-05",
    )
    redirect(intent.checkout_url)
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.db import DatabaseError
from django.urls import reverse

from core.exceptions import InternalError, ValidationError
from core.services import BaseService
from payments.adapters import CreateCheckoutParams, get_adapter
from payments.exceptions import (
    MemberNotInTenantError,
    PaymentAlreadyApprovedError,
    PaymentNotConfiguredError,
)
from payments.models import PaymentIntent
from payments.periods import REGISTRATION_PERIOD
from payments.services.connection_service import ConnectionService
from payments.services.ledger import PaymentLedger
from payments.services.pricing import get_expected_amount_for_period
from payments.state_machines import IntentStatus
from tenants.services import MemberDirectory

logger = logging.getLogger(__name__)


def _checkout_title(period: str) -> str:
    if period == REGISTRATION_PERIOD:
        return "Registration fee"
    return f"Monthly dues {period}"


class IntentService(BaseService):
    """Creates PaymentIntents through the provider adapters."""

    @classmethod
    def create_intent(
        cls,
        provider: str,
        tenant_id,
        member_id,
        period: str,
        currency: str | None = None,
    ) -> PaymentIntent:
        """
        Start a checkout for (member, period).

        Steps:
            1. Member must belong to the tenant
            2. Reject if the period is already paid
            3. Resolve the amount and currency server-side; a client
               currency that differs is rejected
            4. Load the tenant's provider connection when required
            5. Create the checkout with the provider
            6. Persist the PaymentIntent

        Raises:
            MemberNotInTenantError: 400
            ValidationError: 400, currency differs from the configured one
            PaymentAlreadyApprovedError: 409
            PaymentNotConfiguredError / ProviderNotConnectedError: 400
            IntegrationDisabledError: 503
            ProviderError: 502
        """
        log = cls.get_logger()
        log_context = {
            "provider": provider,
            "tenant_id": str(tenant_id),
            "member_id": str(member_id),
            "period": period,
        }

        member = MemberDirectory.get_member_in_tenant(tenant_id, member_id)
        if member is None:
            raise MemberNotInTenantError(
                "The member does not belong to this tenant.",
                details={"member_id": str(member_id)},
            )

        if PaymentLedger.find_approved_payment(member.id, period):
            log.info("Intent rejected: period already paid", extra=log_context)
            raise PaymentAlreadyApprovedError(
                "An approved payment already exists for this member and period.",
                details={"period": period},
            )

        expected = get_expected_amount_for_period(member, period)
        if expected is None:
            log.info("Intent rejected: dues not configured", extra=log_context)
            raise PaymentNotConfiguredError(
                "Dues are not configured for this tenant. Set the monthly amount "
                "in Payments > Settings.",
            )

        if currency and currency.upper() != expected.currency.upper():
            log.info("Intent rejected: currency mismatch", extra=log_context)
            raise ValidationError(
                f"Dues for this member are charged in {expected.currency}.",
                error_code="CURRENCY_MISMATCH",
                details={"currency": currency, "expected_currency": expected.currency},
            )

        adapter = get_adapter(provider)
        access_token = None
        if adapter.requires_connection:
            access_token = ConnectionService.require_connection(
                member.tenant_id, adapter.provider
            ).access_token

        base_url = settings.APP_BASE_URL.rstrip("/")
        params = CreateCheckoutParams(
            member_id=str(member.id),
            tenant_id=str(member.tenant_id),
            period=period,
            amount=expected.amount,
            currency=expected.currency,
            title=_checkout_title(period),
            payer_email=member.email,
            notification_url=f"{base_url}{reverse('payments:webhook')}",
            back_url=f"{base_url}/dashboard/payments",
        )
        result = adapter.create_checkout(params, access_token=access_token)

        try:
            intent = PaymentIntent.objects.create(
                member=member,
                tenant_id=member.tenant_id,
                period=period,
                amount=params.amount,
                currency=params.currency,
                provider=adapter.provider,
                provider_preference_id=result.provider_preference_id,
                checkout_url=result.checkout_url,
                status=IntentStatus.PENDING,
            )
        except DatabaseError as e:
            log.error("Failed to persist payment intent", extra=log_context, exc_info=True)
            raise InternalError("Failed to persist payment intent") from e

        log.info(
            "Payment intent created",
            extra={**log_context, "intent_id": str(intent.id), "amount": str(params.amount)},
        )
        return intent
