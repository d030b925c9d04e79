"""
Serializers for the payments API.

Input serializers validate every external payload before it reaches a
service. Output serializers never expose provider tokens.

Serializers:
    WebhookPaymentSerializer: Provider payment notification
    CreateIntentSerializer: Checkout request (client amounts are ignored)
    ManualPaymentSerializer: Payment collected by staff
    TenantQuerySerializer: ?tenant_id= query parameter
    PaymentListQuerySerializer: Filters for the payment list
    PaymentSerializer / DelinquentSerializer: Responses
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from rest_framework import serializers

from payments.models import Payment, PaymentIntent
from payments.periods import is_valid_period
from payments.services.ledger import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from payments.state_machines import PaymentProvider, PaymentStatus

PERIOD_ERROR = "Expected YYYY-MM or 'registration'."


class PeriodField(serializers.CharField):
    """Billing period: "YYYY-MM" or "registration"."""

    def __init__(self, **kwargs):
        kwargs.setdefault("max_length", 20)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        if not is_valid_period(value):
            raise serializers.ValidationError(PERIOD_ERROR)
        return value


def _positive_amount_field(**kwargs) -> serializers.DecimalField:
    return serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0.01"),
        **kwargs,
    )


class CurrencyField(serializers.CharField):
    def __init__(self, **kwargs):
        kwargs.setdefault("min_length", 3)
        kwargs.setdefault("max_length", 3)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        return super().to_internal_value(data).upper()


# =============================================================================
# Input
# =============================================================================


class WebhookPaymentSerializer(serializers.Serializer):
    """
    Payment notification from a provider.

    Only approved payments are accepted; any other status is a
    validation error so no speculative state is ever stored.
    """

    provider = serializers.ChoiceField(choices=PaymentProvider.online())
    provider_payment_id = serializers.CharField(max_length=255)
    status = serializers.ChoiceField(
        choices=[PaymentStatus.APPROVED],
        error_messages={"invalid_choice": "Only approved payments are recorded."},
    )
    member_id = serializers.UUIDField()
    tenant_id = serializers.UUIDField()
    period = PeriodField()
    amount = _positive_amount_field()
    currency = CurrencyField()


class CreateIntentSerializer(serializers.Serializer):
    """
    Checkout request. Any "amount" sent by the client is ignored; a
    "currency" must match the configured one.
    """

    provider = serializers.ChoiceField(choices=PaymentProvider.online())
    member_id = serializers.UUIDField()
    tenant_id = serializers.UUIDField()
    period = PeriodField()
    currency = CurrencyField(required=False)


class ManualPaymentSerializer(serializers.Serializer):
    member_id = serializers.UUIDField()
    tenant_id = serializers.UUIDField()
    period = PeriodField()
    amount = _positive_amount_field()
    currency = CurrencyField(required=False)

    def validate(self, attrs):
        attrs.setdefault("currency", settings.DEFAULT_PAYMENT_CURRENCY)
        return attrs


class TenantQuerySerializer(serializers.Serializer):
    tenant_id = serializers.UUIDField()


class PaymentListQuerySerializer(TenantQuerySerializer):
    member_id = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=PaymentStatus.choices, required=False)
    period = PeriodField(required=False)
    provider = serializers.ChoiceField(choices=PaymentProvider.choices, required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    limit = serializers.IntegerField(
        min_value=1, max_value=MAX_PAGE_SIZE, default=DEFAULT_PAGE_SIZE
    )
    offset = serializers.IntegerField(min_value=0, default=0)

    def validate(self, attrs):
        date_from = attrs.get("date_from")
        date_to = attrs.get("date_to")
        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({"date_to": "Must not be before date_from."})
        return attrs


# =============================================================================
# Output
# =============================================================================


class PaymentSerializer(serializers.ModelSerializer):
    member_id = serializers.UUIDField(read_only=True)
    member_name = serializers.CharField(source="member.display_name", read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "member_id",
            "member_name",
            "period",
            "amount",
            "currency",
            "provider",
            "provider_payment_id",
            "status",
            "paid_at",
            "metadata",
            "created_at",
        ]
        read_only_fields = fields


class PaymentIntentSerializer(serializers.ModelSerializer):
    intent_id = serializers.UUIDField(source="id", read_only=True)

    class Meta:
        model = PaymentIntent
        fields = ["intent_id", "checkout_url", "provider_preference_id", "status"]
        read_only_fields = fields


class DelinquentSerializer(serializers.Serializer):
    member_id = serializers.UUIDField()
    member_name = serializers.CharField()
    period = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()
    due_date = serializers.DateField()
    days_overdue = serializers.IntegerField()
