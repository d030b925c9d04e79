"""
Factory Boy factories for payment test data.

Usage:
    from payments.tests.factories import PaymentConfigFactory, PaymentFactory

    PaymentConfigFactory(tenant=tenant, amount=Decimal("15000.00"))
    payment = PaymentFactory(member=member, period="2024-05")
"""

from decimal import Decimal

import factory
from django.utils import timezone

from payments.models import (
    CategoryPricing,
    Payment,
    PaymentConfig,
    PaymentIntent,
    ProviderConnection,
)
from payments.state_machines import IntentStatus, PaymentProvider, PaymentStatus
from tenants.tests.factories import CategoryFactory, MemberFactory, TenantFactory


class PaymentConfigFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = PaymentConfig

    tenant = factory.SubFactory(TenantFactory)
    amount = Decimal("15000.00")
    currency = "ARS"
    due_day_of_month = 10


class CategoryPricingFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = CategoryPricing

    tenant = factory.SubFactory(TenantFactory)
    category = factory.SubFactory(CategoryFactory, tenant=factory.SelfAttribute("..tenant"))
    amount = Decimal("9000.00")
    currency = "ARS"


class PaymentFactory(factory.django.DjangoModelFactory):
    """
    Factory for creating Payment instances.

    Default creates an approved Mercado Pago payment for 2024-05.

    Example:
        payment = PaymentFactory(member=member, period="registration")
        pending = PaymentFactory(status=PaymentStatus.PENDING, paid_at=None)
    """

    class Meta:
        model = Payment

    member = factory.SubFactory(MemberFactory)
    tenant = factory.SelfAttribute("member.tenant")
    period = "2024-05"
    amount = Decimal("15000.00")
    currency = "ARS"
    provider = PaymentProvider.MERCADOPAGO
    provider_payment_id = factory.Sequence(lambda n: f"mp-{n}")
    status = PaymentStatus.APPROVED
    paid_at = factory.LazyFunction(timezone.now)
    metadata = factory.LazyFunction(dict)


class PaymentIntentFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = PaymentIntent

    member = factory.SubFactory(MemberFactory)
    tenant = factory.SelfAttribute("member.tenant")
    period = "2024-05"
    amount = Decimal("15000.00")
    currency = "ARS"
    provider = PaymentProvider.MERCADOPAGO
    provider_preference_id = factory.Sequence(lambda n: f"pref-{n}")
    checkout_url = "https://www.mercadopago.com.ar/checkout/v1/redirect?pref_id=test"
    status = IntentStatus.PENDING


class ProviderConnectionFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ProviderConnection

    tenant = factory.SubFactory(TenantFactory)
    provider = PaymentProvider.MERCADOPAGO
    access_token = factory.Sequence(lambda n: f"APP_USR-token-{n}")
    refresh_token = factory.Sequence(lambda n: f"TG-refresh-{n}")
    expires_at = None
    connected_at = factory.LazyFunction(timezone.now)
