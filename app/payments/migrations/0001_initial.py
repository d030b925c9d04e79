import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import django_fsm
from django.db import migrations, models


def _timestamps():
    return [
        (
            "created_at",
            models.DateTimeField(
                auto_now_add=True,
                db_index=True,
                help_text="Timestamp when this record was created",
            ),
        ),
        (
            "updated_at",
            models.DateTimeField(
                auto_now=True,
                help_text="Timestamp when this record was last modified",
            ),
        ),
    ]


def _uuid_pk():
    return (
        "id",
        models.UUIDField(
            default=uuid.uuid4,
            editable=False,
            help_text="Unique identifier for this record",
            primary_key=True,
            serialize=False,
        ),
    )


def _bigauto_pk():
    return (
        "id",
        models.BigAutoField(
            auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
        ),
    )


PROVIDER_CHOICES = [
    ("mercadopago", "Mercado Pago"),
    ("dlocal", "dLocal"),
    ("manual", "Manual"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("tenants", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Payment",
            fields=[
                *_timestamps(),
                _uuid_pk(),
                (
                    "metadata",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Flexible key-value metadata storage",
                    ),
                ),
                (
                    "period",
                    models.CharField(
                        db_index=True,
                        help_text="Billing period: YYYY-MM or 'registration'",
                        max_length=20,
                    ),
                ),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2, help_text="Amount collected", max_digits=12
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        default="ARS", help_text="ISO 4217 currency code", max_length=3
                    ),
                ),
                (
                    "provider",
                    models.CharField(
                        choices=PROVIDER_CHOICES,
                        help_text="Where the payment was collected",
                        max_length=20,
                    ),
                ),
                (
                    "provider_payment_id",
                    models.CharField(
                        blank=True,
                        help_text="Provider payment reference (webhook dedup key)",
                        max_length=255,
                        null=True,
                    ),
                ),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("pending", "Pending"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                            ("refunded", "Refunded"),
                        ],
                        db_index=True,
                        default="pending",
                        help_text="Current state of the payment (managed by FSM)",
                        max_length=50,
                    ),
                ),
                (
                    "paid_at",
                    models.DateTimeField(
                        blank=True, help_text="When the payment was approved", null=True
                    ),
                ),
                (
                    "member",
                    models.ForeignKey(
                        help_text="Member the payment is for",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                        to="tenants.member",
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        help_text="Tenant that owns the member",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                        to="tenants.tenant",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment",
                "verbose_name_plural": "Payments",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["tenant", "status"], name="payment_tenant_status_idx"
                    ),
                    models.Index(
                        fields=["member", "period"], name="payment_member_period_idx"
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "approved")),
                        fields=("member", "period"),
                        name="unique_approved_payment_per_period",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("provider_payment_id__isnull", False)),
                        fields=("provider", "provider_payment_id"),
                        name="unique_provider_payment_id",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentIntent",
            fields=[
                *_timestamps(),
                _uuid_pk(),
                ("period", models.CharField(max_length=20)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("currency", models.CharField(default="ARS", max_length=3)),
                (
                    "provider",
                    models.CharField(choices=PROVIDER_CHOICES, max_length=20),
                ),
                (
                    "provider_preference_id",
                    models.CharField(
                        help_text="Checkout reference returned by the provider",
                        max_length=255,
                    ),
                ),
                (
                    "checkout_url",
                    models.URLField(
                        help_text="URL the payer is sent to", max_length=2000
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("completed", "Completed"),
                            ("expired", "Expired"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "member",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment_intents",
                        to="tenants.member",
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment_intents",
                        to="tenants.tenant",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment Intent",
                "verbose_name_plural": "Payment Intents",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["member", "period"], name="intent_member_period_idx"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentConfig",
            fields=[
                _bigauto_pk(),
                *_timestamps(),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        help_text="Monthly dues amount",
                        max_digits=12,
                    ),
                ),
                ("currency", models.CharField(default="ARS", max_length=3)),
                (
                    "due_day_of_month",
                    models.PositiveSmallIntegerField(
                        default=10,
                        help_text="Day dues fall due; clamped to the month's last day",
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(31),
                        ],
                    ),
                ),
                (
                    "tenant",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payment_config",
                        to="tenants.tenant",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment Config",
                "verbose_name_plural": "Payment Configs",
            },
        ),
        migrations.CreateModel(
            name="CategoryPricing",
            fields=[
                _bigauto_pk(),
                *_timestamps(),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("currency", models.CharField(default="ARS", max_length=3)),
                (
                    "category",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="pricing",
                        to="tenants.category",
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="category_pricing",
                        to="tenants.tenant",
                    ),
                ),
            ],
            options={
                "verbose_name": "Category Pricing",
                "verbose_name_plural": "Category Pricing",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("tenant", "category"), name="unique_category_pricing"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ProviderConnection",
            fields=[
                *_timestamps(),
                _uuid_pk(),
                (
                    "provider",
                    models.CharField(
                        choices=PROVIDER_CHOICES, default="mercadopago", max_length=20
                    ),
                ),
                ("access_token", models.TextField(help_text="Provider access token")),
                (
                    "refresh_token",
                    models.TextField(blank=True, help_text="Provider refresh token"),
                ),
                (
                    "expires_at",
                    models.DateTimeField(
                        blank=True, help_text="When the access token expires", null=True
                    ),
                ),
                (
                    "connected_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now,
                        help_text="When the account was last connected",
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="provider_connections",
                        to="tenants.tenant",
                    ),
                ),
            ],
            options={
                "verbose_name": "Provider Connection",
                "verbose_name_plural": "Provider Connections",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("tenant", "provider"), name="unique_provider_connection"
                    ),
                ],
            },
        ),
    ]
