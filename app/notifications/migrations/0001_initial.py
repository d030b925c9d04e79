import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("tenants", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="EmailEvent",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
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
                (
                    "event_type",
                    models.CharField(
                        choices=[
                            ("payment_receipt", "Payment receipt"),
                            ("delinquency_reminder", "Delinquency reminder"),
                            ("suspension_notice", "Suspension notice"),
                        ],
                        max_length=40,
                    ),
                ),
                ("period", models.CharField(max_length=20)),
                ("recipient", models.EmailField(blank=True, max_length=254)),
                (
                    "idempotency_key",
                    models.CharField(
                        help_text="<type>:<member_id>:<period>",
                        max_length=255,
                        unique=True,
                    ),
                ),
                (
                    "sent_at",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                (
                    "member",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="email_events",
                        to="tenants.member",
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="email_events",
                        to="tenants.tenant",
                    ),
                ),
            ],
            options={
                "verbose_name": "email event",
                "verbose_name_plural": "email events",
                "db_table": "notifications_email_event",
                "ordering": ["-sent_at"],
            },
        ),
    ]
