"""
Add celery-beat schedule for the daily delinquency sweep.

The send_delinquency_notices task emails reminders to overdue members
and suspends members past the suspension threshold.
"""

from django.db import migrations

TASK_NAME = "Send Delinquency Notices"


def create_periodic_task(apps, schema_editor):
    """Create the periodic task for the delinquency sweep."""
    IntervalSchedule = apps.get_model("django_celery_beat", "IntervalSchedule")
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    schedule, _ = IntervalSchedule.objects.get_or_create(
        every=1,
        period="days",
    )

    PeriodicTask.objects.get_or_create(
        name=TASK_NAME,
        defaults={
            "task": "payments.tasks.send_delinquency_notices",
            "interval": schedule,
            "enabled": True,
            "description": (
                "Sends overdue reminders and suspension notices to "
                "delinquent members of every active tenant."
            ),
        },
    )


def remove_periodic_task(apps, schema_editor):
    """Remove the periodic task on migration rollback."""
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    PeriodicTask.objects.filter(name=TASK_NAME).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("payments", "0001_initial"),
        ("django_celery_beat", "0019_alter_periodictasks_options"),
    ]

    operations = [
        migrations.RunPython(create_periodic_task, remove_periodic_task),
    ]
