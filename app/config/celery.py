"""
Celery configuration for the Django application.

Celery runs two kinds of work here:
- Email delivery (notifications.tasks.send_email_task), retried on failure
- The daily delinquency sweep (payments.tasks.send_delinquency_notices),
  scheduled by django-celery-beat's DatabaseScheduler

Tasks are auto-discovered from all installed Django apps.

Usage:
    # Worker
    celery -A config worker -l info

    # Scheduler
    celery -A config beat -l info

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()
