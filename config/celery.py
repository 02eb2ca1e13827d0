"""Celery setup for the ticketing service."""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("ticketing")

# All celery-related configuration keys carry a `CELERY_` prefix in settings.
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()

# run:
# celery -A config worker -l INFO
