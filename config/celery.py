"""
ClinicStock — Celery Application

Periodic jobs (stock reconciliation) are registered in
CELERY_BEAT_SCHEDULE and discovered from each app's tasks module.

@file config/celery.py
"""

import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

app = Celery('clinicstock')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
