"""
ClinicStock — Test Settings

Used by pytest (see pyproject.toml). Runs against SQLite unless
TEST_DATABASE_URL points at a PostgreSQL instance.

@file config/settings/test.py
"""

from .base import *  # noqa: F401, F403

DEBUG = False

DATABASES = {
    'default': env.db('TEST_DATABASE_URL', default='sqlite:///:memory:'),  # noqa: F405
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    }
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

REST_FRAMEWORK['DEFAULT_THROTTLE_CLASSES'] = []  # noqa: F405

LOGGING['loggers']['clinicstock']['level'] = 'WARNING'  # noqa: F405
