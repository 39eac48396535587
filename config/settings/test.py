"""Test settings for CarGO project.

In-memory SQLite, a fast password hasher and quiet logs. Selected by
pytest through ``DJANGO_SETTINGS_MODULE`` in ``pyproject.toml``.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

TIME_ZONE = 'Africa/Casablanca'

LOGGING["handlers"]["console"]["level"] = "WARNING"  # noqa: F405
