"""
Django settings for anchoring_service.

The service is a stateless JSON API: it fingerprints elements and text
selections in submitted page snapshots and reattaches stored anchors to
new snapshots. Nothing is persisted; the SQLite database exists only
because Django expects a default connection.

Every deployment-specific value is read from the environment so the same
module serves local runs, the test suite and production.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent

INSECURE_KEY = 'django-insecure-anchoring'


def env_flag(name: str, default: bool) -> bool:
    return os.getenv(name, 'true' if default else 'false').strip().lower() in {'1', 'true', 'yes', 'on'}


def env_list(name: str, default: str = '') -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(',') if item.strip()]


SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', INSECURE_KEY)
# Settings load before PYTEST_CURRENT_TEST is set.
UNDER_PYTEST = 'pytest' in sys.modules or 'PYTEST_CURRENT_TEST' in os.environ
DEBUG = env_flag('DJANGO_DEBUG', False) or UNDER_PYTEST

if SECRET_KEY == INSECURE_KEY and not DEBUG:
    raise ImproperlyConfigured('Set DJANGO_SECRET_KEY before running with DEBUG off.')

ALLOWED_HOSTS = env_list('DJANGO_ALLOWED_HOSTS', '127.0.0.1,localhost')

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'anchoring.apps.AnchoringConfig',
]

# No sessions, auth or CSRF: the API is stateless and called cross-origin.
MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'anchoring_service.urls'
WSGI_APPLICATION = 'anchoring_service.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': Path(os.getenv('ANCHORING_SQLITE_PATH', BASE_DIR / 'db.sqlite3')),
    }
}
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = False
USE_TZ = True


# Anchoring engine
ANCHORING_ENGINE_CONFIG = os.getenv('ANCHORING_ENGINE_CONFIG') or None  # optional YAML overrides
ANCHORING_MAX_HTML_LENGTH = int(os.getenv('ANCHORING_MAX_HTML_LENGTH', '5000000'))
ANCHORING_MAX_ANCHORS = int(os.getenv('ANCHORING_MAX_ANCHORS', '500'))
# Request bodies carry a whole page snapshot plus anchor records.
DATA_UPLOAD_MAX_MEMORY_SIZE = ANCHORING_MAX_HTML_LENGTH * 2


# Transport hardening
SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_REFERRER_POLICY = 'same-origin'
X_FRAME_OPTIONS = 'DENY'
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
SECURE_SSL_REDIRECT = not DEBUG and env_flag('DJANGO_SECURE_SSL_REDIRECT', True)
SECURE_HSTS_SECONDS = 0 if DEBUG else int(os.getenv('DJANGO_SECURE_HSTS_SECONDS', '31536000'))


LOG_LEVEL = os.getenv('DJANGO_LOG_LEVEL', 'INFO').upper()
ANCHORING_LOG_LEVEL = os.getenv('ANCHORING_LOG_LEVEL', LOG_LEVEL).upper()
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'plain': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'stderr': {
            'class': 'logging.StreamHandler',
            'formatter': 'plain',
        },
    },
    'root': {
        'handlers': ['stderr'],
        'level': LOG_LEVEL,
    },
    'loggers': {
        'django': {
            'handlers': ['stderr'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
        'anchoring': {
            'handlers': ['stderr'],
            'level': ANCHORING_LOG_LEVEL,
            'propagate': False,
        },
    },
}
