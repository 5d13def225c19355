"""
Django settings for schoolhub.

School databases are configured from the environment. Every alias listed in
SCHOOLHUB_SCHOOL_DATABASES becomes an extra database sharing the default
engine and credentials; SchoolRouter sends the school apps there.
"""

from pathlib import Path
import os
import sys

BASE_DIR = Path(__file__).resolve().parent.parent

# Django apps live in apps/ and are imported by their short label
sys.path.insert(0, str(BASE_DIR / 'apps'))

SECRET_KEY = os.environ.get('SCHOOLHUB_SECRET_KEY', 'django-insecure-schoolhub-dev-key')

DEBUG = os.environ.get('SCHOOLHUB_DEBUG', 'false').lower() == 'true'

ALLOWED_HOSTS = [h for h in os.environ.get('SCHOOLHUB_ALLOWED_HOSTS', '').split(',') if h]

INSTALLED_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'utils',
    'academics',
    'students',
    'results.apps.ResultsConfig',
]

MIDDLEWARE = []

# =============================================================================
# DATABASES
# =============================================================================

_DB_ENGINE = os.environ.get('SCHOOLHUB_DB_ENGINE', 'django.db.backends.sqlite3')


def _database(name):
    if _DB_ENGINE.endswith('sqlite3'):
        return {'ENGINE': _DB_ENGINE, 'NAME': str(BASE_DIR / f'{name}.sqlite3')}
    return {
        'ENGINE': _DB_ENGINE,
        'NAME': name,
        'USER': os.environ.get('SCHOOLHUB_DB_USER', ''),
        'PASSWORD': os.environ.get('SCHOOLHUB_DB_PASSWORD', ''),
        'HOST': os.environ.get('SCHOOLHUB_DB_HOST', ''),
        'PORT': os.environ.get('SCHOOLHUB_DB_PORT', ''),
        'ATOMIC_REQUESTS': False,
    }


DATABASES = {
    'default': _database(os.environ.get('SCHOOLHUB_DB_NAME', 'schoolhub')),
}

for _alias in os.environ.get('SCHOOLHUB_SCHOOL_DATABASES', '').split(','):
    _alias = _alias.strip()
    if _alias:
        DATABASES[_alias] = _database(_alias)

DATABASE_ROUTERS = ['schoolhub.routers.SchoolRouter']

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# =============================================================================
# TIME
# =============================================================================

USE_TZ = True
TIME_ZONE = 'UTC'

# Operational timezone of the school; timestamps and promotion dates use it
SCHOOL_TIME_ZONE = os.environ.get('SCHOOLHUB_SCHOOL_TIME_ZONE', 'Asia/Kathmandu')

# =============================================================================
# RESULT ENGINE
# =============================================================================

RESULTS_TERM_WEIGHT_TOTAL = 100
RESULTS_SYNTHETIC_REMARK_SUFFIX = ' (Generated)'

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = os.environ.get('SCHOOLHUB_LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
        },
        'audit': {
            'format': '{asctime} AUDIT {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
        'audit_console': {
            'class': 'logging.StreamHandler',
            'formatter': 'audit',
        },
    },
    'loggers': {
        'academic_audit': {
            'handlers': ['audit_console'],
            'level': 'INFO',
            'propagate': False,
        },
        'schoolhub': {'handlers': ['console'], 'level': LOG_LEVEL},
        'utils': {'handlers': ['console'], 'level': LOG_LEVEL},
        'academics': {'handlers': ['console'], 'level': LOG_LEVEL},
        'students': {'handlers': ['console'], 'level': LOG_LEVEL},
        'results': {'handlers': ['console'], 'level': LOG_LEVEL},
    },
}
