"""
Test settings: in-memory SQLite instead of the production database.

Usage:
    python manage.py test --settings=test_settings
    pytest   (DJANGO_SETTINGS_MODULE is set in pyproject.toml)
"""

from artisan.settings import *  # noqa: F401,F403

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

DEBUG = False

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

# Local memory cache so category caching behaves like production
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'artisan-tests',
    }
}

DOCUMENT_STORE = {
    'BACKEND': 'docstore.backends.django_orm.DjangoDocumentStore',
    'OPTIONS': {},
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = False
CELERY_BROKER_URL = 'memory://'

TELEGRAM_BOT_TOKEN = ''
TELEGRAM_CHAT_ID = ''
TELEGRAM_ADMIN_ID = ''

MEDIA_ROOT = BASE_DIR / 'test-media'

LOGGING = {
    'version': 1,
    'disable_existing_loggers': True,
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'ERROR',
    },
}
