"""Test settings for VillaStay.

In-memory SQLite (unless DB_ENGINE is set), eager Celery and a fixed
encryption key so the suite runs without Redis or environment configuration.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

# DB_ENGINE keeps the configured server database (e.g. PostgreSQL for the
# row-lock tests); otherwise run on in-memory SQLite
if not os.environ.get('DB_ENGINE'):  # noqa: F405
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': ':memory:',
        }
    }

ENCRYPTION_KEY = 'test-encryption-key'

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.InMemoryStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

LOGGING['handlers']['console']['level'] = 'WARNING'  # noqa: F405
