import tempfile
from pathlib import Path

from . import base

for k, v in base.__dict__.items():
    if k.isupper():
        globals()[k] = v

# Test overrides (DJANGO_ENV=test or pytest with DJANGO_SETTINGS_MODULE=app.settings.test)
DEBUG = True
SECURE_SSL_REDIRECT = False
CELERY_TASK_ALWAYS_EAGER = True  # tasks run inline for assertions
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'
EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
MEDIA_ROOT = Path(tempfile.gettempdir()) / 'civic-api-test-media'
STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}
# Throttle history and statistics are cache backed; keep tests independent of each other
CACHES = {'default': {'BACKEND': 'django.core.cache.backends.dummy.DummyCache'}}
