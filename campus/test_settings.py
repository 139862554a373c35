from .settings import *  # noqa: F401,F403

SECURE_SSL_REDIRECT = False
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

STORAGES = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}

LOGGING['loggers'] = {  # noqa: F405
    name: {'handlers': ['console'], 'level': 'CRITICAL', 'propagate': False}
    for name in ('django', 'campus', 'users', 'academics', 'attendance', 'results', 'leaves', 'feedback')
}
