"""
Django settings for the CyberArena scoreboard.

Every contest knob is an ``ARENA_*`` setting and can be overridden through
an environment variable of the same name.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'cyberarena-insecure-dev-key-change-in-production')
DEBUG = env_bool('DJANGO_DEBUG', True)
ALLOWED_HOSTS = [h for h in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',') if h]

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'arena',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'cyberarena.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'cyberarena.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': os.environ.get('ARENA_DB_ENGINE', 'django.db.backends.sqlite3'),
        'NAME': os.environ.get('ARENA_DB_NAME', str(BASE_DIR / 'db.sqlite3')),
        'USER': os.environ.get('ARENA_DB_USER', ''),
        'PASSWORD': os.environ.get('ARENA_DB_PASSWORD', ''),
        'HOST': os.environ.get('ARENA_DB_HOST', ''),
        'PORT': os.environ.get('ARENA_DB_PORT', ''),
    }
}
if DATABASES['default']['ENGINE'].endswith('sqlite3'):
    # Busy timeout in seconds; keeps lock waits bounded
    DATABASES['default']['OPTIONS'] = {'timeout': 5}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

AUTH_USER_MODEL = 'arena.Participant'

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'cyberarena',
    }
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'arena': {
            'handlers': ['console'],
            'level': os.environ.get('ARENA_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}

# Contest settings
ARENA_FLAG_PATTERN = os.environ.get('ARENA_FLAG_PATTERN', r'^CTF\{[^\s{}]+\}$')
ARENA_MAX_SUBMISSION_LENGTH = int(os.environ.get('ARENA_MAX_SUBMISSION_LENGTH', '1024'))
ARENA_SUBMISSION_WINDOW_POLICY = os.environ.get('ARENA_SUBMISSION_WINDOW_POLICY', 'enforce')
ARENA_SUBMISSION_LOCK_TIMEOUT = float(os.environ.get('ARENA_SUBMISSION_LOCK_TIMEOUT', '5'))
ARENA_SUBMISSION_MAX_RETRIES = int(os.environ.get('ARENA_SUBMISSION_MAX_RETRIES', '3'))
ARENA_SUBMISSION_RETRY_BACKOFF = float(os.environ.get('ARENA_SUBMISSION_RETRY_BACKOFF', '0.05'))
ARENA_LEADERBOARD_CACHE_SECONDS = int(os.environ.get('ARENA_LEADERBOARD_CACHE_SECONDS', '5'))
ARENA_TOKEN_MAX_AGE = int(os.environ.get('ARENA_TOKEN_MAX_AGE', str(24 * 60 * 60)))
