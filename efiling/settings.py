"""
Django settings for the e-filing routing project.

Deployment-specific values come from environment variables; everything else
has a development default.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def env_list(name, default):
    value = os.environ.get(name)
    if not value:
        return list(default)
    return [item.strip() for item in value.split(',') if item.strip()]


SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'efiling-dev-secret-key-change-me')

DEBUG = env_bool('DJANGO_DEBUG', default=False)

ALLOWED_HOSTS = env_list('DJANGO_ALLOWED_HOSTS', ['localhost', '127.0.0.1', 'testserver'])


INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    'accounts',
    'filing',
    'routing',
    'notifications',
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

ROOT_URLCONF = 'efiling.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'efiling.wsgi.application'


# Database
# Production runs on PostgreSQL so that select_for_update() takes a real row lock.
DATABASES = {
    'default': {
        'ENGINE': os.environ.get('EFILING_DB_ENGINE', 'django.db.backends.sqlite3'),
        'NAME': os.environ.get('EFILING_DB_NAME', str(BASE_DIR / 'db.sqlite3')),
        'USER': os.environ.get('EFILING_DB_USER', ''),
        'PASSWORD': os.environ.get('EFILING_DB_PASSWORD', ''),
        'HOST': os.environ.get('EFILING_DB_HOST', ''),
        'PORT': os.environ.get('EFILING_DB_PORT', ''),
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]

LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.environ.get('EFILING_TIME_ZONE', 'Asia/Karachi')
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'


# E-filing routing engine
EFILING_DEFAULT_SLA_HOURS = int(os.environ.get('EFILING_DEFAULT_SLA_HOURS', '24'))

# Marking to one of these roles (outside a team-internal move) starts the TAT clock.
EFILING_EXTERNAL_ROLE_CODES = env_list('EFILING_EXTERNAL_ROLE_CODES', ['SE', 'CE', 'CFO', 'COO', 'CEO'])

# These roles see every active user and skip geographic validation.
EFILING_GLOBAL_ROLE_CODES = env_list('EFILING_GLOBAL_ROLE_CODES', ['CEO', 'COO'])

EFILING_MESSAGE_BACKEND = os.environ.get(
    'EFILING_MESSAGE_BACKEND', 'notifications.backends.LoggingMessageBackend'
)

EFILING_TAT_WARNING_HOURS = int(os.environ.get('EFILING_TAT_WARNING_HOURS', '1'))
EFILING_TAT_WARNING_WINDOW_MINUTES = int(os.environ.get('EFILING_TAT_WARNING_WINDOW_MINUTES', '5'))


LOG_LEVEL = os.environ.get('EFILING_LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s %(levelname)s %(name)s %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'django': {'handlers': ['console'], 'level': 'WARNING', 'propagate': False},
        'accounts': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'filing': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'routing': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'notifications': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
    },
}
