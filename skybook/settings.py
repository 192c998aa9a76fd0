"""SkyBook settings module."""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# Load environment variables early so they affect downstream config.
load_dotenv(BASE_DIR / ".env")

IS_TESTING = 'test' in sys.argv or 'pytest' in sys.modules


# Quick-start development settings - unsuitable for production
# See https://docs.djangoproject.com/en/5.1/howto/deployment/checklist/

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "change-me")

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = os.getenv("DJANGO_DEBUG", "true").lower() == "true"

ALLOWED_HOSTS = [host.strip() for host in os.getenv("DJANGO_ALLOWED_HOSTS", "*").split(",") if host.strip()]


# Application definition

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'rest_framework',
    'corsheaders',
    'core',
    'accounts',
    'flights',
    'payments',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'skybook.urls'

WSGI_APPLICATION = 'skybook.wsgi.application'

# The ledgers live in process memory; no relational database is configured.
DATABASES: dict = {}


# Internationalization
# https://docs.djangoproject.com/en/5.1/topics/i18n/

LANGUAGE_CODE = 'en-us'

TIME_ZONE = 'UTC'

USE_I18N = True

USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Routes are published without trailing slashes (/auth/login, /bookings).
APPEND_SLASH = False

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.AllowAny',
    ],
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_PARSER_CLASSES': [
        'rest_framework.parsers.JSONParser',
    ],
    'UNAUTHENTICATED_USER': None,
    'COERCE_DECIMAL_TO_STRING': False,
    'EXCEPTION_HANDLER': 'core.exceptions.api_exception_handler',
    'TEST_REQUEST_DEFAULT_FORMAT': 'json',
}

EMAIL_BACKEND = os.getenv('EMAIL_BACKEND', 'django.core.mail.backends.console.EmailBackend')
EMAIL_HOST = os.getenv('EMAIL_HOST', 'localhost')
EMAIL_PORT = int(os.getenv('EMAIL_PORT', 25))
EMAIL_HOST_USER = os.getenv('EMAIL_HOST_USER', '')
EMAIL_HOST_PASSWORD = os.getenv('EMAIL_HOST_PASSWORD', '')
EMAIL_USE_TLS = os.getenv('EMAIL_USE_TLS', 'false').lower() == 'true'
DEFAULT_FROM_EMAIL = os.getenv('DEFAULT_FROM_EMAIL', 'noreply@skybook.local')

CORS_ALLOWED_ORIGINS = [origin.strip() for origin in os.getenv('CORS_ALLOWED_ORIGINS', '').split(',') if origin.strip()]
CORS_ALLOW_ALL_ORIGINS = not CORS_ALLOWED_ORIGINS

SECURE_CONTENT_TYPE_NOSNIFF = True

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': os.getenv('DJANGO_LOG_LEVEL', 'DEBUG' if DEBUG else 'INFO'),
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': os.getenv('DJANGO_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}


# Booking platform

SKYBOOK_REPOSITORIES = {
    'flights': {
        'BACKEND': 'core.repositories.InMemoryRepository',
        'SEED': 'flights.inventory.seed_flights',
    },
    'bookings': {
        'BACKEND': 'core.repositories.InMemoryRepository',
    },
    'drafts': {
        'BACKEND': 'core.repositories.InMemoryRepository',
    },
    'users': {
        'BACKEND': 'core.repositories.InMemoryRepository',
        'SEED': 'accounts.services.seed_demo_users',
    },
}

SKYBOOK_BOOKING_REFERENCE_PREFIX = os.getenv('SKYBOOK_BOOKING_REFERENCE_PREFIX', 'SK')
SKYBOOK_CURRENCY = os.getenv('SKYBOOK_CURRENCY', 'usd')
SKYBOOK_SEAT_ROWS = int(os.getenv('SKYBOOK_SEAT_ROWS', 18))
SKYBOOK_SEAT_LETTERS = os.getenv('SKYBOOK_SEAT_LETTERS', 'ABCDEF')
SKYBOOK_SEAT_OCCUPANCY_RATE = float(os.getenv('SKYBOOK_SEAT_OCCUPANCY_RATE', 0.3))
SKYBOOK_DRAFT_TTL_MINUTES = int(os.getenv('SKYBOOK_DRAFT_TTL_MINUTES', 30))
SKYBOOK_MAX_PASSENGERS = int(os.getenv('SKYBOOK_MAX_PASSENGERS', 9))
SKYBOOK_SEED_DEMO_USERS = os.getenv(
    'SKYBOOK_SEED_DEMO_USERS',
    'false' if IS_TESTING else 'true',
).lower() == 'true'
