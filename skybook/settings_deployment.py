"""Production settings for hosted deployments."""

from __future__ import annotations

import os
import warnings

from django.core.exceptions import ImproperlyConfigured

from .settings import *  # noqa: F401,F403

secret_key = os.environ.get("DJANGO_SECRET_KEY") or os.environ.get("SECRET")
if secret_key:
    SECRET_KEY = secret_key
elif SECRET_KEY == "change-me":
    raise ImproperlyConfigured(
        "DJANGO_SECRET_KEY (or SECRET) must be set before running with deployment settings."
    )

hostname = os.environ.get("WEBSITE_HOSTNAME", "").strip()
if hostname:
    ALLOWED_HOSTS = [hostname]
else:
    warnings.warn(
        "WEBSITE_HOSTNAME environment variable not set; using base ALLOWED_HOSTS.",
        stacklevel=2,
    )

DEBUG = False

SECURE_SSL_REDIRECT = os.environ.get("SECURE_SSL_REDIRECT", "false").lower() == "true"
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")

LOGGING = {  # noqa: F405
    **LOGGING,  # noqa: F405
    "root": {**LOGGING["root"], "level": os.environ.get("DJANGO_LOG_LEVEL", "INFO")},  # noqa: F405
}

# Demo accounts are never seeded outside development.
SKYBOOK_SEED_DEMO_USERS = False
