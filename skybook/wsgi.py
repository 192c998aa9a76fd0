"""WSGI config for the SkyBook project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'skybook.settings')

application = get_wsgi_application()
