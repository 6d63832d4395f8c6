"""WSGI config for the tasktap project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "tasktap.settings")

application = get_wsgi_application()
