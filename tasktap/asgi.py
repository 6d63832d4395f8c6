"""ASGI config for the tasktap project."""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "tasktap.settings")

application = get_asgi_application()
