"""ASGI config for the EventFlow project."""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "eventflow.settings")

application = get_asgi_application()
