# backend/asgi.py
"""
ASGI entrypoint for the invoicing backend.
Defaults to dev settings; deployments set DJANGO_SETTINGS_MODULE=backend.settings.prod.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings.dev")

application = get_asgi_application()
