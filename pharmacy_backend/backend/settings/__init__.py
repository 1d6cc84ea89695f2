# backend/settings/__init__.py
"""
Settings package entrypoint.

Nothing is imported here on purpose. Use DJANGO_SETTINGS_MODULE to select:
- backend.settings.dev   (local development)
- backend.settings.prod  (production)
- backend.settings.test  (pytest)
"""
