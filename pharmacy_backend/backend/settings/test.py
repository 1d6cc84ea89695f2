"""
PATH: backend/settings/test.py

TEST SETTINGS
- In-memory SQLite
- Fast password hashing
- Quiet logging
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import LOGGING

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

INVOICING = {
    "DEFAULT_CURRENCY": "PKR",
    "DEFAULT_PAYMENT_TERMS_DAYS": 30,
    "ENFORCE_CREDIT_LIMIT": True,
    "NUMBER_PREFIXES": {
        "sale": "SI",
        "purchase": "PI",
        "return_sale": "SR",
        "return_purchase": "PR",
    },
}

POSTING_ACCOUNT_CODES = {
    "INVENTORY": "1200",
    "SALES_REVENUE": "4000",
    "SALES_RETURNS": "4100",
}

for _logger in LOGGING["loggers"].values():
    _logger["level"] = "CRITICAL"
