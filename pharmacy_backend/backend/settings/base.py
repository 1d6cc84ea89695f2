"""
PATH: backend/settings/base.py

BASE SETTINGS (shared by dev + prod + test)

Scope:
- Invoice lifecycle engine (invoicing, stock ledger, financial ledger)
- Counterparty + item reference data needed by the engine
- Thin REST surface (DRF) + OpenAPI schema (drf-spectacular)
"""

from __future__ import annotations

from pathlib import Path

import environ

# -----------------------------------------
# BASE DIRECTORY
# -----------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# -----------------------------------------
# ENV (django-environ)
# -----------------------------------------
env = environ.Env(
    DEBUG=(bool, True),
    SECRET_KEY=(str, ""),
    TIME_ZONE=(str, "UTC"),
    ALLOWED_HOSTS=(list, ["localhost", "127.0.0.1"]),
    DATABASE_URL=(str, f"sqlite:///{BASE_DIR / 'db.sqlite3'}"),
    LOG_LEVEL=(str, "INFO"),
    ADMIN_PATH=(str, "admin/"),
    # Invoicing
    INVOICE_DEFAULT_CURRENCY=(str, "PKR"),
    INVOICE_DEFAULT_PAYMENT_TERMS_DAYS=(int, 30),
    INVOICE_ENFORCE_CREDIT_LIMIT=(bool, True),
    # GL accounts used when posting confirmed invoices
    POSTING_INVENTORY_CODE=(str, "1200"),
    POSTING_SALES_REVENUE_CODE=(str, "4000"),
    POSTING_SALES_RETURNS_CODE=(str, "4100"),
)

# -----------------------------------------
# LOAD .env
# -----------------------------------------
env_file_1 = BASE_DIR / ".env"
env_file_2 = BASE_DIR.parent / ".env"

if env_file_1.exists():
    env.read_env(str(env_file_1))
elif env_file_2.exists():
    env.read_env(str(env_file_2))

# -----------------------------------------
# CORE SECURITY
# -----------------------------------------
SECRET_KEY = (env("SECRET_KEY") or "dev-insecure-change-me").strip()
DEBUG = env.bool("DEBUG")
ALLOWED_HOSTS = env.list("ALLOWED_HOSTS")
ADMIN_PATH = env("ADMIN_PATH")

# -----------------------------------------
# I18N / TZ
# -----------------------------------------
LANGUAGE_CODE = "en-us"
TIME_ZONE = (env("TIME_ZONE") or "UTC").strip()
USE_I18N = True
USE_TZ = True

# -----------------------------------------
# INSTALLED APPS
# -----------------------------------------
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "drf_spectacular",
    "parties",
    "products",
    "accounting",
    "invoicing",
]

# -----------------------------------------
# MIDDLEWARE
# -----------------------------------------
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "backend.urls"
WSGI_APPLICATION = "backend.wsgi.application"
APPEND_SLASH = True

# -----------------------------------------
# TEMPLATES (required for Django admin)
# -----------------------------------------
TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    }
]

# -----------------------------------------
# REST FRAMEWORK
# -----------------------------------------
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "rest_framework.authentication.SessionAuthentication",
        "rest_framework.authentication.BasicAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": ("rest_framework.permissions.IsAuthenticated",),
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    # Engine errors carry an ErrorKind; the handler maps kind -> HTTP status.
    "EXCEPTION_HANDLER": "invoicing.api.exception_handler.engine_exception_handler",
}

# -----------------------------------------
# DATABASE
# -----------------------------------------
DATABASES = {
    "default": env.db("DATABASE_URL"),
}
DATABASES["default"]["ATOMIC_REQUESTS"] = False

# -----------------------------------------
# INVOICING ENGINE
# -----------------------------------------
INVOICING = {
    "DEFAULT_CURRENCY": (env("INVOICE_DEFAULT_CURRENCY") or "PKR").strip().upper(),
    "DEFAULT_PAYMENT_TERMS_DAYS": env.int("INVOICE_DEFAULT_PAYMENT_TERMS_DAYS"),
    "ENFORCE_CREDIT_LIMIT": env.bool("INVOICE_ENFORCE_CREDIT_LIMIT"),
    "NUMBER_PREFIXES": {
        "sale": "SI",
        "purchase": "PI",
        "return_sale": "SR",
        "return_purchase": "PR",
    },
}

# Semantic GL account -> account code
POSTING_ACCOUNT_CODES = {
    "INVENTORY": (env("POSTING_INVENTORY_CODE") or "1200").strip(),
    "SALES_REVENUE": (env("POSTING_SALES_REVENUE_CODE") or "4000").strip(),
    "SALES_RETURNS": (env("POSTING_SALES_RETURNS_CODE") or "4100").strip(),
}

# -----------------------------------------
# LOGGING
# -----------------------------------------
LOG_LEVEL = (env("LOG_LEVEL") or "INFO").strip().upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "invoicing": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "products": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "accounting": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}

# -----------------------------------------
# STATIC FILES
# -----------------------------------------
STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# -----------------------------------------
# SWAGGER
# -----------------------------------------
SPECTACULAR_SETTINGS = {
    "TITLE": "Pharmacy Invoicing API",
    "DESCRIPTION": "Invoice lifecycle, stock ledger and financial ledger API",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
}
