"""
School OS – Django Settings (Infrastructure Only)
==================================================
Django serves as the persistence and configuration container for the
School OS authorization core. The command bus is the authority — Django
does not dictate structure.

Project settings are prefixed SCHOOLOS_ and read through schoolos.conf.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get(
    "SCHOOLOS_SECRET_KEY", "schoolos-dev-key-replace-before-deployment"
)

DEBUG = os.environ.get("SCHOOLOS_DEBUG", "1") == "1"

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    # ── School OS modules ─────────────────────────────────
    "schoolos.identity_store",
    "schoolos.policies",
    "schoolos.audit",
    "schoolos.bootstrap",
]

MIDDLEWARE = []

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured separately.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("SCHOOLOS_DB_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── School OS ─────────────────────────────────────────────────
# Most-recent audit events returned by one query (also the hard cap).
SCHOOLOS_AUDIT_QUERY_LIMIT = 100

# Run the startup self-check from AppConfig.ready().
SCHOOLOS_BOOTSTRAP_CHECKS = os.environ.get("SCHOOLOS_BOOTSTRAP_CHECKS", "1") == "1"

# Per-install device identifier stamped on audit events.
SCHOOLOS_DEVICE_ID_PATH = os.environ.get(
    "SCHOOLOS_DEVICE_ID_PATH", str(BASE_DIR / ".device_id")
)

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "schoolos": {
            "handlers": ["console"],
            "level": os.environ.get("SCHOOLOS_LOG_LEVEL", "INFO"),
        },
    },
}
