"""
School OS — Settings Access
==============================
Project settings live in the Django settings module (SCHOOLOS_*).
These accessors supply defaults so the core works with a bare
settings.configure().
"""

from __future__ import annotations

from pathlib import Path

from django.conf import settings

DEFAULT_AUDIT_QUERY_LIMIT = 100
DEFAULT_DEVICE_ID_FILENAME = ".device_id"


def get_audit_query_limit() -> int:
    value = getattr(settings, "SCHOOLOS_AUDIT_QUERY_LIMIT", DEFAULT_AUDIT_QUERY_LIMIT)
    try:
        limit = int(value)
    except (TypeError, ValueError):
        raise ValueError(
            f"SCHOOLOS_AUDIT_QUERY_LIMIT must be an integer, got {value!r}."
        )
    if limit < 1:
        raise ValueError("SCHOOLOS_AUDIT_QUERY_LIMIT must be at least 1.")
    return limit


def get_device_id_path() -> Path:
    value = getattr(settings, "SCHOOLOS_DEVICE_ID_PATH", None)
    if not value:
        return Path.cwd() / DEFAULT_DEVICE_ID_FILENAME
    return Path(value)


def bootstrap_checks_enabled() -> bool:
    return bool(getattr(settings, "SCHOOLOS_BOOTSTRAP_CHECKS", True))
