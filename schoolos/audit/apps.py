"""
School OS Audit — App Configuration
======================================
The audit_events table: append-only trail of successful commands.

This app:
- Persists audit events handed over by the Command Bus
- Answers read-only audit queries

This app does NOT:
- Decide whether a command may run
- Update or delete audit events
"""

from django.apps import AppConfig


class AuditConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "schoolos.audit"
    label = "schoolos_audit"
    verbose_name = "School OS Audit Log"
