"""
School OS Bootstrap — Invariant Checks
========================================
Each function verifies one system law.
If any check fails → SystemBootstrapError is raised.

These checks do NOT:
- Auto-fix anything
- Run migrations
- Write rows
"""

import logging

from django.db import connection

from schoolos.bootstrap.errors import SystemBootstrapError

logger = logging.getLogger("schoolos.bootstrap")

REQUIRED_TABLES = (
    "audit_events",
    "policies",
    "user_roles",
    "roles",
    "role_permissions",
)


# ══════════════════════════════════════════════════════════════
# CHECK 1: Command Permission Registry Exhaustive
# ══════════════════════════════════════════════════════════════

def check_permission_registry():
    from schoolos.commands.registry import unmapped_command_types

    missing = unmapped_command_types()
    if missing:
        raise SystemBootstrapError(
            invariant="COMMAND_PERMISSION_REGISTRY",
            detail=(
                "Command types without a required permission: "
                f"{sorted(ct.value for ct in missing)}"
            ),
        )

    logger.info("✓ Every command type maps to a permission.")


# ══════════════════════════════════════════════════════════════
# CHECK 2: Handler Coverage
# ══════════════════════════════════════════════════════════════

def check_handler_coverage():
    from schoolos.commands.handlers import build_default_handlers

    missing = build_default_handlers().missing()
    if missing:
        raise SystemBootstrapError(
            invariant="COMMAND_HANDLER_COVERAGE",
            detail=(
                "Command types without a handler: "
                f"{sorted(ct.value for ct in missing)}"
            ),
        )

    logger.info("✓ Every command type has a handler.")


# ══════════════════════════════════════════════════════════════
# CHECK 3: Tables Exist
# ══════════════════════════════════════════════════════════════

def check_tables():
    """
    Verify the core tables exist. No auto-migration.
    """
    table_names = set(connection.introspection.table_names())
    missing = [name for name in REQUIRED_TABLES if name not in table_names]

    if missing:
        raise SystemBootstrapError(
            invariant="CORE_TABLES",
            detail=(
                f"Missing table(s): {missing}. "
                "Run migrations before starting School OS."
            ),
        )

    logger.info("✓ Core tables exist.")


# ══════════════════════════════════════════════════════════════
# CHECK 4: Immutability Guards Active
# ══════════════════════════════════════════════════════════════

def _expect_permission_error(action, invariant: str, detail: str) -> None:
    try:
        action()
    except PermissionError:
        return
    raise SystemBootstrapError(invariant=invariant, detail=detail)


def check_immutability_guards():
    """
    Verify that AuditEvent and Policy refuse updates and deletes,
    per row and through their querysets.

    Uses non-persisted instances flagged as loaded, so the guards
    are exercised without touching the database.
    """
    from schoolos.audit.models import AuditEvent
    from schoolos.policies.models import Policy

    audit_event = AuditEvent(
        actor_user_id="bootstrap-check",
        actor_roles=[],
        command_type="bootstrap.guard.test",
        entity_type="bootstrap",
    )
    audit_event._state.adding = False

    _expect_permission_error(
        audit_event.save,
        "AUDIT_IMMUTABILITY_SAVE",
        "AuditEvent.save() did NOT block update on a persisted event.",
    )
    _expect_permission_error(
        audit_event.delete,
        "AUDIT_IMMUTABILITY_DELETE",
        "AuditEvent.delete() did NOT raise PermissionError.",
    )

    policy = Policy(
        policy_key="bootstrap.guard.test",
        policy_value=True,
        version=1,
        is_active=True,
        created_by="bootstrap-check",
    )
    policy._state.adding = False

    _expect_permission_error(
        policy.save,
        "POLICY_IMMUTABILITY_SAVE",
        "Policy.save() did NOT block overwrite of a persisted version.",
    )
    _expect_permission_error(
        policy.delete,
        "POLICY_IMMUTABILITY_DELETE",
        "Policy.delete() did NOT raise PermissionError.",
    )

    _expect_permission_error(
        lambda: AuditEvent.objects.none().update(reason="x"),
        "AUDIT_IMMUTABILITY_BULK_UPDATE",
        "AuditEvent queryset update() is not blocked.",
    )
    _expect_permission_error(
        lambda: AuditEvent.objects.none().delete(),
        "AUDIT_IMMUTABILITY_BULK_DELETE",
        "AuditEvent queryset delete() is not blocked.",
    )
    _expect_permission_error(
        lambda: Policy.objects.none().update(policy_value=0),
        "POLICY_IMMUTABILITY_BULK_UPDATE",
        "Policy queryset update() can rewrite policy values.",
    )
    _expect_permission_error(
        lambda: Policy.objects.none().delete(),
        "POLICY_IMMUTABILITY_BULK_DELETE",
        "Policy queryset delete() is not blocked.",
    )

    logger.info("✓ Immutability guards active (row and bulk writes blocked).")
