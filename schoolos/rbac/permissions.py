"""
School OS RBAC — Permission Vocabulary
=========================================
Closed catalog of permission tokens and role bundles.

Rules:
- Permissions are defined here, never created at runtime
- Roles are a closed set (teacher, clerk, principal, admin)
- principal and admin are admin-class: they bypass every check
- Bundles are static configuration; runtime customisation lives in
  the role_permissions table (see schoolos.identity_store)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


# ══════════════════════════════════════════════════════════════
# PERMISSIONS
# ══════════════════════════════════════════════════════════════

class Permission(str, Enum):
    """Opaque permission token. Value is the persisted string."""

    # ── Students ──────────────────────────────────────────────
    STUDENTS_READ = "students.read"
    STUDENTS_WRITE = "students.write"

    # ── Staff ─────────────────────────────────────────────────
    STAFF_READ = "staff.read"
    STAFF_WRITE = "staff.write"

    # ── Attendance ────────────────────────────────────────────
    ATTENDANCE_READ = "attendance.read"
    ATTENDANCE_MARK = "attendance.mark"
    ATTENDANCE_EDIT = "attendance.edit"

    # ── Evidence / compliance ─────────────────────────────────
    EVIDENCE_READ = "evidence.read"
    EVIDENCE_WRITE = "evidence.write"

    # ── Exports ───────────────────────────────────────────────
    EXPORTS_GENERATE = "exports.generate"

    # ── Audit ─────────────────────────────────────────────────
    AUDIT_READ = "audit.read"
    AUDIT_ADMIN = "audit.admin"

    # ── Policies ──────────────────────────────────────────────
    POLICIES_READ = "policies.read"
    POLICIES_WRITE = "policies.write"

    # ── Users & roles ─────────────────────────────────────────
    USERS_READ = "users.read"
    USERS_ADMIN = "users.admin"
    ROLES_READ = "roles.read"
    ROLES_ADMIN = "roles.admin"

    def __str__(self) -> str:
        return self.value


VALID_PERMISSIONS = frozenset(p.value for p in Permission)


# ══════════════════════════════════════════════════════════════
# ROLES
# ══════════════════════════════════════════════════════════════

class AppRole(str, Enum):
    TEACHER = "teacher"
    CLERK = "clerk"
    PRINCIPAL = "principal"
    ADMIN = "admin"

    def __str__(self) -> str:
        return self.value


ADMIN_ROLES = frozenset({AppRole.PRINCIPAL, AppRole.ADMIN})


@dataclass(frozen=True)
class RoleBundle:
    display_name: str
    permissions: frozenset

    def __post_init__(self):
        if not self.display_name or not isinstance(self.display_name, str):
            raise ValueError("display_name must be a non-empty string.")

        if not isinstance(self.permissions, frozenset):
            raise ValueError("permissions must be a frozenset.")

        for permission in self.permissions:
            if not isinstance(permission, Permission):
                raise ValueError(
                    f"permission '{permission}' is not a Permission member."
                )


ROLE_BUNDLES: dict[AppRole, RoleBundle] = {
    AppRole.TEACHER: RoleBundle(
        display_name="Teacher",
        permissions=frozenset({
            Permission.STUDENTS_READ,
            Permission.ATTENDANCE_READ,
            Permission.ATTENDANCE_MARK,
            Permission.EVIDENCE_READ,
        }),
    ),
    AppRole.CLERK: RoleBundle(
        display_name="Clerk",
        permissions=frozenset({
            Permission.STUDENTS_READ,
            Permission.STUDENTS_WRITE,
            Permission.STAFF_READ,
            Permission.EVIDENCE_READ,
            Permission.EVIDENCE_WRITE,
            Permission.EXPORTS_GENERATE,
        }),
    ),
    # Full bundles are only used to seed persisted grants.
    # The admin bypass is an explicit short-circuit in the resolver.
    AppRole.PRINCIPAL: RoleBundle(
        display_name="Principal",
        permissions=frozenset(Permission),
    ),
    AppRole.ADMIN: RoleBundle(
        display_name="Administrator",
        permissions=frozenset(Permission),
    ),
}


# ══════════════════════════════════════════════════════════════
# TOLERANT PARSING
# ══════════════════════════════════════════════════════════════

def parse_permission(value: Any) -> Optional[Permission]:
    """Return the Permission for a token, or None if it is not in the vocabulary."""
    if isinstance(value, Permission):
        return value
    try:
        return Permission(value)
    except ValueError:
        return None


def parse_role(value: Any) -> Optional[AppRole]:
    """Return the AppRole for a name, or None if it is not a known role."""
    if isinstance(value, AppRole):
        return value
    try:
        return AppRole(value)
    except ValueError:
        return None
