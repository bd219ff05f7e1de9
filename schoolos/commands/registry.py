"""
School OS Command Layer — Command to Permission Registry
===========================================================
Static, total lookup: every CommandType requires exactly one Permission.

Adding a CommandType without a permission entry fails at import time,
so the gap can never reach a running bus.
"""

from __future__ import annotations

from typing import Any

from schoolos.commands.base import CommandType, parse_command_type
from schoolos.commands.errors import UnknownCommandType
from schoolos.rbac.permissions import Permission

COMMAND_PERMISSIONS: dict[CommandType, Permission] = {
    CommandType.STUDENT_CREATE: Permission.STUDENTS_WRITE,
    CommandType.STUDENT_UPDATE: Permission.STUDENTS_WRITE,
    CommandType.STUDENT_DELETE: Permission.STUDENTS_WRITE,
    CommandType.STAFF_CREATE: Permission.STAFF_WRITE,
    CommandType.STAFF_UPDATE: Permission.STAFF_WRITE,
    CommandType.STAFF_DELETE: Permission.STAFF_WRITE,
    CommandType.ATTENDANCE_MARK: Permission.ATTENDANCE_MARK,
    CommandType.ATTENDANCE_EDIT: Permission.ATTENDANCE_EDIT,
    CommandType.EVIDENCE_CREATE: Permission.EVIDENCE_WRITE,
    CommandType.EVIDENCE_UPDATE: Permission.EVIDENCE_WRITE,
    CommandType.POLICY_UPDATE: Permission.POLICIES_WRITE,
    CommandType.USER_ROLE_ASSIGN: Permission.USERS_ADMIN,
    CommandType.USER_ROLE_REMOVE: Permission.USERS_ADMIN,
    CommandType.ROLE_PERMISSION_ADD: Permission.ROLES_ADMIN,
    CommandType.ROLE_PERMISSION_REMOVE: Permission.ROLES_ADMIN,
}


def unmapped_command_types() -> tuple[CommandType, ...]:
    return tuple(ct for ct in CommandType if ct not in COMMAND_PERMISSIONS)


def required_permission(command_type: Any) -> Permission:
    """Resolve the permission required to execute a command type."""
    parsed = parse_command_type(command_type)
    if parsed is None:
        raise UnknownCommandType(str(command_type))
    return COMMAND_PERMISSIONS[parsed]


_missing = unmapped_command_types()
if _missing:
    raise RuntimeError(
        "COMMAND_PERMISSIONS is not exhaustive; missing: "
        f"{sorted(ct.value for ct in _missing)}"
    )
del _missing
