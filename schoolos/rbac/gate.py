"""
School OS RBAC — Permission Gate
===================================
Capability check used to show or hide affordances.

This is NOT a security boundary. The Command Bus is.
The gate only avoids offering actions the user cannot complete.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from schoolos.rbac.resolver import Principal, has_permission, has_role


def _check_all_or_any(checks: Iterable[bool], require_all: bool) -> bool:
    return all(checks) if require_all else any(checks)


def can_access(
    principal: Principal,
    *,
    permission: Optional[Any] = None,
    permissions: Optional[Iterable[Any]] = None,
    role: Optional[Any] = None,
    roles: Optional[Iterable[Any]] = None,
    require_all: bool = False,
) -> bool:
    """
    Evaluate gate constraints for a principal.

    - Admin-class principals always pass.
    - Every supplied constraint must pass.
    - For permissions/roles lists, require_all switches between
      AND and OR (default OR). Empty lists are no constraint.
    - No constraint at all passes.
    """
    if principal.is_admin:
        return True

    if permission is not None and not has_permission(principal, permission):
        return False

    permission_list = list(permissions or ())
    if permission_list and not _check_all_or_any(
        (has_permission(principal, p) for p in permission_list), require_all
    ):
        return False

    if role is not None and not has_role(principal, role):
        return False

    role_list = list(roles or ())
    if role_list and not _check_all_or_any(
        (has_role(principal, r) for r in role_list), require_all
    ):
        return False

    return True
