"""
School OS RBAC — Role/Permission Resolver
============================================
Boolean predicate engine over roles and permissions.

Rules:
- Admin-class roles pass every permission check (explicit short-circuit,
  never a materialised "all permissions" set)
- Non-admin checks are set membership against the union of bundles
- Unknown roles/permissions contribute nothing and match nothing
- Nothing here raises for bad input
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from schoolos.rbac.permissions import (
    ADMIN_ROLES,
    ROLE_BUNDLES,
    AppRole,
    Permission,
    parse_permission,
    parse_role,
)


def _known_roles(roles: Iterable[Any]) -> tuple[AppRole, ...]:
    parsed = (parse_role(role) for role in roles or ())
    return tuple(role for role in parsed if role is not None)


def effective_permissions(roles: Iterable[Any]) -> frozenset:
    """Union of the bundle permissions of every recognised role."""
    permissions: set[Permission] = set()
    for role in _known_roles(roles):
        permissions.update(ROLE_BUNDLES[role].permissions)
    return frozenset(permissions)


def is_admin_role(role: Any) -> bool:
    return parse_role(role) in ADMIN_ROLES


# ══════════════════════════════════════════════════════════════
# PRINCIPAL
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Principal:
    """
    Authenticated user identity as seen by the authorization core.

    Fields:
        user_id:     Identity provider user id.
        roles:       Assigned roles (tuple, unknown names dropped).
        permissions: Effective permissions. Derived from the static
                     bundles when not supplied; supplied when grants
                     were loaded from the role_permissions table.
    """

    user_id: str
    roles: tuple = field(default_factory=tuple)
    permissions: Optional[frozenset] = None

    def __post_init__(self):
        if not self.user_id or not isinstance(self.user_id, str):
            raise ValueError("user_id must be a non-empty string.")

        object.__setattr__(self, "roles", _known_roles(self.roles))

        if self.permissions is None:
            resolved = effective_permissions(self.roles)
        else:
            parsed = (parse_permission(p) for p in self.permissions)
            resolved = frozenset(p for p in parsed if p is not None)
        object.__setattr__(self, "permissions", resolved)

    @property
    def is_admin(self) -> bool:
        return any(is_admin_role(role) for role in self.roles)


def has_permission(principal: Principal, permission: Any) -> bool:
    if principal.is_admin:
        return True
    parsed = parse_permission(permission)
    if parsed is None:
        return False
    return parsed in principal.permissions


def has_role(principal: Principal, role: Any) -> bool:
    parsed = parse_role(role)
    if parsed is None:
        return False
    return parsed in principal.roles
