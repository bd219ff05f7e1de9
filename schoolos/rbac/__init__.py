"""
School OS RBAC - Public API
===========================
"""

from schoolos.rbac.gate import can_access
from schoolos.rbac.permissions import (
    ADMIN_ROLES,
    ROLE_BUNDLES,
    VALID_PERMISSIONS,
    AppRole,
    Permission,
    RoleBundle,
    parse_permission,
    parse_role,
)
from schoolos.rbac.resolver import (
    Principal,
    effective_permissions,
    has_permission,
    has_role,
    is_admin_role,
)

__all__ = [
    "Permission",
    "AppRole",
    "RoleBundle",
    "ROLE_BUNDLES",
    "ADMIN_ROLES",
    "VALID_PERMISSIONS",
    "parse_permission",
    "parse_role",
    "Principal",
    "effective_permissions",
    "has_permission",
    "has_role",
    "is_admin_role",
    "can_access",
]
