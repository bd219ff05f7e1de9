"""
School OS RBAC - Permission Providers
=====================================
Resolve a user's roles and effective permissions into a Principal.

StaticPermissionProvider: bundles from ROLE_BUNDLES, roles in memory.
DbPermissionProvider:     roles from user_roles, permissions from
                          roles + role_permissions (runtime customisable).
"""

from __future__ import annotations

from typing import Iterable, Mapping, Protocol

from schoolos.rbac.permissions import VALID_PERMISSIONS
from schoolos.rbac.resolver import Principal, effective_permissions


class PermissionProvider(Protocol):
    def get_roles_for_user(self, user_id: str) -> tuple[str, ...]:
        ...

    def get_permissions_for_roles(self, roles: Iterable[str]) -> frozenset:
        ...


class StaticPermissionProvider:
    """
    Deterministic in-memory provider used for bootstrap/tests.
    """

    def __init__(self, user_roles: Mapping[str, Iterable[str]] | None = None):
        self._user_roles: dict[str, tuple[str, ...]] = {
            user_id: tuple(sorted({str(role) for role in roles}))
            for user_id, roles in (user_roles or {}).items()
        }

    def get_roles_for_user(self, user_id: str) -> tuple[str, ...]:
        return self._user_roles.get(user_id, tuple())

    def get_permissions_for_roles(self, roles: Iterable[str]) -> frozenset:
        return effective_permissions(roles)


class DbPermissionProvider:
    def get_roles_for_user(self, user_id: str) -> tuple[str, ...]:
        if not isinstance(user_id, str) or not user_id.strip():
            return tuple()

        from schoolos.identity_store.service import get_user_roles

        return get_user_roles(user_id.strip())

    def get_permissions_for_roles(self, roles: Iterable[str]) -> frozenset:
        role_names = tuple(sorted({str(role) for role in roles}))
        if not role_names:
            return frozenset()

        from schoolos.identity_store.service import get_permissions_for_role_names

        return frozenset(
            permission
            for permission in get_permissions_for_role_names(role_names)
            if permission in VALID_PERMISSIONS
        )


def load_principal(user_id: str, provider: PermissionProvider) -> Principal:
    """Build a Principal from the provider's roles and permission grants."""
    if isinstance(user_id, str):
        user_id = user_id.strip()
    roles = provider.get_roles_for_user(user_id)
    return Principal(
        user_id=user_id,
        roles=roles,
        permissions=provider.get_permissions_for_roles(roles),
    )
