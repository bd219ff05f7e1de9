"""
School OS Identity Store - Service Layer
========================================
DB-backed role/grant access used by command handlers, the permission
provider, and bootstrap seeding.

Write functions here are called from Command Bus handlers only.
Uniqueness violations surface as IntegrityError for the caller to map.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any

from django.db import transaction

from schoolos.identity_store.models import Role, RolePermission, UserRole
from schoolos.rbac.permissions import ROLE_BUNDLES, AppRole, VALID_PERMISSIONS

logger = logging.getLogger("schoolos.identity")


# ══════════════════════════════════════════════════════════════
# SERIALIZATION
# ══════════════════════════════════════════════════════════════

def serialize_user_role(row: UserRole) -> dict[str, Any]:
    return {
        "id": row.id,
        "user_id": row.user_id,
        "role": row.role,
        "assigned_by": row.assigned_by,
        "created_at": row.created_at.isoformat() if row.created_at else None,
    }


def serialize_role_permission(row: RolePermission) -> dict[str, Any]:
    return {
        "id": row.id,
        "role": row.role.name,
        "permission": row.permission,
        "created_at": row.created_at.isoformat() if row.created_at else None,
    }


# ══════════════════════════════════════════════════════════════
# BOOTSTRAP
# ══════════════════════════════════════════════════════════════

def bootstrap_roles() -> tuple[Role, ...]:
    """
    Seed the four roles and their bundle permissions.

    Idempotent: existing rows are kept, missing ones created.
    Permissions removed at runtime are re-added only for roles
    created in this call.
    """
    seeded: list[Role] = []
    with transaction.atomic():
        for app_role in AppRole:
            bundle = ROLE_BUNDLES[app_role]
            role, created = Role.objects.get_or_create(
                name=app_role.value,
                defaults={"display_name": bundle.display_name},
            )
            if created:
                RolePermission.objects.bulk_create(
                    [
                        RolePermission(role=role, permission=permission.value)
                        for permission in sorted(bundle.permissions, key=lambda p: p.value)
                    ]
                )
                logger.info(
                    f"Seeded role '{role.name}' with "
                    f"{len(bundle.permissions)} permission(s)"
                )
            seeded.append(role)
    return tuple(seeded)


# ══════════════════════════════════════════════════════════════
# READS
# ══════════════════════════════════════════════════════════════

def get_user_roles(user_id: str) -> tuple[str, ...]:
    return tuple(
        UserRole.objects.filter(user_id=user_id)
        .order_by("role")
        .values_list("role", flat=True)
    )


def get_user_role(user_id: str, role: str) -> UserRole | None:
    return UserRole.objects.filter(user_id=user_id, role=role).first()


def get_permissions_for_role_names(role_names: tuple[str, ...]) -> tuple[str, ...]:
    values = (
        RolePermission.objects.filter(role__name__in=role_names)
        .order_by("permission")
        .values_list("permission", flat=True)
    )
    return tuple(sorted({value for value in values if value in VALID_PERMISSIONS}))


def list_roles_with_permissions() -> tuple[dict[str, Any], ...]:
    permissions_by_role: dict[int, list[str]] = defaultdict(list)
    for row in RolePermission.objects.order_by("role_id", "permission"):
        permissions_by_role[row.role_id].append(row.permission)

    return tuple(
        {
            "id": role.id,
            "name": role.name,
            "display_name": role.display_name,
            "description": role.description,
            "permissions": tuple(permissions_by_role.get(role.id, ())),
        }
        for role in Role.objects.order_by("name")
    )


# ══════════════════════════════════════════════════════════════
# WRITES (Command Bus handlers only)
# ══════════════════════════════════════════════════════════════

def insert_user_role(*, user_id: str, role: str, assigned_by: str) -> UserRole:
    # Savepoint so a uniqueness violation leaves the outer transaction usable.
    with transaction.atomic():
        return UserRole.objects.create(
            user_id=user_id,
            role=role,
            assigned_by=assigned_by,
        )


def delete_user_role(*, user_id: str, role: str) -> int:
    deleted, _ = UserRole.objects.filter(user_id=user_id, role=role).delete()
    return deleted


def get_role_by_name(name: str) -> Role | None:
    return Role.objects.filter(name=name).first()


def get_role_permission(role: Role, permission: str) -> RolePermission | None:
    return RolePermission.objects.filter(role=role, permission=permission).first()


def insert_role_permission(*, role: Role, permission: str) -> RolePermission:
    with transaction.atomic():
        return RolePermission.objects.create(role=role, permission=permission)


def delete_role_permission(*, role: Role, permission: str) -> int:
    deleted, _ = RolePermission.objects.filter(role=role, permission=permission).delete()
    return deleted
