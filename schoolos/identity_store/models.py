"""
School OS Identity Store - Relational Role State
================================================
DB-backed profiles, roles, runtime role permissions, and user role grants.

user_roles rows are written only by the Command Bus
(user.role.assign / user.role.remove).
role_permissions rows are written only by the Command Bus
(role.permission.add / role.permission.remove) or by bootstrap seeding.
"""

from __future__ import annotations

from django.db import models

from schoolos.rbac.permissions import ROLE_BUNDLES, AppRole

ROLE_CHOICES = [(role.value, ROLE_BUNDLES[role].display_name) for role in AppRole]


class Profile(models.Model):
    id = models.CharField(primary_key=True, max_length=255)
    email = models.CharField(max_length=255, default="", blank=True)
    full_name = models.CharField(max_length=255, default="", blank=True)
    avatar_url = models.CharField(max_length=1024, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "profiles"
        ordering = ["full_name", "id"]

    def __str__(self) -> str:
        return f"{self.id} ({self.full_name})"


class Role(models.Model):
    name = models.CharField(max_length=32, unique=True, choices=ROLE_CHOICES)
    display_name = models.CharField(max_length=100)
    description = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "roles"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class RolePermission(models.Model):
    role = models.ForeignKey(
        Role,
        on_delete=models.PROTECT,
        related_name="role_permissions",
        db_column="role_id",
    )
    permission = models.CharField(max_length=64)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "role_permissions"
        ordering = ["role_id", "permission", "id"]
        indexes = [
            models.Index(fields=["permission"], name="idx_role_perm_permission"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["role", "permission"],
                name="uq_role_permission",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.role_id}:{self.permission}"


class UserRole(models.Model):
    user_id = models.CharField(max_length=255)
    role = models.CharField(max_length=32, choices=ROLE_CHOICES)
    assigned_by = models.CharField(max_length=255, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "user_roles"
        ordering = ["user_id", "role", "id"]
        indexes = [
            models.Index(fields=["user_id"], name="idx_user_roles_user"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["user_id", "role"],
                name="uq_user_role",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user_id}:{self.role}"
