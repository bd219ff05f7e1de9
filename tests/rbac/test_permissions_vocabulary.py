"""
School OS RBAC — Permission Vocabulary Tests
===============================================
Closed permission catalog, closed role set, static bundles.
"""

from __future__ import annotations

import pytest

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


class TestPermissionCatalog:
    def test_catalog_has_eighteen_tokens(self):
        assert len(Permission) == 18
        assert len(VALID_PERMISSIONS) == 18

    def test_tokens_are_resource_dot_action(self):
        for permission in Permission:
            resource, _, action = permission.value.partition(".")
            assert resource and action

    def test_str_is_persisted_token(self):
        assert str(Permission.STUDENTS_WRITE) == "students.write"
        assert Permission.STUDENTS_WRITE == "students.write"

    def test_parse_known_and_unknown(self):
        assert parse_permission("audit.read") is Permission.AUDIT_READ
        assert parse_permission(Permission.ROLES_ADMIN) is Permission.ROLES_ADMIN
        assert parse_permission("audit.delete") is None
        assert parse_permission(None) is None


class TestRoles:
    def test_closed_role_set(self):
        assert {role.value for role in AppRole} == {
            "teacher", "clerk", "principal", "admin",
        }

    def test_admin_class_roles(self):
        assert ADMIN_ROLES == {AppRole.PRINCIPAL, AppRole.ADMIN}

    def test_parse_role(self):
        assert parse_role("clerk") is AppRole.CLERK
        assert parse_role("janitor") is None
        assert parse_role("") is None

    def test_every_role_has_a_bundle(self):
        assert set(ROLE_BUNDLES) == set(AppRole)


class TestBundles:
    def test_teacher_bundle(self):
        assert ROLE_BUNDLES[AppRole.TEACHER].permissions == {
            Permission.STUDENTS_READ,
            Permission.ATTENDANCE_READ,
            Permission.ATTENDANCE_MARK,
            Permission.EVIDENCE_READ,
        }

    def test_clerk_bundle(self):
        assert ROLE_BUNDLES[AppRole.CLERK].permissions == {
            Permission.STUDENTS_READ,
            Permission.STUDENTS_WRITE,
            Permission.STAFF_READ,
            Permission.EVIDENCE_READ,
            Permission.EVIDENCE_WRITE,
            Permission.EXPORTS_GENERATE,
        }

    def test_admin_bundles_cover_catalog(self):
        for role in ADMIN_ROLES:
            assert ROLE_BUNDLES[role].permissions == frozenset(Permission)

    def test_bundle_rejects_raw_strings(self):
        with pytest.raises(ValueError):
            RoleBundle(display_name="X", permissions=frozenset({"students.read"}))

    def test_bundle_requires_frozenset(self):
        with pytest.raises(ValueError):
            RoleBundle(display_name="X", permissions={Permission.STUDENTS_READ})

    def test_bundle_is_frozen(self):
        with pytest.raises(AttributeError):
            ROLE_BUNDLES[AppRole.TEACHER].display_name = "Tutor"
