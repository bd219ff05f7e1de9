from __future__ import annotations

import pytest

from schoolos.audit.models import AuditEvent
from schoolos.commands.base import CommandRequest, CommandType
from schoolos.commands.bus import build_default_bus
from schoolos.commands.context import ExecutionContext
from schoolos.commands.handlers import RECORD_COMMAND_TYPES, build_default_handlers
from schoolos.identity_store.models import RolePermission, UserRole
from schoolos.identity_store.service import bootstrap_roles
from schoolos.policies.models import Policy
from schoolos.rbac.resolver import Principal

pytestmark = pytest.mark.django_db(transaction=True)


def _admin_context() -> ExecutionContext:
    return ExecutionContext.for_principal(
        Principal(user_id="admin-1", roles=("admin",)),
        device_id="device-test",
    )


def _execute(command_type, payload, **kwargs):
    return build_default_bus().execute(
        CommandRequest(type=command_type, payload=payload, **kwargs),
        _admin_context(),
    )


def test_default_handlers_cover_every_command_type() -> None:
    registry = build_default_handlers()
    assert registry.missing() == tuple()
    for command_type in RECORD_COMMAND_TYPES:
        assert command_type.value.split(".")[0] in {
            "student", "staff", "attendance", "evidence",
        }


# ══════════════════════════════════════════════════════════════
# POLICY
# ══════════════════════════════════════════════════════════════

class TestPolicyUpdateHandler:
    def test_first_update_creates_version_one(self) -> None:
        result = _execute(
            CommandType.POLICY_UPDATE,
            {"policy_key": "fees.late_fee", "policy_value": {"amount": 5}},
        )

        assert result.success
        assert result.data["version"] == 1
        assert result.data["is_active"] is True
        assert result.data["created_by"] == "admin-1"

        event = AuditEvent.objects.get(id=result.audit_event_id)
        assert event.before_json is None
        assert event.after_json["policy_value"] == {"amount": 5}

    def test_before_state_is_previous_version(self) -> None:
        _execute("policy.update", {"policy_key": "k", "policy_value": 1})
        result = _execute("policy.update", {"policy_key": "k", "policy_value": 2})

        event = AuditEvent.objects.get(id=result.audit_event_id)
        assert event.before_json["version"] == 1
        assert event.before_json["policy_value"] == 1
        assert event.after_json["version"] == 2

    def test_missing_value_fails_without_audit(self) -> None:
        result = _execute("policy.update", {"policy_key": "k"})

        assert result.to_dict() == {
            "success": False,
            "error": "policy_value is required.",
        }
        assert Policy.objects.count() == 0
        assert AuditEvent.objects.count() == 0

    def test_blank_key_fails(self) -> None:
        result = _execute("policy.update", {"policy_key": " ", "policy_value": 1})

        assert not result.success
        assert "policy_key" in result.error

    def test_null_value_rejected(self) -> None:
        result = _execute("policy.update", {"policy_key": "k", "policy_value": None})

        assert result.error == "policy_value is required."
        assert Policy.objects.count() == 0


# ══════════════════════════════════════════════════════════════
# USER ROLES
# ══════════════════════════════════════════════════════════════

class TestUserRoleHandlers:
    def test_assign(self) -> None:
        result = _execute("user.role.assign", {"user_id": "t1", "role": "teacher"})

        assert result.success
        assert result.data["user_id"] == "t1"
        assert result.data["assigned_by"] == "admin-1"
        assert UserRole.objects.filter(user_id="t1", role="teacher").count() == 1

        event = AuditEvent.objects.get(id=result.audit_event_id)
        assert event.after_json == {"user_id": "t1", "role": "teacher"}
        assert event.entity_type == "user"

    def test_duplicate_assign_reports_existing_role(self) -> None:
        _execute("user.role.assign", {"user_id": "t1", "role": "teacher"})
        result = _execute("user.role.assign", {"user_id": "t1", "role": "teacher"})

        assert result.to_dict() == {
            "success": False,
            "error": "User already has this role",
        }
        assert UserRole.objects.filter(user_id="t1").count() == 1
        assert AuditEvent.objects.count() == 1

    def test_unknown_role_rejected(self) -> None:
        result = _execute("user.role.assign", {"user_id": "t1", "role": "janitor"})

        assert result.error == "Unknown role: janitor"
        assert UserRole.objects.count() == 0

    def test_missing_user_rejected(self) -> None:
        result = _execute("user.role.assign", {"role": "teacher"})

        assert result.error == "user_id must be a non-empty string."

    def test_remove_existing(self) -> None:
        _execute("user.role.assign", {"user_id": "t1", "role": "teacher"})
        result = _execute("user.role.remove", {"user_id": "t1", "role": "teacher"})

        assert result.success
        assert UserRole.objects.count() == 0
        event = AuditEvent.objects.get(id=result.audit_event_id)
        assert event.before_json["user_id"] == "t1"
        assert event.before_json["role"] == "teacher"
        assert event.after_json is None

    def test_remove_absent_is_success(self) -> None:
        result = _execute("user.role.remove", {"user_id": "t1", "role": "clerk"})

        assert result.success
        assert result.error is None
        assert UserRole.objects.count() == 0
        event = AuditEvent.objects.get(id=result.audit_event_id)
        assert event.before_json == {"user_id": "t1", "role": "clerk"}


# ══════════════════════════════════════════════════════════════
# ROLE PERMISSIONS
# ══════════════════════════════════════════════════════════════

class TestRolePermissionHandlers:
    def test_add_and_duplicate(self) -> None:
        bootstrap_roles()

        first = _execute(
            "role.permission.add", {"role": "teacher", "permission": "policies.read"}
        )
        second = _execute(
            "role.permission.add", {"role": "teacher", "permission": "policies.read"}
        )

        assert first.success
        assert first.data["role"] == "teacher"
        assert second.error == "Role already has this permission"
        assert RolePermission.objects.filter(
            role__name="teacher", permission="policies.read"
        ).count() == 1

    def test_unknown_permission_rejected(self) -> None:
        bootstrap_roles()

        result = _execute(
            "role.permission.add", {"role": "teacher", "permission": "students.delete"}
        )

        assert result.error == "Unknown permission: students.delete"

    def test_role_must_be_provisioned(self) -> None:
        result = _execute(
            "role.permission.add", {"role": "teacher", "permission": "policies.read"}
        )

        assert result.error == "Role 'teacher' is not provisioned."

    def test_remove(self) -> None:
        bootstrap_roles()

        result = _execute(
            "role.permission.remove",
            {"role": "teacher", "permission": "attendance.mark"},
        )

        assert result.success
        assert not RolePermission.objects.filter(
            role__name="teacher", permission="attendance.mark"
        ).exists()
        event = AuditEvent.objects.get(id=result.audit_event_id)
        assert event.before_json["permission"] == "attendance.mark"

    def test_remove_absent_is_success(self) -> None:
        bootstrap_roles()

        result = _execute(
            "role.permission.remove",
            {"role": "teacher", "permission": "roles.admin"},
        )

        assert result.success


# ══════════════════════════════════════════════════════════════
# RECORD TYPES
# ══════════════════════════════════════════════════════════════

@pytest.mark.parametrize("command_type", RECORD_COMMAND_TYPES)
def test_record_types_echo_payload_and_audit(command_type) -> None:
    result = _execute(command_type, {"ref": "x-1"})

    assert result.success
    assert result.data == {"ref": "x-1"}
    event = AuditEvent.objects.get(id=result.audit_event_id)
    assert event.command_type == command_type.value
    assert event.device_id == "device-test"
