"""
School OS — End-to-End Command Scenarios
==========================================
Full pipeline against the database: principal → context → bus →
handler → audit_events.

Scenarios:
1. Admin bypass across every command type
2. Denial leaves no trace
3. Exactly one audit event per successful command
4. Audit events cannot be changed after the fact
5. Policy versions 1, 2, 3 with one active row
6. Removing an absent role succeeds
7. Assigning a held role reports "already has this role"
8. Empty-role principal denied student.create
9. attendance.late_threshold_minutes 15 → 20
10. Clerk creates a student, audit entity derived from type
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from schoolos.audit.models import AuditEvent
from schoolos.audit.query import get_audit_event, query_audit_events
from schoolos.audit.writer import DbAuditWriter
from schoolos.commands import CommandRequest, CommandType, ExecutionContext
from schoolos.commands import bus as bus_module
from schoolos.commands.bus import CommandBus, build_default_bus, execute_command, get_default_bus
from schoolos.commands.handlers import HandlerRegistry, build_default_handlers
from schoolos.identity_store.models import UserRole
from schoolos.identity_store.service import bootstrap_roles
from schoolos.policies.models import Policy
from schoolos.rbac.provider import DbPermissionProvider, load_principal
from schoolos.rbac.resolver import Principal

pytestmark = pytest.mark.django_db(transaction=True)

LATE_KEY = "attendance.late_threshold_minutes"


def _context(*roles, user_id="actor-1") -> ExecutionContext:
    return ExecutionContext.for_principal(
        Principal(user_id=user_id, roles=roles), device_id="office-pc"
    )


@pytest.fixture
def bus():
    return build_default_bus()


def test_admin_bypass_executes_every_command_type(bus) -> None:
    bootstrap_roles()
    payloads = {
        CommandType.POLICY_UPDATE: {"policy_key": "k", "policy_value": 1},
        CommandType.USER_ROLE_ASSIGN: {"user_id": "u9", "role": "teacher"},
        CommandType.USER_ROLE_REMOVE: {"user_id": "u9", "role": "teacher"},
        CommandType.ROLE_PERMISSION_ADD: {"role": "teacher", "permission": "audit.read"},
        CommandType.ROLE_PERMISSION_REMOVE: {"role": "teacher", "permission": "audit.read"},
    }

    for role in ("admin", "principal"):
        context = ExecutionContext.for_principal(
            Principal(user_id=f"{role}-1", roles=(role,), permissions=frozenset())
        )
        for command_type in CommandType:
            result = bus.execute(
                CommandRequest(type=command_type, payload=payloads.get(command_type, {})),
                context,
            )
            assert result.success, (role, command_type, result.error)


def test_denial_has_no_side_effects(bus) -> None:
    calls = []

    def spy(command):
        calls.append(command)

    defaults = build_default_handlers()
    handlers = HandlerRegistry()
    for command_type in CommandType:
        if command_type is CommandType.USER_ROLE_ASSIGN:
            handlers.register(command_type, spy)
        else:
            handlers.register(command_type, defaults.get(command_type))
    spied_bus = CommandBus(handlers=handlers, audit_writer=DbAuditWriter())

    result = spied_bus.execute(
        CommandRequest(type="user.role.assign", payload={"user_id": "u1", "role": "admin"}),
        _context("clerk"),
    )

    assert result.to_dict() == {
        "success": False,
        "error": "Permission denied: requires users.admin",
    }
    assert calls == []
    assert UserRole.objects.count() == 0
    assert AuditEvent.objects.count() == 0


def test_one_audit_event_per_successful_command(bus) -> None:
    started = datetime.now(timezone.utc)

    results = [
        bus.execute(CommandRequest(type="attendance.mark", payload={"n": n}), _context("teacher"))
        for n in range(3)
    ]

    assert all(result.success for result in results)
    assert len({result.audit_event_id for result in results}) == 3
    assert AuditEvent.objects.count() == 3
    for result in results:
        event = get_audit_event(result.audit_event_id)
        assert event.command_type == "attendance.mark"
        assert event.actor_user_id == "actor-1"
        assert event.actor_roles == ["teacher"]
        assert event.created_at >= started


def test_audit_events_are_immutable(bus) -> None:
    result = bus.execute(
        CommandRequest(type="staff.create", payload={"name": "Lin"}, reason="hire"),
        _context("admin"),
    )
    event = get_audit_event(result.audit_event_id)
    snapshot = (event.after_json, event.reason, event.created_at)

    event.reason = "edited"
    with pytest.raises(PermissionError):
        event.save()
    with pytest.raises(PermissionError):
        event.delete()
    with pytest.raises(PermissionError):
        AuditEvent.objects.filter(id=event.id).update(reason="edited")

    reread = get_audit_event(result.audit_event_id)
    assert (reread.after_json, reread.reason, reread.created_at) == snapshot


def test_policy_versions_are_monotonic(bus) -> None:
    context = _context("principal")
    for expected in (1, 2, 3):
        result = bus.execute(
            CommandRequest(
                type="policy.update",
                payload={"policy_key": "fees.due_day", "policy_value": expected * 5},
            ),
            context,
        )
        assert result.data["version"] == expected
        assert Policy.objects.filter(policy_key="fees.due_day", is_active=True).count() == 1


def test_removing_absent_role_succeeds(bus) -> None:
    result = bus.execute(
        CommandRequest(type="user.role.remove", payload={"user_id": "u1", "role": "teacher"}),
        _context("admin"),
    )

    assert result.success
    assert result.error is None
    assert UserRole.objects.count() == 0


def test_assigning_held_role_reports_duplicate(bus) -> None:
    request = CommandRequest(
        type="user.role.assign", payload={"user_id": "u1", "role": "teacher"}
    )
    assert bus.execute(request, _context("admin")).success

    result = bus.execute(request, _context("admin"))

    assert not result.success
    assert result.error == "User already has this role"


def test_principal_without_roles_cannot_create_student(bus) -> None:
    result = bus.execute(
        CommandRequest(type="student.create", payload={"name": "Ada"}),
        _context(),
    )

    assert result.to_dict() == {
        "success": False,
        "error": "Permission denied: requires students.write",
    }
    assert AuditEvent.objects.count() == 0


def test_late_threshold_policy_update(bus) -> None:
    context = _context("admin")

    first = bus.execute(
        CommandRequest(
            type="policy.update",
            payload={"policy_key": LATE_KEY, "policy_value": 15},
        ),
        context,
    )
    assert first.success
    v1 = Policy.objects.get(policy_key=LATE_KEY, version=1)
    assert v1.is_active is True
    assert v1.policy_value == 15

    second = bus.execute(
        CommandRequest(
            type="policy.update",
            payload={"policy_key": LATE_KEY, "policy_value": 20},
        ),
        context,
    )
    assert second.success

    v1.refresh_from_db()
    v2 = Policy.objects.get(policy_key=LATE_KEY, version=2)
    assert v1.is_active is False
    assert v2.is_active is True
    assert v2.policy_value == 20


def test_clerk_creates_student(bus) -> None:
    payload = {"first_name": "Ada", "last_name": "Lovelace", "grade": 4}

    result = bus.execute(
        CommandRequest(type="student.create", payload=payload),
        _context("clerk", user_id="clerk-7"),
    )

    assert result.success
    assert result.data == payload
    events = query_audit_events(actor_user_id="clerk-7")
    assert len(events) == 1
    assert events[0].command_type == "student.create"
    assert events[0].entity_type == "student"
    assert events[0].device_id == "office-pc"
    assert str(events[0].id) == result.audit_event_id


def test_principal_loaded_from_database_grants(bus) -> None:
    bootstrap_roles()
    admin = _context("admin")
    bus.execute(
        CommandRequest(type="user.role.assign", payload={"user_id": "t1", "role": "teacher"}),
        admin,
    )

    teacher = ExecutionContext.for_principal(load_principal("t1", DbPermissionProvider()))
    denied = bus.execute(CommandRequest(type="evidence.create"), teacher)
    assert denied.error == "Permission denied: requires evidence.write"

    bus.execute(
        CommandRequest(
            type="role.permission.add",
            payload={"role": "teacher", "permission": "evidence.write"},
        ),
        admin,
    )

    teacher = ExecutionContext.for_principal(load_principal("t1", DbPermissionProvider()))
    assert bus.execute(CommandRequest(type="evidence.create"), teacher).success


def test_default_bus_is_shared(monkeypatch) -> None:
    monkeypatch.setattr(bus_module, "_DEFAULT_BUS", None)

    assert get_default_bus() is get_default_bus()


def test_audit_failures_accumulate_across_execute_command(monkeypatch) -> None:
    monkeypatch.setattr(bus_module, "_DEFAULT_BUS", None)

    def refuse(self, row):
        raise ConnectionError("audit store unavailable")

    monkeypatch.setattr(DbAuditWriter, "write", refuse)

    results = [
        execute_command(
            CommandRequest(type="student.create", payload={"n": n}),
            _context("admin"),
        )
        for n in range(3)
    ]

    assert all(result.success for result in results)
    assert all(result.audit_event_id is None for result in results)
    assert get_default_bus().failure_reporter.failures == 3
    assert AuditEvent.objects.count() == 0
