from __future__ import annotations

from datetime import timedelta

import pytest
from django.test import override_settings
from django.utils import timezone

from schoolos.audit.models import AuditEvent
from schoolos.audit.query import (
    list_command_types,
    list_entity_types,
    query_audit_events,
)
from schoolos.identity_store.models import Profile

pytestmark = pytest.mark.django_db(transaction=True)


def _event(**fields) -> AuditEvent:
    values = {
        "actor_user_id": "clerk-1",
        "actor_roles": ["clerk"],
        "command_type": "student.create",
        "entity_type": "student",
    }
    values.update(fields)
    return AuditEvent.objects.create(**values)


def test_newest_first(monkeypatch) -> None:
    base = timezone.now()
    ticks = iter(base + timedelta(seconds=n) for n in range(3))
    monkeypatch.setattr(timezone, "now", lambda: next(ticks))

    first = _event()
    second = _event()
    third = _event()
    monkeypatch.undo()

    ids = [event.id for event in query_audit_events()]

    assert ids == [third.id, second.id, first.id]


def test_default_limit_is_configured_cap() -> None:
    for _ in range(5):
        _event()

    with override_settings(SCHOOLOS_AUDIT_QUERY_LIMIT=3):
        assert len(query_audit_events()) == 3
        assert len(query_audit_events(limit=2)) == 2
        assert len(query_audit_events(limit=50)) == 3


def test_invalid_configured_limit() -> None:
    with override_settings(SCHOOLOS_AUDIT_QUERY_LIMIT=0):
        with pytest.raises(ValueError):
            query_audit_events()


def test_non_positive_limit_returns_nothing() -> None:
    _event()
    assert query_audit_events(limit=0) == tuple()


def test_filters() -> None:
    _event(actor_user_id="t1", command_type="attendance.mark", entity_type="attendance")
    _event(entity_id="s-1")
    _event(entity_id="s-2")

    assert len(query_audit_events(actor_user_id="t1")) == 1
    assert len(query_audit_events(command_type="student.create")) == 2
    assert len(query_audit_events(entity_type="attendance")) == 1
    assert [e.entity_id for e in query_audit_events(entity_id="s-2")] == ["s-2"]


def test_time_window() -> None:
    _event()
    now = timezone.now()

    assert len(query_audit_events(since=now - timedelta(minutes=5))) == 1
    assert len(query_audit_events(since=now + timedelta(minutes=5))) == 0
    assert len(query_audit_events(until=now - timedelta(minutes=5))) == 0


def test_search_matches_type_entity_reason_and_actor_name() -> None:
    Profile.objects.create(id="t1", full_name="Grace Hopper")
    _event(actor_user_id="t1", command_type="attendance.mark", entity_type="attendance")
    _event(command_type="policy.update", entity_type="policy", reason="Term 2 fees")
    _event(command_type="staff.create", entity_type="staff")

    assert len(query_audit_events(search="ATTENDANCE")) == 1
    assert len(query_audit_events(search="term 2")) == 1
    assert len(query_audit_events(search="hopper")) == 1
    assert len(query_audit_events(search="staff")) == 1
    assert len(query_audit_events(search="nothing-matches")) == 0
    assert len(query_audit_events(search="   ")) == 3


def test_distinct_type_lists() -> None:
    _event()
    _event()
    _event(command_type="policy.update", entity_type="policy")

    assert list_command_types() == ("policy.update", "student.create")
    assert list_entity_types() == ("policy", "student")
