"""
School OS Audit — Audit Writers
==================================
The write side of the audit trail, injected into the Command Bus.

build_audit_row() turns a completed command into the persisted row shape:
    {actor_user_id, actor_roles, command_type, entity_type, entity_id,
     before_json, after_json, reason, metadata_json, device_id}
id and created_at are assigned by storage.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from django.db import transaction

from schoolos.commands.base import Command
from schoolos.commands.outcomes import HandlerResult


class AuditWriteError(Exception):
    """The audit writer completed without producing an event id."""
    pass


def to_json_value(value: Any) -> Any:
    """Normalise a snapshot to plain JSON (UUIDs, datetimes become strings)."""
    if value is None:
        return None
    return json.loads(json.dumps(value, default=str))


def build_audit_row(
    command: Command,
    handler_result: HandlerResult,
    device_id: Optional[str] = None,
) -> dict[str, Any]:
    return {
        "actor_user_id": command.actor_id,
        "actor_roles": list(command.actor_role_ids),
        "command_type": command.type.value,
        "entity_type": command.entity_type,
        "entity_id": command.entity_id,
        "before_json": to_json_value(handler_result.before_state),
        "after_json": to_json_value(handler_result.after_state),
        "reason": command.reason or None,
        "metadata_json": to_json_value(command.metadata),
        "device_id": device_id,
    }


# ══════════════════════════════════════════════════════════════
# WRITER PROTOCOL
# ══════════════════════════════════════════════════════════════

class AuditWriter(Protocol):
    def write(self, row: dict[str, Any]) -> str:
        """Persist one audit row, return its id. Raise on failure."""
        ...


class DbAuditWriter:
    """Writes to the audit_events table through the Django ORM."""

    def write(self, row: dict[str, Any]) -> str:
        from schoolos.audit.models import AuditEvent

        # Savepoint: the caller's transaction stays usable if this insert fails.
        with transaction.atomic():
            event = AuditEvent.objects.create(**row)
        return str(event.id)


class InMemoryAuditWriter:
    """
    Append-only in-memory writer used for bootstrap/tests.
    """

    def __init__(self) -> None:
        self._rows: list[dict[str, Any]] = []

    def write(self, row: dict[str, Any]) -> str:
        stored = dict(row)
        stored["id"] = str(uuid.uuid4())
        stored["created_at"] = datetime.now(timezone.utc)
        self._rows.append(stored)
        return stored["id"]

    @property
    def rows(self) -> list[dict[str, Any]]:
        """Read-only copy of all rows, oldest first."""
        return [dict(row) for row in self._rows]
