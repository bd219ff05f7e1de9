"""
School OS Command Layer — Command Base Contract
==================================================
Every mutation in School OS begins as a Command.

A caller builds a CommandRequest (intent).
The Command Bus materialises it into a Command (intent + identity):
id, creation timestamp, actor id, and a snapshot of the actor's roles.

Rules:
- Immutable once created (frozen dataclass)
- No business logic inside
- No DB interaction
- type is drawn from the closed CommandType enumeration
- actor_role_ids is a snapshot, never a live reference
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


# ══════════════════════════════════════════════════════════════
# COMMAND TYPES
# ══════════════════════════════════════════════════════════════

class CommandType(str, Enum):
    # ── Students ──────────────────────────────────────────────
    STUDENT_CREATE = "student.create"
    STUDENT_UPDATE = "student.update"
    STUDENT_DELETE = "student.delete"

    # ── Staff ─────────────────────────────────────────────────
    STAFF_CREATE = "staff.create"
    STAFF_UPDATE = "staff.update"
    STAFF_DELETE = "staff.delete"

    # ── Attendance ────────────────────────────────────────────
    ATTENDANCE_MARK = "attendance.mark"
    ATTENDANCE_EDIT = "attendance.edit"

    # ── Evidence ──────────────────────────────────────────────
    EVIDENCE_CREATE = "evidence.create"
    EVIDENCE_UPDATE = "evidence.update"

    # ── Policies ──────────────────────────────────────────────
    POLICY_UPDATE = "policy.update"

    # ── User management ───────────────────────────────────────
    USER_ROLE_ASSIGN = "user.role.assign"
    USER_ROLE_REMOVE = "user.role.remove"

    # ── Roles ─────────────────────────────────────────────────
    ROLE_PERMISSION_ADD = "role.permission.add"
    ROLE_PERMISSION_REMOVE = "role.permission.remove"

    def __str__(self) -> str:
        return self.value


def parse_command_type(value: Any) -> Optional[CommandType]:
    if isinstance(value, CommandType):
        return value
    try:
        return CommandType(value)
    except ValueError:
        return None


def derive_entity_type(command_type: str) -> str:
    """
    Entity type used when a command carries no explicit entity_ref.

    user.role.assign → user
    """
    return str(command_type).split(".")[0]


# ══════════════════════════════════════════════════════════════
# ENTITY REFERENCE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class EntityRef:
    type: str
    id: str

    def __post_init__(self):
        if not self.type or not isinstance(self.type, str):
            raise ValueError("entity_ref.type must be a non-empty string.")

        if self.id is None or str(self.id) == "":
            raise ValueError("entity_ref.id must be non-empty.")

        object.__setattr__(self, "id", str(self.id))


# ══════════════════════════════════════════════════════════════
# COMMAND REQUEST (caller-built)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CommandRequest:
    """
    Caller-built intent, before identity is assigned.

    Fields:
        type:       CommandType (or its string value).
        payload:    Handler-specific data (dict).
        entity_ref: Affected record, for audit linkage (optional).
        reason:     Free-text justification (optional, encouraged).
        metadata:   Opaque auxiliary data (optional).

    Example:
        CommandRequest(
            type=CommandType.POLICY_UPDATE,
            payload={"policy_key": "attendance.late_threshold_minutes",
                     "policy_value": 15},
            entity_ref=EntityRef(type="policy",
                                 id="attendance.late_threshold_minutes"),
            reason="Term 2 adjustment",
        )
    """

    type: Any
    payload: dict = field(default_factory=dict)
    entity_ref: Optional[EntityRef] = None
    reason: Optional[str] = None
    metadata: Optional[dict] = None

    def __post_init__(self):
        if not self.type or not isinstance(self.type, str):
            raise ValueError("type must be a non-empty string.")

        if not isinstance(self.payload, dict):
            raise TypeError("payload must be a dict.")

        if self.entity_ref is not None and not isinstance(self.entity_ref, EntityRef):
            raise TypeError("entity_ref must be an EntityRef.")

        if self.metadata is not None and not isinstance(self.metadata, dict):
            raise TypeError("metadata must be a dict.")


# ══════════════════════════════════════════════════════════════
# CANONICAL COMMAND (bus-materialised)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Command:
    id: uuid.UUID
    type: CommandType
    payload: dict
    created_at: datetime
    actor_id: str
    actor_role_ids: tuple
    entity_ref: Optional[EntityRef] = None
    reason: Optional[str] = None
    metadata: Optional[dict] = None

    def __post_init__(self):
        if not isinstance(self.id, uuid.UUID):
            raise ValueError(f"id must be UUID, got {type(self.id).__name__}")

        if not isinstance(self.type, CommandType):
            raise ValueError(f"type '{self.type}' is not a CommandType.")

        if not isinstance(self.created_at, datetime):
            raise ValueError("created_at must be a datetime.")

        if not self.actor_id or not isinstance(self.actor_id, str):
            raise ValueError("actor_id must be a non-empty string.")

        if not isinstance(self.actor_role_ids, tuple):
            raise ValueError("actor_role_ids must be a tuple.")

        if not isinstance(self.payload, dict):
            raise TypeError("payload must be a dict.")

    @classmethod
    def from_request(
        cls,
        request: CommandRequest,
        *,
        actor_id: str,
        actor_roles,
        now: Optional[datetime] = None,
    ) -> "Command":
        command_type = parse_command_type(request.type)
        if command_type is None:
            raise ValueError(f"type '{request.type}' is not a CommandType.")

        return cls(
            id=uuid.uuid4(),
            type=command_type,
            payload=dict(request.payload),
            created_at=now or datetime.now(timezone.utc),
            actor_id=actor_id,
            actor_role_ids=tuple(str(role) for role in actor_roles),
            entity_ref=request.entity_ref,
            reason=request.reason,
            metadata=dict(request.metadata) if request.metadata is not None else None,
        )

    @property
    def entity_type(self) -> str:
        if self.entity_ref is not None:
            return self.entity_ref.type
        return derive_entity_type(self.type.value)

    @property
    def entity_id(self) -> Optional[str]:
        if self.entity_ref is not None:
            return self.entity_ref.id
        return None
