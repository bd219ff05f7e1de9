"""
School OS Command Layer — Domain Handlers
============================================
Handlers execute an authorized Command and describe what changed.

Contract:
    handler(command) -> HandlerResult(data, before_state, after_state)

A handler signals a domain failure by raising CommandHandlerError.
Any exception a handler raises becomes a failed CommandResult; the
bus writes no audit event for it.

Every CommandType is registered explicitly. Types with no bespoke
domain logic (students, staff, attendance, evidence) use
record_payload, which echoes the payload as the created/updated
record. There is no implicit fallthrough.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict

from django.db import IntegrityError

from schoolos.commands.base import Command, CommandType, parse_command_type
from schoolos.commands.errors import CommandHandlerError, HandlerRegistryError
from schoolos.commands.outcomes import HandlerResult
from schoolos.rbac.permissions import parse_permission, parse_role

logger = logging.getLogger("schoolos.commands")

CommandHandler = Callable[[Command], HandlerResult]


# ══════════════════════════════════════════════════════════════
# HANDLER REGISTRY
# ══════════════════════════════════════════════════════════════

class HandlerRegistry:
    """
    CommandType → handler map, built once at startup.

    Usage:
        registry = HandlerRegistry()
        registry.register(CommandType.POLICY_UPDATE, handle_policy_update)
        handler = registry.get(CommandType.POLICY_UPDATE)
    """

    def __init__(self) -> None:
        self._handlers: Dict[CommandType, CommandHandler] = {}

    def register(self, command_type: Any, handler: CommandHandler) -> None:
        parsed = parse_command_type(command_type)
        if parsed is None:
            raise HandlerRegistryError(
                f"Cannot register handler for unknown command type "
                f"'{command_type}'."
            )

        if not callable(handler):
            raise HandlerRegistryError(
                f"Handler for '{parsed.value}' must be callable, "
                f"got {type(handler).__name__}."
            )

        if parsed in self._handlers:
            raise HandlerRegistryError(
                f"Handler for '{parsed.value}' is already registered."
            )

        self._handlers[parsed] = handler
        logger.debug(f"Handler registered: {parsed.value}")

    def get(self, command_type: Any) -> CommandHandler | None:
        parsed = parse_command_type(command_type)
        if parsed is None:
            return None
        return self._handlers.get(parsed)

    def missing(self) -> tuple[CommandType, ...]:
        return tuple(ct for ct in CommandType if ct not in self._handlers)

    def __contains__(self, command_type: Any) -> bool:
        return self.get(command_type) is not None


# ══════════════════════════════════════════════════════════════
# PAYLOAD HELPERS
# ══════════════════════════════════════════════════════════════

def _require_string(payload: dict, key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise CommandHandlerError(f"{key} must be a non-empty string.")
    return value.strip()


def _require_role(payload: dict) -> str:
    role = parse_role(payload.get("role"))
    if role is None:
        raise CommandHandlerError(f"Unknown role: {payload.get('role')}")
    return role.value


def _require_permission(payload: dict) -> str:
    permission = parse_permission(payload.get("permission"))
    if permission is None:
        raise CommandHandlerError(
            f"Unknown permission: {payload.get('permission')}"
        )
    return permission.value


# ══════════════════════════════════════════════════════════════
# GENERIC RECORD HANDLER
# ══════════════════════════════════════════════════════════════

def record_payload(command: Command) -> HandlerResult:
    """Accept the command and echo its payload as the resulting record."""
    return HandlerResult(
        data=dict(command.payload),
        after_state=dict(command.payload),
    )


# ══════════════════════════════════════════════════════════════
# POLICY
# ══════════════════════════════════════════════════════════════

def handle_policy_update(command: Command) -> HandlerResult:
    from schoolos.policies.exceptions import PolicyError
    from schoolos.policies.store import advance_policy_version

    payload = command.payload
    if "policy_value" not in payload:
        raise CommandHandlerError("policy_value is required.")

    try:
        before, after = advance_policy_version(
            policy_key=payload.get("policy_key"),
            policy_value=payload["policy_value"],
            description=payload.get("description"),
            created_by=command.actor_id,
        )
    except PolicyError as exc:
        raise CommandHandlerError(str(exc)) from exc

    return HandlerResult(data=after, before_state=before, after_state=after)


# ══════════════════════════════════════════════════════════════
# USER ROLES
# ══════════════════════════════════════════════════════════════

def handle_user_role_assign(command: Command) -> HandlerResult:
    from schoolos.identity_store.service import insert_user_role, serialize_user_role

    user_id = _require_string(command.payload, "user_id")
    role = _require_role(command.payload)

    try:
        row = insert_user_role(
            user_id=user_id,
            role=role,
            assigned_by=command.actor_id,
        )
    except IntegrityError as exc:
        raise CommandHandlerError("User already has this role") from exc

    return HandlerResult(
        data=serialize_user_role(row),
        after_state={"user_id": user_id, "role": role},
    )


def handle_user_role_remove(command: Command) -> HandlerResult:
    from schoolos.identity_store.service import (
        delete_user_role,
        get_user_role,
        serialize_user_role,
    )

    user_id = _require_string(command.payload, "user_id")
    role = _require_role(command.payload)

    existing = get_user_role(user_id, role)
    before_state = (
        serialize_user_role(existing)
        if existing is not None
        else {"user_id": user_id, "role": role}
    )

    delete_user_role(user_id=user_id, role=role)

    return HandlerResult(before_state=before_state)


# ══════════════════════════════════════════════════════════════
# ROLE PERMISSIONS
# ══════════════════════════════════════════════════════════════

def _resolve_role_row(payload: dict):
    from schoolos.identity_store.service import get_role_by_name

    role_name = _require_role(payload)
    role = get_role_by_name(role_name)
    if role is None:
        raise CommandHandlerError(f"Role '{role_name}' is not provisioned.")
    return role


def handle_role_permission_add(command: Command) -> HandlerResult:
    from schoolos.identity_store.service import (
        insert_role_permission,
        serialize_role_permission,
    )

    role = _resolve_role_row(command.payload)
    permission = _require_permission(command.payload)

    try:
        row = insert_role_permission(role=role, permission=permission)
    except IntegrityError as exc:
        raise CommandHandlerError("Role already has this permission") from exc

    return HandlerResult(
        data=serialize_role_permission(row),
        after_state={"role": role.name, "permission": permission},
    )


def handle_role_permission_remove(command: Command) -> HandlerResult:
    from schoolos.identity_store.service import (
        delete_role_permission,
        get_role_permission,
        serialize_role_permission,
    )

    role = _resolve_role_row(command.payload)
    permission = _require_permission(command.payload)

    existing = get_role_permission(role, permission)
    before_state = (
        serialize_role_permission(existing)
        if existing is not None
        else {"role": role.name, "permission": permission}
    )

    delete_role_permission(role=role, permission=permission)

    return HandlerResult(before_state=before_state)


# ══════════════════════════════════════════════════════════════
# DEFAULT REGISTRY
# ══════════════════════════════════════════════════════════════

RECORD_COMMAND_TYPES = (
    CommandType.STUDENT_CREATE,
    CommandType.STUDENT_UPDATE,
    CommandType.STUDENT_DELETE,
    CommandType.STAFF_CREATE,
    CommandType.STAFF_UPDATE,
    CommandType.STAFF_DELETE,
    CommandType.ATTENDANCE_MARK,
    CommandType.ATTENDANCE_EDIT,
    CommandType.EVIDENCE_CREATE,
    CommandType.EVIDENCE_UPDATE,
)


def build_default_handlers() -> HandlerRegistry:
    registry = HandlerRegistry()
    registry.register(CommandType.POLICY_UPDATE, handle_policy_update)
    registry.register(CommandType.USER_ROLE_ASSIGN, handle_user_role_assign)
    registry.register(CommandType.USER_ROLE_REMOVE, handle_user_role_remove)
    registry.register(CommandType.ROLE_PERMISSION_ADD, handle_role_permission_add)
    registry.register(CommandType.ROLE_PERMISSION_REMOVE, handle_role_permission_remove)
    for command_type in RECORD_COMMAND_TYPES:
        registry.register(command_type, record_payload)
    return registry
