"""
School OS Audit — Audit Queries
==================================
Read-only query surface over accumulated audit events.

Results are newest first and bounded by SCHOOLOS_AUDIT_QUERY_LIMIT.
No update or delete operations.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

from django.db.models import Q

from schoolos.audit.models import AuditEvent
from schoolos.conf import get_audit_query_limit


def serialize_audit_event(event: AuditEvent) -> dict[str, Any]:
    return {
        "id": str(event.id),
        "created_at": event.created_at.isoformat() if event.created_at else None,
        "actor_user_id": event.actor_user_id,
        "actor_roles": list(event.actor_roles or []),
        "command_type": event.command_type,
        "entity_type": event.entity_type,
        "entity_id": event.entity_id,
        "before_json": event.before_json,
        "after_json": event.after_json,
        "reason": event.reason,
        "metadata_json": event.metadata_json,
        "device_id": event.device_id,
    }


def _actor_ids_matching_name(search: str) -> list[str]:
    from schoolos.identity_store.models import Profile

    return list(
        Profile.objects.filter(full_name__icontains=search).values_list("id", flat=True)
    )


def query_audit_events(
    *,
    actor_user_id: Optional[str] = None,
    command_type: Optional[str] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    search: Optional[str] = None,
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> tuple[AuditEvent, ...]:
    """
    Filter audit events.

    search matches, case-insensitively, the command type, entity type,
    reason, or the actor's profile full name.

    limit defaults to the configured cap and can only lower it.
    """
    cap = get_audit_query_limit()
    if limit is None or limit > cap:
        limit = cap
    if limit < 1:
        return tuple()

    query = AuditEvent.objects.all()
    if actor_user_id:
        query = query.filter(actor_user_id=actor_user_id)
    if command_type:
        query = query.filter(command_type=str(command_type))
    if entity_type:
        query = query.filter(entity_type=entity_type)
    if entity_id:
        query = query.filter(entity_id=str(entity_id))
    if since is not None:
        query = query.filter(created_at__gte=since)
    if until is not None:
        query = query.filter(created_at__lte=until)

    term = (search or "").strip()
    if term:
        matches = (
            Q(command_type__icontains=term)
            | Q(entity_type__icontains=term)
            | Q(reason__icontains=term)
        )
        actor_ids = _actor_ids_matching_name(term)
        if actor_ids:
            matches |= Q(actor_user_id__in=actor_ids)
        query = query.filter(matches)

    return tuple(query.order_by("-created_at", "-id")[:limit])


def get_audit_event(event_id: str) -> Optional[AuditEvent]:
    try:
        canonical_id = uuid.UUID(str(event_id))
    except ValueError:
        return None
    return AuditEvent.objects.filter(id=canonical_id).first()


def list_command_types() -> tuple[str, ...]:
    return tuple(
        AuditEvent.objects.order_by("command_type")
        .values_list("command_type", flat=True)
        .distinct()
    )


def list_entity_types() -> tuple[str, ...]:
    return tuple(
        AuditEvent.objects.order_by("entity_type")
        .values_list("entity_type", flat=True)
        .distinct()
    )
