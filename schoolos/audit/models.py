"""
School OS Audit — Audit Event Model
======================================
Append-only record of every successful command execution.

RULES (NON-NEGOTIABLE):
- Written only by the Command Bus
- No updates, no deletes, through instances or querysets
- created_at is assigned on the server at insert time
- actor_roles is a snapshot taken when the command ran
"""

import uuid

from django.db import models


class AuditEventQuerySet(models.QuerySet):
    """GUARD: bulk mutation of audit rows is forbidden."""

    def update(self, **kwargs):
        raise PermissionError(
            "Audit events are immutable. Bulk update is forbidden."
        )

    def delete(self):
        raise PermissionError(
            "Audit events are NEVER deleted. Bulk delete is forbidden."
        )


class AuditEvent(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    # ── Actor ─────────────────────────────────────────────────
    actor_user_id = models.CharField(max_length=255)

    actor_roles = models.JSONField(
        default=list,
        help_text="Snapshot of the actor's role names at execution time.",
    )

    # ── Command & entity ──────────────────────────────────────
    command_type = models.CharField(max_length=100)

    entity_type = models.CharField(
        max_length=100,
        help_text=(
            "From the command's entity_ref, else the first segment "
            "of command_type."
        ),
    )

    entity_id = models.CharField(max_length=255, null=True, blank=True)

    # ── State snapshots ───────────────────────────────────────
    before_json = models.JSONField(null=True, blank=True)

    after_json = models.JSONField(null=True, blank=True)

    # ── Context ───────────────────────────────────────────────
    reason = models.TextField(null=True, blank=True)

    metadata_json = models.JSONField(null=True, blank=True)

    device_id = models.CharField(max_length=255, null=True, blank=True)

    objects = AuditEventQuerySet.as_manager()

    class Meta:
        db_table = "audit_events"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["actor_user_id", "created_at"],
                name="idx_audit_actor_time",
            ),
            models.Index(
                fields=["command_type"],
                name="idx_audit_command_type",
            ),
            models.Index(
                fields=["entity_type", "entity_id"],
                name="idx_audit_entity",
            ),
        ]

    # ══════════════════════════════════════════════════════════
    # IMMUTABILITY GUARDS
    # ══════════════════════════════════════════════════════════

    def save(self, *args, **kwargs):
        """GUARD: INSERT only. No updates to persisted audit events."""
        if not self._state.adding:
            raise PermissionError(
                "Audit events are immutable. "
                "Cannot update a persisted audit event."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise PermissionError(
            "Audit events are NEVER deleted. This is a non-negotiable rule."
        )

    def __str__(self):
        return f"[{self.command_type}] {self.id} by {self.actor_user_id}"
