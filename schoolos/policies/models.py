"""
School OS Policy Store — Versioned Policy Model
==================================================
Named configuration values with full version history.

RULES (NON-NEGOTIABLE):
- policy_value of a persisted row is never changed
- An update deactivates the active row and inserts version + 1
- Exactly one active row per policy_key (partial unique constraint)
- Rows are never deleted
"""

import uuid

from django.db import models


class PolicyQuerySet(models.QuerySet):
    """GUARD: bulk writes may only deactivate rows."""

    def update(self, **kwargs):
        if kwargs != {"is_active": False}:
            raise PermissionError(
                "Policy versions are immutable. Bulk update may only "
                "set is_active=False."
            )
        return super().update(**kwargs)

    def delete(self):
        raise PermissionError(
            "Policy versions are NEVER deleted. Bulk delete is forbidden."
        )


class Policy(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    policy_key = models.CharField(
        max_length=255,
        help_text="Policy identifier, unique across the active set.",
    )

    policy_value = models.JSONField(
        help_text="Arbitrary structured value for this version.",
    )

    description = models.TextField(null=True, blank=True)

    version = models.PositiveIntegerField(
        help_text="Monotonically increasing per policy_key, starting at 1.",
    )

    is_active = models.BooleanField(default=True)

    created_by = models.CharField(max_length=255)

    created_at = models.DateTimeField(auto_now_add=True)

    objects = PolicyQuerySet.as_manager()

    class Meta:
        db_table = "policies"
        ordering = ["policy_key", "-version"]
        indexes = [
            models.Index(
                fields=["policy_key", "is_active"],
                name="idx_policy_key_active",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["policy_key", "version"],
                name="uq_policy_key_version",
            ),
            models.UniqueConstraint(
                fields=["policy_key"],
                condition=models.Q(is_active=True),
                name="uq_policy_one_active",
            ),
        ]

    # ══════════════════════════════════════════════════════════
    # IMMUTABILITY GUARDS
    # ══════════════════════════════════════════════════════════

    def save(self, *args, **kwargs):
        """
        GUARD: INSERT, or deactivation only.
        A persisted row may only be saved with update_fields=["is_active"]
        while flipping it to inactive.
        """
        if not self._state.adding:
            update_fields = kwargs.get("update_fields")
            if (
                update_fields is None
                or set(update_fields) != {"is_active"}
                or self.is_active
            ):
                raise PermissionError(
                    "Policy versions are immutable. A persisted policy row "
                    "can only be deactivated; changes are new versions."
                )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise PermissionError(
            "Policy versions are NEVER deleted. "
            "History must remain queryable."
        )

    def __str__(self):
        state = "active" if self.is_active else "inactive"
        return f"{self.policy_key} v{self.version} ({state})"
