"""
School OS Policy Store — Store Service
=========================================
Read side and the single version-advance operation.

Version advance (policy.update handler only):
    1. Lock the active row for the key (select_for_update)
    2. Deactivate it
    3. Insert version + 1 (or 1) as the active row
All three steps run in ONE transaction. A concurrent writer that
slips past the lock hits uq_policy_one_active / uq_policy_key_version
and gets PolicyConflictError instead of a second active row.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Optional

from django.db import IntegrityError, transaction

from schoolos.policies.exceptions import InvalidPolicyValue, PolicyConflictError
from schoolos.policies.models import Policy

logger = logging.getLogger("schoolos.policies")

_MISSING = object()


def serialize_policy(row: Policy) -> dict[str, Any]:
    return {
        "id": str(row.id),
        "policy_key": row.policy_key,
        "policy_value": row.policy_value,
        "description": row.description,
        "version": row.version,
        "is_active": row.is_active,
        "created_by": row.created_by,
        "created_at": row.created_at.isoformat() if row.created_at else None,
    }


# ══════════════════════════════════════════════════════════════
# READS
# ══════════════════════════════════════════════════════════════

def get_active_policy(policy_key: str) -> Optional[Policy]:
    return (
        Policy.objects.filter(policy_key=policy_key, is_active=True)
        .order_by("-version")
        .first()
    )


def get_policy_value(policy_key: str, default: Any = None) -> Any:
    row = get_active_policy(policy_key)
    if row is None:
        return default
    return row.policy_value


def list_active_policies() -> tuple[Policy, ...]:
    return tuple(Policy.objects.filter(is_active=True).order_by("policy_key"))


def get_policy_history(policy_key: str) -> tuple[Policy, ...]:
    """All versions of a key, newest first."""
    return tuple(
        Policy.objects.filter(policy_key=policy_key).order_by("-version")
    )


def get_policy_at(policy_key: str, moment: datetime) -> Optional[Policy]:
    """The version that was current at a point in time."""
    return (
        Policy.objects.filter(policy_key=policy_key, created_at__lte=moment)
        .order_by("-version")
        .first()
    )


# ══════════════════════════════════════════════════════════════
# VERSION ADVANCE
# ══════════════════════════════════════════════════════════════

def _validate(policy_key: Any, policy_value: Any) -> None:
    if not isinstance(policy_key, str) or not policy_key.strip():
        raise InvalidPolicyValue("policy_key must be a non-empty string.")

    if policy_value is _MISSING or policy_value is None:
        raise InvalidPolicyValue("policy_value is required.")

    try:
        json.dumps(policy_value)
    except (TypeError, ValueError) as exc:
        raise InvalidPolicyValue(
            f"policy_value must be JSON-serializable: {exc}"
        ) from exc


def advance_policy_version(
    *,
    policy_key: str,
    policy_value: Any = _MISSING,
    description: Optional[str] = None,
    created_by: str,
) -> tuple[Optional[dict[str, Any]], dict[str, Any]]:
    """
    Deactivate the active version of policy_key and insert the next one.

    Returns:
        (before, after) — serialized prior active row (None if none
        existed) and the newly inserted active row.

    Raises:
        InvalidPolicyValue:  bad key or value, nothing written.
        PolicyConflictError: lost a race with another writer, nothing written.
    """
    _validate(policy_key, policy_value)

    try:
        with transaction.atomic():
            current = (
                Policy.objects.select_for_update()
                .filter(policy_key=policy_key, is_active=True)
                .order_by("-version")
                .first()
            )
            before = serialize_policy(current) if current is not None else None

            if current is not None:
                new_version = current.version + 1
                current.is_active = False
                current.save(update_fields=["is_active"])
            else:
                latest = (
                    Policy.objects.filter(policy_key=policy_key)
                    .order_by("-version")
                    .values_list("version", flat=True)
                    .first()
                )
                new_version = (latest or 0) + 1

            row = Policy.objects.create(
                policy_key=policy_key,
                policy_value=policy_value,
                description=description,
                version=new_version,
                is_active=True,
                created_by=created_by,
            )
    except IntegrityError as exc:
        logger.warning(
            f"Policy '{policy_key}' version advance conflicted: {exc}"
        )
        raise PolicyConflictError(policy_key) from exc

    logger.info(f"Policy '{policy_key}' advanced to version {new_version}")
    return before, serialize_policy(row)
