"""
School OS Command Layer — Command Result Contract
====================================================
Every execute() call produces exactly one CommandResult.

Rules:
- success=False carries an error message and nothing else
- success=True never carries an error
- audit_event_id is present only when the command succeeded AND the
  audit write succeeded
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional


@dataclass(frozen=True)
class CommandResult:
    success: bool
    data: Any = None
    error: Optional[str] = None
    audit_event_id: Optional[str] = None

    def __post_init__(self):
        if self.success and self.error is not None:
            raise ValueError("Successful result must NOT include an error.")

        if not self.success:
            if not self.error:
                raise ValueError(
                    "Failed result must include an error message. "
                    "No silent failures allowed."
                )
            if self.audit_event_id is not None:
                raise ValueError("Failed result must NOT include audit_event_id.")

    @classmethod
    def ok(cls, data: Any = None) -> "CommandResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "CommandResult":
        return cls(success=False, error=error)

    def with_audit_event(self, audit_event_id: str) -> "CommandResult":
        return replace(self, audit_event_id=audit_event_id)

    def to_dict(self) -> dict:
        """Wire shape: {success, data?, error?, auditEventId?}."""
        result: dict = {"success": self.success}
        if self.data is not None:
            result["data"] = self.data
        if self.error is not None:
            result["error"] = self.error
        if self.audit_event_id is not None:
            result["auditEventId"] = self.audit_event_id
        return result


@dataclass(frozen=True)
class HandlerResult:
    """
    What a domain handler returns on success.

    before_state / after_state feed the audit record; either may be None.
    """

    data: Any = None
    before_state: Optional[dict] = None
    after_state: Optional[dict] = None
