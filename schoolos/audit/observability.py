"""
School OS Audit — Audit Failure Reporting
============================================
A completed mutation whose audit write failed is degraded, not failed.
The Command Bus keeps the success result and hands the failure to a
reporter so operators can see and repair the gap.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Protocol

from schoolos.commands.base import Command

logger = logging.getLogger("schoolos.audit")


class AuditFailureReporter(Protocol):
    def report(self, command: Command, row: dict[str, Any], error: Exception) -> None:
        ...


class LoggingAuditFailureReporter:
    """
    Logs every audit write failure at ERROR with the row that was lost,
    and keeps a process-wide failure count.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._failures = 0

    @property
    def failures(self) -> int:
        return self._failures

    def report(self, command: Command, row: dict[str, Any], error: Exception) -> None:
        with self._lock:
            self._failures += 1
        logger.error(
            f"Failed to write audit event for command {command.id} "
            f"({command.type.value}) by actor '{command.actor_id}': {error}",
            exc_info=error,
            extra={"audit_row": row},
        )
