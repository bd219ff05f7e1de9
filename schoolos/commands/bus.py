"""
School OS Command Layer — Command Bus
========================================
The single pathway for every mutation.

Flow:
    1. Resolve required permission for the command type
    2. Check it against the execution context → deny = zero side effects
    3. Materialise the Command (id, timestamp, actor, role snapshot)
    4. Run the registered domain handler
    5. Handler failure → failed result, no audit event
    6. Handler success → write audit event
         audit write failure → reported, result stays successful
    7. Return CommandResult

The CommandBus:
- Never lets an exception escape execute()
- Fails closed on unknown command types
- Refuses to start unless every CommandType has a handler
- Takes the device id from the execution context, never from globals

The CommandBus does NOT:
- Re-resolve the actor's roles or permissions
- Contain domain logic
- Update or delete audit events
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from schoolos.audit.observability import (
    AuditFailureReporter,
    LoggingAuditFailureReporter,
)
from schoolos.audit.writer import AuditWriteError, AuditWriter, build_audit_row
from schoolos.commands.base import Command, CommandRequest, parse_command_type
from schoolos.commands.context import ExecutionContext
from schoolos.commands.errors import HandlerRegistryError
from schoolos.commands.handlers import HandlerRegistry
from schoolos.commands.outcomes import CommandResult, HandlerResult
from schoolos.commands.registry import required_permission

logger = logging.getLogger("schoolos.commands")

_DEFAULT_BUS_LOCK = threading.Lock()
_DEFAULT_BUS: Optional["CommandBus"] = None


class CommandBus:
    """
    Authorization gate and execution pipeline.

    Usage:
        bus = CommandBus(
            handlers=build_default_handlers(),
            audit_writer=DbAuditWriter(),
        )

        context = ExecutionContext.for_principal(principal, device_id=device_id)
        result = bus.execute(
            CommandRequest(type=CommandType.STUDENT_CREATE, payload={...}),
            context,
        )
        if result.success: ...
    """

    def __init__(
        self,
        handlers: HandlerRegistry,
        audit_writer: AuditWriter,
        failure_reporter: Optional[AuditFailureReporter] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        missing = handlers.missing()
        if missing:
            raise HandlerRegistryError(
                "Every command type needs a handler; missing: "
                f"{sorted(ct.value for ct in missing)}"
            )

        self._handlers = handlers
        self._audit_writer = audit_writer
        self._failure_reporter = failure_reporter or LoggingAuditFailureReporter()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def failure_reporter(self) -> AuditFailureReporter:
        return self._failure_reporter

    # ══════════════════════════════════════════════════════════
    # EXECUTE (main pipeline)
    # ══════════════════════════════════════════════════════════

    def execute(
        self,
        request: CommandRequest,
        context: ExecutionContext,
    ) -> CommandResult:
        # ── Step 1: Required permission ───────────────────────
        command_type = parse_command_type(request.type)
        if command_type is None:
            logger.warning(
                f"Rejected unknown command type '{request.type}' "
                f"from actor '{context.actor_id}'"
            )
            return CommandResult.fail(f"Unknown command type: {request.type}")

        permission = required_permission(command_type)

        # ── Step 2: Authorization gate (no side effects) ──────
        if not context.allows(permission):
            logger.info(
                f"Permission denied for actor '{context.actor_id}' on "
                f"{command_type.value}: requires {permission.value}"
            )
            return CommandResult.fail(
                f"Permission denied: requires {permission.value}"
            )

        # ── Step 3: Materialise command ───────────────────────
        command = Command.from_request(
            request,
            actor_id=context.actor_id,
            actor_roles=context.actor_roles,
            now=self._clock(),
        )

        # ── Step 4 + 5: Domain handler ────────────────────────
        handler = self._handlers.get(command_type)
        try:
            handler_result = handler(command)
        except Exception as exc:
            message = str(exc) or "Unknown error"
            logger.warning(
                f"Command {command.id} ({command_type.value}) failed: {message}"
            )
            return CommandResult.fail(message)

        if handler_result is None:
            handler_result = HandlerResult()
        elif not isinstance(handler_result, HandlerResult):
            logger.warning(
                f"Handler for {command_type.value} returned "
                f"{type(handler_result).__name__}, expected HandlerResult"
            )
            return CommandResult.fail(
                f"Handler for {command_type.value} returned an invalid result."
            )

        logger.info(
            f"Executed command {command.id} ({command_type.value}) "
            f"by actor '{command.actor_id}'"
        )
        result = CommandResult.ok(handler_result.data)

        # ── Step 6: Audit (append-only) ───────────────────────
        return self._record_audit(command, handler_result, context, result)

    # ══════════════════════════════════════════════════════════
    # AUDIT
    # ══════════════════════════════════════════════════════════

    def _record_audit(
        self,
        command: Command,
        handler_result: HandlerResult,
        context: ExecutionContext,
        result: CommandResult,
    ) -> CommandResult:
        row = None
        try:
            row = build_audit_row(command, handler_result, context.device_id)
            audit_event_id = self._audit_writer.write(row)
        except Exception as exc:
            # Mutation already applied: report, keep success.
            self._report_audit_failure(command, row or {}, exc)
            return result

        if not audit_event_id:
            self._report_audit_failure(
                command, row, AuditWriteError("Audit writer returned no event id.")
            )
            return result
        return result.with_audit_event(str(audit_event_id))

    def _report_audit_failure(
        self, command: Command, row: dict, error: Exception
    ) -> None:
        try:
            self._failure_reporter.report(command, row, error)
        except Exception:
            logger.exception(
                f"Audit failure reporter raised for command {command.id}"
            )


# ══════════════════════════════════════════════════════════════
# DEFAULT BUS
# ══════════════════════════════════════════════════════════════

def build_default_bus(
    failure_reporter: Optional[AuditFailureReporter] = None,
) -> CommandBus:
    """Bus wired to the built-in handlers and the audit_events table."""
    from schoolos.audit.writer import DbAuditWriter
    from schoolos.commands.handlers import build_default_handlers

    return CommandBus(
        handlers=build_default_handlers(),
        audit_writer=DbAuditWriter(),
        failure_reporter=failure_reporter,
    )


def get_default_bus() -> CommandBus:
    """
    Lazy process-wide bus.

    One bus means one failure reporter, so its failure count covers
    every execute_command() call in the process.
    """
    global _DEFAULT_BUS
    with _DEFAULT_BUS_LOCK:
        if _DEFAULT_BUS is None:
            _DEFAULT_BUS = build_default_bus()
        return _DEFAULT_BUS


def execute_command(
    request: CommandRequest,
    context: ExecutionContext,
) -> CommandResult:
    return get_default_bus().execute(request, context)
