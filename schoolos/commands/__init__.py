"""
School OS Command Layer — Single Mutation Pathway
====================================================
Every mutation is a Command.
Every Command is authorized before anything runs.
Every successful Command leaves exactly one Audit Event.

Request → permission gate → handler → audit → CommandResult.
"""

from schoolos.commands.base import (
    Command,
    CommandRequest,
    CommandType,
    EntityRef,
    derive_entity_type,
    parse_command_type,
)
from schoolos.commands.context import ExecutionContext
from schoolos.commands.errors import (
    CommandBusError,
    CommandHandlerError,
    HandlerRegistryError,
    UnknownCommandType,
)
from schoolos.commands.outcomes import CommandResult, HandlerResult
from schoolos.commands.registry import COMMAND_PERMISSIONS, required_permission


def __getattr__(name: str):
    # The bus imports the audit writer, which imports this package.
    if name in {"CommandBus", "build_default_bus", "execute_command", "get_default_bus"}:
        from schoolos.commands import bus

        return getattr(bus, name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    # ── Base ──────────────────────────────────────────────────
    "Command",
    "CommandRequest",
    "CommandType",
    "EntityRef",
    "derive_entity_type",
    "parse_command_type",
    # ── Context ───────────────────────────────────────────────
    "ExecutionContext",
    # ── Errors ────────────────────────────────────────────────
    "CommandBusError",
    "CommandHandlerError",
    "HandlerRegistryError",
    "UnknownCommandType",
    # ── Outcomes ──────────────────────────────────────────────
    "CommandResult",
    "HandlerResult",
    # ── Registry ──────────────────────────────────────────────
    "COMMAND_PERMISSIONS",
    "required_permission",
    # ── Bus ───────────────────────────────────────────────────
    "CommandBus",
    "build_default_bus",
    "execute_command",
    "get_default_bus",
]
