"""
School OS Command Layer — Errors
===================================
Errors used inside the command layer.

None of these cross CommandBus.execute(): the bus converts every
failure into a CommandResult.
"""

from __future__ import annotations


class CommandBusError(Exception):
    """Base error for command bus operations."""
    pass


class UnknownCommandType(CommandBusError):
    """Command type is not part of the CommandType enumeration."""

    def __init__(self, command_type: str):
        self.command_type = command_type
        super().__init__(f"Unknown command type: {command_type}")


class HandlerRegistryError(CommandBusError):
    """Handler registration is invalid or incomplete."""
    pass


class CommandHandlerError(CommandBusError):
    """
    Domain failure raised by a handler.

    The message is returned verbatim as CommandResult.error.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
