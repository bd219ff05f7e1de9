"""
School OS Command Layer — Execution Context
==============================================
Who is executing, computed once per request by the caller.

The bus trusts this snapshot and never re-resolves roles itself,
which keeps it decoupled from the live state of the resolver.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from schoolos.rbac.resolver import Principal


@dataclass(frozen=True)
class ExecutionContext:
    actor_id: str
    actor_roles: tuple = field(default_factory=tuple)
    actor_permissions: frozenset = field(default_factory=frozenset)
    is_admin: bool = False
    device_id: Optional[str] = None

    def __post_init__(self):
        if not self.actor_id or not isinstance(self.actor_id, str):
            raise ValueError("actor_id must be a non-empty string.")

        object.__setattr__(
            self, "actor_roles", tuple(str(role) for role in self.actor_roles)
        )
        object.__setattr__(
            self,
            "actor_permissions",
            frozenset(str(permission) for permission in self.actor_permissions),
        )

    @classmethod
    def for_principal(
        cls,
        principal: Principal,
        device_id: Optional[str] = None,
    ) -> "ExecutionContext":
        return cls(
            actor_id=principal.user_id,
            actor_roles=principal.roles,
            actor_permissions=principal.permissions,
            is_admin=principal.is_admin,
            device_id=device_id,
        )

    def allows(self, permission) -> bool:
        if self.is_admin:
            return True
        return str(permission) in self.actor_permissions
