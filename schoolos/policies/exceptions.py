"""
School OS Policy Store — Exceptions
======================================
Structured errors for policy store operations.

Raised inside the policy.update handler; the Command Bus turns
them into failed CommandResults.
"""

from __future__ import annotations


class PolicyError(Exception):
    """Base error for policy store operations."""
    pass


class InvalidPolicyValue(PolicyError):
    """policy_key or policy_value cannot be stored."""
    pass


class PolicyConflictError(PolicyError):
    """A concurrent update advanced the same policy_key first."""

    def __init__(self, policy_key: str):
        self.policy_key = policy_key
        super().__init__(
            f"Policy '{policy_key}' was updated concurrently. "
            f"Reload the current version and retry."
        )
