"""
School OS Bootstrap — Startup Self-Check
==========================================
Ensures the authorization core never starts in an unsafe state.
"""

from schoolos.bootstrap.errors import SystemBootstrapError

__all__ = [
    "SystemBootstrapError",
]
