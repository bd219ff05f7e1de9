"""
School OS Bootstrap — App Configuration
=========================================
Runs the startup self-check once Django has loaded every app.

Skipped when:
- SCHOOLOS_BOOTSTRAP_CHECKS is False
- a schema/test management command is running (tables may be missing)
- running under pytest (tests call the checks directly)
"""

import logging
import sys

from django.apps import AppConfig

logger = logging.getLogger("schoolos.bootstrap")

# Management commands that run before or around migrations.
SCHEMA_COMMANDS = frozenset({
    "migrate",
    "makemigrations",
    "showmigrations",
    "sqlmigrate",
    "flush",
    "test",
})


def skip_reason(argv=None, modules=None):
    """Why the self-check should not run now, or None to run it."""
    from schoolos.conf import bootstrap_checks_enabled

    argv = sys.argv if argv is None else argv
    modules = sys.modules if modules is None else modules

    if not bootstrap_checks_enabled():
        return "disabled by SCHOOLOS_BOOTSTRAP_CHECKS"
    if len(argv) >= 2 and argv[1] in SCHEMA_COMMANDS:
        return f"management command '{argv[1]}'"
    if "pytest" in modules:
        return "pytest session"
    return None


class BootstrapConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "schoolos.bootstrap"
    label = "schoolos_bootstrap"
    verbose_name = "School OS Bootstrap"

    def ready(self):
        reason = skip_reason()
        if reason is not None:
            logger.info(f"Bootstrap self-check skipped: {reason}")
            return

        from schoolos.bootstrap.self_check import run_bootstrap_checks
        run_bootstrap_checks()
