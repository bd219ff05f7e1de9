"""
School OS Bootstrap — Self-Check Runner
=========================================
"""

import logging

from schoolos.bootstrap.invariants import (
    check_handler_coverage,
    check_immutability_guards,
    check_permission_registry,
    check_tables,
)

logger = logging.getLogger("schoolos.bootstrap")


def run_bootstrap_checks(*, check_database: bool = True):
    """
    Execute all system invariant checks.
    Called once at startup via AppConfig.ready().

    If any check raises SystemBootstrapError,
    it propagates and prevents system startup.
    """
    logger.info("═══ School OS Bootstrap Self-Check Starting ═══")

    check_permission_registry()
    check_handler_coverage()
    check_immutability_guards()
    if check_database:
        check_tables()

    logger.info("═══ School OS Bootstrap Self-Check PASSED ═══")
