"""
School OS Bootstrap — Startup Failure
=======================================
"""


class SystemBootstrapError(Exception):
    """
    A startup self-check found the authorization core in an unsafe state.

    invariant: short rule name, e.g. "COMMAND_HANDLER_COVERAGE".
    detail:    what was found and, where known, how to repair it.

    Raised from AppConfig.ready(), so Django refuses to finish loading.
    """

    def __init__(self, invariant: str, detail: str):
        self.invariant = invariant
        self.detail = detail
        super().__init__(f"School OS refused to start [{invariant}]: {detail}")
