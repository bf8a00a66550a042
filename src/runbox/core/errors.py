"""Error taxonomy for the launcher controller.

// [LAW:one-source-of-truth] Every recoverable failure the controller reports is one of these types.

Stale locator responses are not errors: the result store drops them and logs
at DEBUG. Nothing raised here is fatal to the process.

This module is STABLE. Safe for `from` imports everywhere.
"""


class RunboxError(Exception):
    """Base class for runbox failures."""


class LocatorUnavailable(RunboxError):
    """search()/list_all() failed. The previous view stays on screen."""

    def __init__(self, message: str, *, query: str | None = None):
        super().__init__(message)
        self.query = query


class LaunchFailed(RunboxError):
    """The launcher could not execute a candidate. Query and view are untouched."""

    def __init__(self, message: str, *, category: str = "", reference: str = ""):
        super().__init__(message)
        self.category = category
        self.reference = reference
