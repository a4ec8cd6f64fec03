"""
Errors raised by the circulation components.

Every error is local and synchronous: the operation that raised it left its
state untouched, and the caller is expected to correct the request rather than
retry it as-is.
"""


class CirculationError(Exception):
    """Base class; ``code`` is the machine-readable status sent to clients."""

    code: str = "error"


class InvalidArgument(CirculationError):
    code = "invalid_argument"


class NotFound(CirculationError):
    code = "not_found"


class Conflict(CirculationError):
    code = "conflict"
