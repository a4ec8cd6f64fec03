# Circulation and device-coordination state
from library_desk.circulation.context import LibraryContext, build_context
from library_desk.circulation.errors import (
    CirculationError,
    Conflict,
    InvalidArgument,
    NotFound,
)

__all__ = [
    "LibraryContext",
    "build_context",
    "CirculationError",
    "Conflict",
    "InvalidArgument",
    "NotFound",
]
