"""
Motor control from the librarian console.

- ``POST /admin/motor/move`` ``{"steps": int}`` — non-zero, signed.
- ``POST /admin/motor/stop``

Both overwrite the single pending command that the controller picks up from
``GET /api/motor`` (see ``devices.py``).  A command not yet picked up is
replaced, not queued.
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from library_desk.api.deps import get_library, http_error, require_librarian
from library_desk.circulation import CirculationError, InvalidArgument, LibraryContext
from library_desk.circulation.models import User

logger = logging.getLogger(__name__)

router = APIRouter()


class MoveRequest(BaseModel):
    steps: int | None = None


class MotorCommandOut(BaseModel):
    steps: int
    stop: bool


class QueuedResponse(BaseModel):
    ok: bool
    command: MotorCommandOut


@router.post("/admin/motor/move", response_model=QueuedResponse)
def move_motor(
    data: MoveRequest,
    library: LibraryContext = Depends(get_library),
    _user: User = Depends(require_librarian),
) -> QueuedResponse:
    try:
        if data.steps is None:
            raise InvalidArgument("steps must be non-zero number")
        command = library.motor.enqueue_move(data.steps)
    except CirculationError as exc:
        raise http_error(exc)
    return QueuedResponse(
        ok=True, command=MotorCommandOut(steps=command.steps, stop=command.stop)
    )


@router.post("/admin/motor/stop", response_model=QueuedResponse)
def stop_motor(
    library: LibraryContext = Depends(get_library),
    _user: User = Depends(require_librarian),
) -> QueuedResponse:
    command = library.motor.enqueue_stop()
    return QueuedResponse(
        ok=True, command=MotorCommandOut(steps=command.steps, stop=command.stop)
    )
