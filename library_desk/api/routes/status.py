"""
GET /status — liveness check for the console and the ESP32 boards.
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from library_desk.api.deps import current_user, get_library
from library_desk.circulation import LibraryContext
from library_desk.circulation.models import User

router = APIRouter()
logger = logging.getLogger(__name__)


class StatusResponse(BaseModel):
    status: str
    authenticated: bool
    scanning: bool


@router.get("/status", response_model=StatusResponse)
def get_status(
    library: LibraryContext = Depends(get_library),
    user: User | None = Depends(current_user),
) -> StatusResponse:
    """
    Returns the API status.

    - **status**: always ``"ok"`` while the process is serving requests.
    - **authenticated**: ``true`` if the request carries a valid session.
    - **scanning**: ``true`` while a shelf scan session is open.
    """
    return StatusResponse(
        status="ok",
        authenticated=user is not None,
        scanning=library.shelf_scan.scanning,
    )
