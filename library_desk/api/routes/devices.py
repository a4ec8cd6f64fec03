"""
Endpoints called by the ESP32 boards.

POST /esp/checkin
    Stationary reader: ``{"tag": "04A1B2..."}``.  Overwrites the latest
    check-in sighting.

POST /esp/shelf
    Moving shelf reader: ``{"tag": "04A1B2..."}``.  Added to the open scan, or
    dropped if no scan is open.  Either way the device gets ``ok: true``.

GET /api/motor
    Motor controller poll.  Returns the pending ``{"steps", "stop"}`` command
    and resets it to ``{"steps": 0, "stop": false}``, so each command is
    delivered once.

Authentication
--------------
When ``DEVICE_TOKEN`` is configured, every request must carry it in the
``x-device-token`` header.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from library_desk.api.deps import get_library, require_device
from library_desk.api.routes.motor import MotorCommandOut
from library_desk.circulation import LibraryContext

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_device)])


class SightingRequest(BaseModel):
    tag: str | None = None


class AckResponse(BaseModel):
    ok: bool


def _require_tag(data: SightingRequest, reader: str) -> str:
    tag = (data.tag or "").strip()
    if not tag:
        logger.warning("[%s] Missing tag in body", reader)
        raise HTTPException(
            status_code=400,
            detail={"status": "invalid_argument", "message": "Missing tag"},
        )
    return tag


@router.post("/esp/checkin", response_model=AckResponse)
def checkin_sighting(
    data: SightingRequest, library: LibraryContext = Depends(get_library)
) -> AckResponse:
    tag = _require_tag(data, "checkin")
    library.checkin.record(tag)
    return AckResponse(ok=True)


@router.post("/esp/shelf", response_model=AckResponse)
def shelf_sighting(
    data: SightingRequest, library: LibraryContext = Depends(get_library)
) -> AckResponse:
    tag = _require_tag(data, "shelf")
    library.shelf_scan.record_sighting(tag)
    return AckResponse(ok=True)


@router.get("/api/motor", response_model=MotorCommandOut)
def poll_motor(library: LibraryContext = Depends(get_library)) -> MotorCommandOut:
    command = library.motor.take_and_reset()
    return MotorCommandOut(steps=command.steps, stop=command.stop)
