"""
Shelf scan endpoints.

A scan is bracketed by ``POST /admin/start-shelf-scan`` and
``POST /admin/end-shelf-scan``; in between, the moving reader reports tags to
``POST /esp/shelf``.  Motor movement is triggered separately through
``/admin/motor/move``.

``POST /admin/end-shelf-scan`` answers 200 with ``ok: false`` when no scan is
open.  ``GET /admin/last-shelf-scan`` answers ``scan: null`` until the first
scan completes.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict

from library_desk.api.deps import get_library, require_librarian
from library_desk.api.routes.catalog import ItemOut
from library_desk.circulation import LibraryContext
from library_desk.circulation.models import User

logger = logging.getLogger(__name__)

router = APIRouter()


class ScanOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    started_at: datetime
    finished_at: datetime
    tags: list[str]


class StartScanResponse(BaseModel):
    ok: bool
    scan_id: int


class EndScanResponse(BaseModel):
    ok: bool
    message: str | None = None
    scan: ScanOut | None = None


class LastScanResponse(BaseModel):
    scan: ScanOut | None
    matched_items: list[ItemOut]


@router.post("/admin/start-shelf-scan", response_model=StartScanResponse)
def start_shelf_scan(
    library: LibraryContext = Depends(get_library),
    _user: User = Depends(require_librarian),
) -> StartScanResponse:
    """Open a scan session, discarding any session that is still open."""
    scan_id = library.shelf_scan.start()
    return StartScanResponse(ok=True, scan_id=scan_id)


@router.post("/admin/end-shelf-scan", response_model=EndScanResponse)
def end_shelf_scan(
    library: LibraryContext = Depends(get_library),
    _user: User = Depends(require_librarian),
) -> EndScanResponse:
    result = library.shelf_scan.end()
    return EndScanResponse(
        ok=result.ok,
        message=result.message,
        scan=ScanOut.model_validate(result.scan) if result.scan else None,
    )


@router.get("/admin/last-shelf-scan", response_model=LastScanResponse)
def last_shelf_scan(
    library: LibraryContext = Depends(get_library),
    _user: User = Depends(require_librarian),
) -> LastScanResponse:
    """The last completed scan and the catalogued books whose tags it saw."""
    scan, items = library.shelf_scan.last_scan_with_matches()
    return LastScanResponse(
        scan=ScanOut.model_validate(scan) if scan else None,
        matched_items=[ItemOut.model_validate(item) for item in items],
    )
