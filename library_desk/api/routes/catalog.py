"""
Catalog and directory endpoints for the librarian console.

- ``POST /admin/books`` — add a book ``{"tag", "title", "author"}``.  Adding a
  tag that is already catalogued returns the stored book unchanged.
- ``GET /admin/books`` — all books.
- ``GET /admin/users`` — all users (no password hashes).
- ``GET /admin/latest-checkin-tag`` — last tag seen by the check-in reader.
- ``GET /admin/stats`` — counts for the dashboard header.

All endpoints require a librarian session.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict

from library_desk.api.deps import get_library, http_error, require_librarian
from library_desk.circulation import CirculationError, LibraryContext
from library_desk.circulation.models import User

logger = logging.getLogger(__name__)

router = APIRouter()


class ItemCreate(BaseModel):
    tag: str | None = None
    title: str | None = None
    author: str | None = None


class ItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    author: str
    rfid_tag: str
    created_at: datetime


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str


class CheckinTagResponse(BaseModel):
    tag: str | None = None
    seen_at: datetime | None = None


class StatsResponse(BaseModel):
    total_books: int
    total_users: int
    open_loans: int


@router.post("/admin/books", response_model=ItemOut)
def add_book(
    data: ItemCreate,
    library: LibraryContext = Depends(get_library),
    _user: User = Depends(require_librarian),
) -> ItemOut:
    try:
        item = library.catalog.add_item(data.tag, data.title, data.author)
    except CirculationError as exc:
        raise http_error(exc)
    return ItemOut.model_validate(item)


@router.get("/admin/books", response_model=list[ItemOut])
def list_books(
    library: LibraryContext = Depends(get_library),
    _user: User = Depends(require_librarian),
) -> list[ItemOut]:
    return [ItemOut.model_validate(item) for item in library.catalog.list()]


@router.get("/admin/users", response_model=list[UserOut])
def list_users(
    library: LibraryContext = Depends(get_library),
    _user: User = Depends(require_librarian),
) -> list[UserOut]:
    return [UserOut.model_validate(u) for u in library.accounts.list()]


@router.get("/admin/latest-checkin-tag", response_model=CheckinTagResponse)
def latest_checkin_tag(
    library: LibraryContext = Depends(get_library),
    _user: User = Depends(require_librarian),
) -> CheckinTagResponse:
    """Used to pre-fill the tag field of the add-book form."""
    sighting = library.checkin.latest()
    if sighting is None:
        return CheckinTagResponse()
    return CheckinTagResponse(tag=sighting.tag, seen_at=sighting.seen_at)


@router.get("/admin/stats", response_model=StatsResponse)
def stats(
    library: LibraryContext = Depends(get_library),
    _user: User = Depends(require_librarian),
) -> StatsResponse:
    return StatsResponse(
        total_books=len(library.catalog),
        total_users=len(library.accounts),
        open_loans=library.ledger.open_loan_count(),
    )
