"""
Borrow / return endpoints.

POST /admin/borrow
------------------
Body ``{"borrowerId": int, "itemId": int}`` (``userId`` / ``bookId`` are
accepted as aliases).  Opens a loan.

POST /admin/return
------------------
Body ``{"itemId": int}`` or ``{"loanId": int}``.  Closes the open loan; when
both are sent ``loanId`` wins.

GET /admin/loans
----------------
Every loan, open and closed, with current item and borrower fields.

GET /me/loans
-------------
The caller's own loans.

Responses
---------
- **200** — success.
- **400** — ``invalid_argument``, ``not_found`` or ``conflict`` in
  ``detail.status``.
- **401** — no session (``/me/loans``).
- **403** — caller is not a librarian (``/admin/*``).
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from library_desk.api.deps import (
    get_library,
    http_error,
    require_librarian,
    require_login,
)
from library_desk.api.routes.catalog import ItemOut
from library_desk.circulation import CirculationError, InvalidArgument, LibraryContext
from library_desk.circulation.models import User

logger = logging.getLogger(__name__)

router = APIRouter()


class BorrowRequest(BaseModel):
    borrower_id: int | None = Field(
        default=None,
        validation_alias=AliasChoices("borrowerId", "userId", "borrower_id"),
    )
    item_id: int | None = Field(
        default=None, validation_alias=AliasChoices("itemId", "bookId", "item_id")
    )


class ReturnRequest(BaseModel):
    item_id: int | None = Field(
        default=None, validation_alias=AliasChoices("itemId", "bookId", "item_id")
    )
    loan_id: int | None = Field(
        default=None, validation_alias=AliasChoices("loanId", "loan_id")
    )


class LoanOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    item_id: int
    borrower_id: int
    borrowed_at: datetime
    returned_at: datetime | None


class LoanViewOut(LoanOut):
    item_title: str | None
    item_author: str | None
    rfid_tag: str | None
    borrower_name: str | None
    borrower_role: str | None


class BorrowerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    role: str


class BorrowResponse(BaseModel):
    loan: LoanOut
    item: ItemOut
    borrower: BorrowerOut


class ReturnResponse(BaseModel):
    loan: LoanOut


@router.post("/admin/borrow", response_model=BorrowResponse)
def borrow(
    data: BorrowRequest,
    library: LibraryContext = Depends(get_library),
    _user: User = Depends(require_librarian),
) -> BorrowResponse:
    """Lend an item to a borrower; fails if the item is already out."""
    try:
        if data.borrower_id is None or data.item_id is None:
            raise InvalidArgument("borrowerId and itemId are required")
        result = library.ledger.borrow(data.item_id, data.borrower_id)
    except CirculationError as exc:
        logger.warning("Borrow refused: %s", exc)
        raise http_error(exc)

    return BorrowResponse(
        loan=LoanOut.model_validate(result.loan),
        item=ItemOut.model_validate(result.item),
        borrower=BorrowerOut.model_validate(result.borrower),
    )


@router.post("/admin/return", response_model=ReturnResponse)
def return_item(
    data: ReturnRequest,
    library: LibraryContext = Depends(get_library),
    _user: User = Depends(require_librarian),
) -> ReturnResponse:
    try:
        loan = library.ledger.return_item(item_id=data.item_id, loan_id=data.loan_id)
    except CirculationError as exc:
        logger.warning("Return refused: %s", exc)
        raise http_error(exc)
    return ReturnResponse(loan=LoanOut.model_validate(loan))


@router.get("/admin/loans", response_model=list[LoanViewOut])
def list_loans(
    library: LibraryContext = Depends(get_library),
    _user: User = Depends(require_librarian),
) -> list[LoanViewOut]:
    return [LoanViewOut.model_validate(v) for v in library.ledger.list_loans()]


@router.get("/me/loans", response_model=list[LoanViewOut])
def my_loans(
    library: LibraryContext = Depends(get_library),
    user: User = Depends(require_login),
) -> list[LoanViewOut]:
    return [
        LoanViewOut.model_validate(v)
        for v in library.ledger.loans_for_borrower(user.id)
    ]
