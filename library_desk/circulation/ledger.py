"""
Loan ledger — borrow/return records for catalogued items.

The ledger is append-only: a borrow appends a ``Loan`` and a return sets its
``returned_at`` exactly once.  Records are never deleted, so the full history
stays available for ``list_loans()``.

Invariant
---------
For any item there is at most one loan with ``returned_at`` unset.  The check
and the append happen under the same lock, so two concurrent borrows of the
same item cannot both succeed.
"""

import logging
import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import NamedTuple

from library_desk.circulation.accounts import Accounts
from library_desk.circulation.catalog import Catalog
from library_desk.circulation.errors import Conflict, InvalidArgument, NotFound
from library_desk.circulation.models import Item, Loan, User, utcnow

logger = logging.getLogger(__name__)


class Borrowed(NamedTuple):
    loan: Loan
    item: Item
    borrower: User


@dataclass(frozen=True)
class LoanView:
    """A loan decorated with the item and borrower fields current at read time."""

    id: int
    item_id: int
    item_title: str | None
    item_author: str | None
    rfid_tag: str | None
    borrower_id: int
    borrower_name: str | None
    borrower_role: str | None
    borrowed_at: datetime
    returned_at: datetime | None


class LoanLedger:
    def __init__(self, catalog: Catalog, accounts: Accounts) -> None:
        self._lock = threading.Lock()
        self._loans: list[Loan] = []
        self._catalog = catalog
        self._accounts = accounts

    def borrow(self, item_id: int, borrower_id: int) -> Borrowed:
        """
        Open a loan of *item_id* for *borrower_id*.

        Raises ``NotFound`` if the borrower or the item is unknown and
        ``Conflict`` if the item already has an open loan.
        """
        with self._lock:
            borrower = self._accounts.get(borrower_id)
            if borrower is None:
                raise NotFound("User not found")
            item = self._catalog.get(item_id)
            if item is None:
                raise NotFound("Book not found")
            if self._open_loan_for_item(item_id) is not None:
                raise Conflict("Book is already borrowed")

            loan = Loan(
                id=len(self._loans) + 1,
                item_id=item_id,
                borrower_id=borrower_id,
                borrowed_at=utcnow(),
            )
            self._loans.append(loan)
            snapshot = replace(loan)

        logger.info(
            "Borrow: loan %d item %d borrower %d", loan.id, item_id, borrower_id
        )
        return Borrowed(loan=snapshot, item=item, borrower=borrower)

    def return_item(
        self, item_id: int | None = None, loan_id: int | None = None
    ) -> Loan:
        """
        Close the open loan identified by *loan_id*, or else by *item_id*.

        When both are given only *loan_id* is consulted.  Raises
        ``InvalidArgument`` if neither is given and ``NotFound`` if no open
        loan matches, including when the matching loan was already returned.
        """
        if loan_id is None and item_id is None:
            raise InvalidArgument("itemId or loanId is required")

        with self._lock:
            if loan_id is not None:
                loan = next(
                    (rec for rec in self._loans if rec.id == loan_id and rec.is_open),
                    None,
                )
            else:
                loan = self._open_loan_for_item(item_id)
            if loan is None:
                raise NotFound("No active loan found for this book")

            loan.returned_at = utcnow()
            snapshot = replace(loan)

        logger.info(
            "Return: loan %d item %d borrower %d",
            loan.id,
            loan.item_id,
            loan.borrower_id,
        )
        return snapshot

    def list_loans(self) -> list[LoanView]:
        """Every loan, open and closed, in borrow order."""
        with self._lock:
            loans = [replace(rec) for rec in self._loans]
        return [self._enrich(rec) for rec in loans]

    def loans_for_borrower(self, borrower_id: int) -> list[LoanView]:
        with self._lock:
            loans = [
                replace(rec) for rec in self._loans if rec.borrower_id == borrower_id
            ]
        return [self._enrich(rec) for rec in loans]

    def open_loan_count(self) -> int:
        with self._lock:
            return sum(1 for rec in self._loans if rec.is_open)

    # ── Internal helpers ─────────────────────────────────────────────────────

    def _open_loan_for_item(self, item_id: int) -> Loan | None:
        return next(
            (rec for rec in self._loans if rec.item_id == item_id and rec.is_open),
            None,
        )

    def _enrich(self, loan: Loan) -> LoanView:
        item = self._catalog.get(loan.item_id)
        borrower = self._accounts.get(loan.borrower_id)
        return LoanView(
            id=loan.id,
            item_id=loan.item_id,
            item_title=item.title if item else None,
            item_author=item.author if item else None,
            rfid_tag=item.rfid_tag if item else None,
            borrower_id=loan.borrower_id,
            borrower_name=borrower.name if borrower else None,
            borrower_role=borrower.role if borrower else None,
            borrowed_at=loan.borrowed_at,
            returned_at=loan.returned_at,
        )
