"""
Plain records shared by the circulation components.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Item:
    id: int
    title: str
    author: str
    rfid_tag: str
    created_at: datetime


@dataclass(frozen=True)
class User:
    id: int
    name: str
    email: str
    password_hash: bytes = field(repr=False)
    role: str

    @property
    def is_librarian(self) -> bool:
        return self.role == "librarian"


@dataclass
class Loan:
    """A borrow record. ``returned_at`` is set once, by the return operation."""

    id: int
    item_id: int
    borrower_id: int
    borrowed_at: datetime
    returned_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.returned_at is None


@dataclass(frozen=True)
class CompletedScan:
    id: int
    started_at: datetime
    finished_at: datetime
    tags: tuple[str, ...]


@dataclass(frozen=True)
class MotorCommand:
    steps: int = 0
    stop: bool = False


NEUTRAL_COMMAND = MotorCommand()


@dataclass(frozen=True)
class CheckinSighting:
    tag: str
    seen_at: datetime
