"""
Process-wide circulation state, owned by the application instance.

``build_context()`` is called once per app in ``create_app()``; route
handlers receive the result through the ``get_library`` dependency.
"""

import logging
from dataclasses import dataclass

from library_desk.circulation.accounts import LIBRARIAN, Accounts
from library_desk.circulation.catalog import Catalog
from library_desk.circulation.checkin import CheckinBuffer
from library_desk.circulation.ledger import LoanLedger
from library_desk.circulation.motor import MotorMailbox
from library_desk.circulation.scan import ShelfScan
from library_desk.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class LibraryContext:
    catalog: Catalog
    accounts: Accounts
    ledger: LoanLedger
    shelf_scan: ShelfScan
    motor: MotorMailbox
    checkin: CheckinBuffer


def build_context(settings: Settings) -> LibraryContext:
    """Create fresh state and seed the librarian account from *settings*."""
    catalog = Catalog()
    accounts = Accounts(bcrypt_rounds=settings.bcrypt_rounds)
    if settings.admin_email and settings.admin_password:
        accounts.register(
            settings.admin_name,
            settings.admin_email,
            settings.admin_password,
            role=LIBRARIAN,
        )
    else:
        logger.warning("No admin credentials configured; no librarian seeded")

    return LibraryContext(
        catalog=catalog,
        accounts=accounts,
        ledger=LoanLedger(catalog, accounts),
        shelf_scan=ShelfScan(catalog),
        motor=MotorMailbox(),
        checkin=CheckinBuffer(),
    )
