"""
Shelf scan session — one sweep of the moving RFID reader along the shelf.

Only one session can be open at a time.  While it is open, every tag the
shelf reader reports is added to the session (duplicates collapse, first
sighting order is kept).  Ending the session freezes its tags into the
retained ``last_completed`` record, which the console cross-references
against the catalog.

Sightings that arrive while no session is open are acknowledged and dropped.
Starting a session while one is already open discards the open one.
"""

import itertools
import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple

from library_desk.circulation.catalog import Catalog
from library_desk.circulation.models import CompletedScan, Item, utcnow

logger = logging.getLogger(__name__)


@dataclass
class _OpenScan:
    id: int
    started_at: datetime
    # dict keys give set membership with insertion order
    tags: dict[str, None]


class EndScanResult(NamedTuple):
    ok: bool
    scan: CompletedScan | None = None
    message: str | None = None


class ScanMatches(NamedTuple):
    scan: CompletedScan | None
    matched_items: list[Item]


class ShelfScan:
    def __init__(self, catalog: Catalog) -> None:
        self._lock = threading.Lock()
        self._catalog = catalog
        self._ids = itertools.count(1)
        self._current: _OpenScan | None = None
        self._last_completed: CompletedScan | None = None

    @property
    def scanning(self) -> bool:
        with self._lock:
            return self._current is not None

    def start(self) -> int:
        """Open a new session and return its id."""
        with self._lock:
            discarded = self._current
            self._current = _OpenScan(id=next(self._ids), started_at=utcnow(), tags={})
            scan_id = self._current.id

        if discarded is not None:
            logger.warning(
                "Scan %d restarted as %d; discarding %d tag(s)",
                discarded.id,
                scan_id,
                len(discarded.tags),
            )
        logger.info("Started scan id %d", scan_id)
        return scan_id

    def record_sighting(self, tag: str) -> bool:
        """
        Add *tag* to the open session.

        Returns ``False`` when no session is open and the sighting was dropped.
        """
        with self._lock:
            if self._current is None:
                accepted = False
            else:
                self._current.tags[tag] = None
                accepted = True
        logger.debug("Shelf sighting %s (%s)", tag, "kept" if accepted else "no scan")
        return accepted

    def end(self) -> EndScanResult:
        """Freeze the open session, or report that there was none."""
        with self._lock:
            current = self._current
            if current is None:
                return EndScanResult(ok=False, message="No active scan")
            completed = CompletedScan(
                id=current.id,
                started_at=current.started_at,
                finished_at=utcnow(),
                tags=tuple(current.tags),
            )
            self._last_completed = completed
            self._current = None

        logger.info(
            "Completed scan id %d with %d tag(s)", completed.id, len(completed.tags)
        )
        return EndScanResult(ok=True, scan=completed)

    @property
    def last_completed(self) -> CompletedScan | None:
        with self._lock:
            return self._last_completed

    def last_scan_with_matches(self) -> ScanMatches:
        """
        Return the last completed scan and the catalogued items it saw.

        ``scan`` is ``None`` if no scan has completed yet, which is distinct
        from a completed scan with no tags.
        """
        scan = self.last_completed
        if scan is None:
            return ScanMatches(scan=None, matched_items=[])
        return ScanMatches(
            scan=scan, matched_items=self._catalog.items_with_tags(scan.tags)
        )
