"""
Latest sighting from the stationary check-in reader.

The console reads it to pre-fill the "add book" form; only the most recent
sighting is kept.
"""

import logging
import threading

from library_desk.circulation.errors import InvalidArgument
from library_desk.circulation.models import CheckinSighting, utcnow

logger = logging.getLogger(__name__)


class CheckinBuffer:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest: CheckinSighting | None = None

    def record(self, tag: str) -> CheckinSighting:
        if not tag:
            raise InvalidArgument("Missing tag")
        sighting = CheckinSighting(tag=tag, seen_at=utcnow())
        with self._lock:
            self._latest = sighting
        logger.info("Check-in tag: %s", tag)
        return sighting

    def latest(self) -> CheckinSighting | None:
        with self._lock:
            return self._latest
