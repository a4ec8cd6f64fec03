"""
Catalog of RFID-tagged items.

The catalog is the join target for tag sightings: the loan ledger resolves
items by id and the shelf scan resolves them by tag.  Inserts are idempotent
on the tag, so re-adding a book that is already catalogued returns the stored
record unchanged.
"""

import logging
import threading
from collections.abc import Iterable

from library_desk.circulation.errors import InvalidArgument
from library_desk.circulation.models import Item, utcnow

logger = logging.getLogger(__name__)


class Catalog:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: dict[int, Item] = {}
        self._by_tag: dict[str, int] = {}

    def add_item(self, tag: str, title: str, author: str) -> Item:
        """Store a new item, or return the existing one carrying ``tag``."""
        tag = (tag or "").strip()
        title = (title or "").strip()
        author = (author or "").strip()
        if not tag or not title or not author:
            raise InvalidArgument("tag, title, author are required")

        with self._lock:
            existing_id = self._by_tag.get(tag)
            if existing_id is not None:
                return self._items[existing_id]

            item = Item(
                id=len(self._items) + 1,
                title=title,
                author=author,
                rfid_tag=tag,
                created_at=utcnow(),
            )
            self._items[item.id] = item
            self._by_tag[tag] = item.id

        logger.info("Added item %d %r (tag %s)", item.id, item.title, tag)
        return item

    def get(self, item_id: int) -> Item | None:
        with self._lock:
            return self._items.get(item_id)

    def by_tag(self, tag: str) -> Item | None:
        with self._lock:
            item_id = self._by_tag.get(tag)
            return self._items[item_id] if item_id is not None else None

    def items_with_tags(self, tags: Iterable[str]) -> list[Item]:
        """Return catalogued items whose tag is in *tags*, in catalog order."""
        wanted = set(tags)
        with self._lock:
            return [item for item in self._items.values() if item.rfid_tag in wanted]

    def list(self) -> list[Item]:
        with self._lock:
            return list(self._items.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
