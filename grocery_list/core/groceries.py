"""Grocery list — persistence and in-memory list operations.

The whole list is stored as one JSON array under the groceryList settings
key and overwritten on every mutation.  save() and load() are best-effort:
failures are logged and dropped, never raised.
"""

import json
import logging
import sqlite3
import threading
from typing import Iterable, Optional

from grocery_list.config import get_setting, set_setting
from grocery_list.db.models import GroceryItem

logger = logging.getLogger(__name__)

STORAGE_KEY = "groceryList"


class DuplicateItemError(ValueError):
    """Raised when an added name matches an existing item (case-insensitive)."""

    def __init__(self, name: str):
        super().__init__("This item already exists in the list.")
        self.name = name


def save(items: list[GroceryItem]) -> None:
    """Overwrite the stored list with items."""
    try:
        set_setting(STORAGE_KEY, json.dumps([item.to_dict() for item in items]))
    except (TypeError, ValueError, sqlite3.Error) as e:
        logger.error("Failed to save grocery list: %s", e)


def load() -> list[GroceryItem]:
    """Return the stored list, or [] if nothing is stored or it can't be decoded."""
    try:
        raw = get_setting(STORAGE_KEY)
    except sqlite3.Error as e:
        logger.error("Failed to read grocery list: %s", e)
        return []
    if not raw:
        return []
    try:
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError("stored grocery list is not an array")
        return [GroceryItem.from_dict(entry) for entry in data]
    except ValueError as e:
        logger.warning("Discarding unreadable grocery list: %s", e)
        return []


class GroceryList:
    """The in-memory grocery list, saved wholesale after each change.

    Routes run in FastAPI's thread pool; every change and its save()
    happen under one lock.
    """

    def __init__(self, items: Optional[list[GroceryItem]] = None):
        self._items: list[GroceryItem] = list(items or [])
        self._lock = threading.RLock()

    @property
    def items(self) -> list[GroceryItem]:
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def load(self) -> None:
        """Reload from storage. Items already purchased are dropped."""
        with self._lock:
            self._items = [item for item in load() if not item.purchased]
            logger.info("Loaded %d grocery items", len(self._items))

    def save(self) -> None:
        with self._lock:
            save(self._items)

    def get(self, item_id: str) -> Optional[GroceryItem]:
        with self._lock:
            return next((item for item in self._items if item.id == item_id), None)

    def contains_name(self, name: str) -> bool:
        lowered = name.lower()
        with self._lock:
            return any(item.name.lower() == lowered for item in self._items)

    def add(self, name: str) -> Optional[GroceryItem]:
        """Append a new item. Returns None for a blank name.

        Raises DuplicateItemError if the name is already on the list.
        """
        trimmed = name.strip()
        if not trimmed:
            return None
        with self._lock:
            if self.contains_name(trimmed):
                raise DuplicateItemError(trimmed)
            item = GroceryItem(name=trimmed)
            self._items.append(item)
            self.save()
        return item

    def rename(self, item_id: str, name: str) -> Optional[GroceryItem]:
        """Rename an item. Blank names and unknown ids are ignored."""
        with self._lock:
            item = self.get(item_id)
            if item is None or not name:
                return None
            item.name = name
            self.save()
        return item

    def toggle_purchased(self, item_id: str) -> Optional[GroceryItem]:
        with self._lock:
            item = self.get(item_id)
            if item is None:
                return None
            item.purchased = not item.purchased
            self.save()
        return item

    def delete(self, item_id: str) -> bool:
        with self._lock:
            item = self.get(item_id)
            if item is None:
                return False
            self._items.remove(item)
            self.save()
        return True

    def delete_at(self, offsets: Iterable[int]) -> None:
        """Remove the items at the given positions (out-of-range offsets are skipped)."""
        drop = set(offsets)
        with self._lock:
            self._items = [item for i, item in enumerate(self._items) if i not in drop]
            self.save()

    def format_text(self) -> str:
        """Format the list as plain text for export/clipboard."""
        items = self.items
        if not items:
            return "No items needed."
        return "\n".join(
            f"[{'x' if item.purchased else ' '}] {item.name}" for item in items
        )
