"""In-process item store, used for tests and throwaway sessions."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from ..srs.models import ItemType, ReviewItem, ReviewLogEntry


class InMemoryItemStore:
    """
    Dictionary-backed ItemStore.

    Keeps insertion order. Items are copied on the way in and out so a
    caller holding a returned item cannot change stored state.
    """

    def __init__(self, items: Iterable[ReviewItem] = ()):
        self._items: dict[str, ReviewItem] = {}
        self._reviews: list[ReviewLogEntry] = []
        self._review_keys: set[tuple[str, int]] = set()
        self.put_many(items)

    def get(self, item_id: str) -> ReviewItem | None:
        item = self._items.get(item_id)
        return replace(item) if item is not None else None

    def put(self, item: ReviewItem) -> None:
        self._items[item.id] = replace(item)

    def put_many(self, items: Iterable[ReviewItem]) -> None:
        for item in items:
            self.put(item)

    def list_by_type(self, item_type: ItemType) -> list[ReviewItem]:
        return [replace(i) for i in self._items.values() if i.item_type is item_type]

    def list_due(self, item_type: ItemType | None = None, *, as_of: int) -> list[ReviewItem]:
        items = self.list_by_type(item_type) if item_type is not None else self.list_all()
        return [i for i in items if i.next_review_date <= as_of]

    def list_all(self) -> list[ReviewItem]:
        return [replace(i) for i in self._items.values()]

    def count(self) -> int:
        return len(self._items)

    def clear(self) -> None:
        self._items.clear()
        self._reviews.clear()
        self._review_keys.clear()

    def save_review(self, item: ReviewItem, entry: ReviewLogEntry) -> None:
        if entry.key in self._review_keys:
            raise ValueError(f"Review already logged: {entry.item_id} at {entry.reviewed_at}")
        self.put(item)
        self._add_review(entry)

    def import_snapshot(
        self, items: Iterable[ReviewItem], entries: Iterable[ReviewLogEntry]
    ) -> int:
        items = [replace(i) for i in items]
        added: list[ReviewLogEntry] = []
        keys: set[tuple[str, int]] = set()
        for entry in entries:
            if entry.key not in self._review_keys and entry.key not in keys:
                keys.add(entry.key)
                added.append(entry)

        for item in items:
            self._items[item.id] = item
        for entry in added:
            self._add_review(entry)
        return len(added)

    def list_reviews(
        self, item_id: str | None = None, limit: int | None = None
    ) -> list[ReviewLogEntry]:
        # Newest first; among equal timestamps the later insert comes first
        ordered = sorted(reversed(self._reviews), key=lambda r: r.reviewed_at, reverse=True)
        reviews = [r for r in ordered if item_id is None or r.item_id == item_id]
        return reviews[:limit] if limit is not None else reviews

    def _add_review(self, entry: ReviewLogEntry) -> None:
        self._reviews.append(entry)
        self._review_keys.add(entry.key)
