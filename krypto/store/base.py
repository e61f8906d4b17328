"""
Item store contract.

The engine only talks to storage through this protocol. Implementations
decide where data lives; they never apply scheduling rules.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from ..srs.models import ItemType, ReviewItem, ReviewLogEntry


@runtime_checkable
class ItemStore(Protocol):
    """Durable keyed storage for ReviewItems plus an append-only review log."""

    def get(self, item_id: str) -> ReviewItem | None: ...

    def put(self, item: ReviewItem) -> None:
        """Insert or replace an item (idempotent upsert)."""
        ...

    def put_many(self, items: Iterable[ReviewItem]) -> None: ...

    def list_by_type(self, item_type: ItemType) -> list[ReviewItem]: ...

    def list_due(self, item_type: ItemType | None = None, *, as_of: int) -> list[ReviewItem]:
        """Items with next_review_date <= as_of, optionally for one partition."""
        ...

    def list_all(self) -> list[ReviewItem]: ...

    def count(self) -> int: ...

    def clear(self) -> None:
        """Remove every item and the whole review log."""
        ...

    def save_review(self, item: ReviewItem, entry: ReviewLogEntry) -> None:
        """Persist a graded item and its log entry together, or neither."""
        ...

    def import_snapshot(
        self, items: Iterable[ReviewItem], entries: Iterable[ReviewLogEntry]
    ) -> int:
        """
        Upsert items and add log entries whose key is not stored yet, all or nothing.

        Returns:
            Number of log entries added
        """
        ...

    def list_reviews(
        self, item_id: str | None = None, limit: int | None = None
    ) -> list[ReviewLogEntry]:
        """Review history, most recent first."""
        ...
