"""
Review Queue Builder.

Builds review batches from the item store:
- Due queue: items past their next review date, struggling items first
- New queue: items never reviewed, in store order
- Mixed queue: capped share of new items, topped up from the due queue,
  then shuffled

An empty partition yields an empty list, never an error.
"""

from __future__ import annotations

import math
import random
from typing import TYPE_CHECKING

from loguru import logger

from .models import ItemType, ReviewItem

if TYPE_CHECKING:
    from ..store.base import ItemStore


def due_sort_key(item: ReviewItem) -> tuple[int, int]:
    """Fewer consecutive successes first, then oldest due date."""
    return (item.repetitions, item.next_review_date)


def shuffle_items(items: list[ReviewItem], rng: random.Random | None = None) -> list[ReviewItem]:
    """Fisher-Yates shuffle into a new list."""
    rng = rng or random.Random()
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result


class QueueBuilder:
    """
    Selects and orders items for the next review batch.

    Reads only; the store is never written from here.
    """

    def __init__(self, store: ItemStore, rng: random.Random | None = None):
        """
        Args:
            store: Item store to read from
            rng: Random source for shuffling (seed it for reproducible order)
        """
        self.store = store
        self.rng = rng or random.Random()

    def build_review_queue(
        self,
        now: int,
        item_type: ItemType | None = None,
        limit: int | None = None,
    ) -> list[ReviewItem]:
        """
        Get items that are due for review.

        Args:
            now: Reference time (epoch ms)
            item_type: Restrict to one partition (all items if None)
            limit: Maximum items to return (no limit if None)

        Returns:
            Due items, lowest repetitions first, then oldest due date
        """
        due = self.store.list_due(item_type, as_of=now)
        due.sort(key=due_sort_key)
        return due[:limit] if limit is not None else due

    def build_new_item_queue(
        self,
        item_type: ItemType | None = None,
        limit: int | None = None,
    ) -> list[ReviewItem]:
        """Get items that have never been reviewed, in store order."""
        if item_type is not None:
            items = self.store.list_by_type(item_type)
        else:
            items = self.store.list_all()

        new_items = [item for item in items if item.total_reviews == 0]
        return new_items[:limit] if limit is not None else new_items

    def build_mixed_queue(
        self,
        now: int,
        item_type: ItemType | None = None,
        total_size: int = 10,
        new_item_ratio: float = 0.3,
    ) -> list[ReviewItem]:
        """
        Build a shuffled batch of new and due items.

        The ratio caps the number of new items; the rest of the batch is
        filled from the due queue. When fewer items are available the batch
        is simply shorter.

        Args:
            now: Reference time (epoch ms)
            item_type: Restrict to one partition (all items if None)
            total_size: Maximum batch size
            new_item_ratio: Maximum share of new items (0-1)

        Returns:
            At most `total_size` distinct items in random order
        """
        if total_size < 0:
            raise ValueError(f"total_size must be >= 0, got {total_size}")
        if not 0.0 <= new_item_ratio <= 1.0:
            raise ValueError(f"new_item_ratio must be within [0, 1], got {new_item_ratio}")

        max_new = math.floor(total_size * new_item_ratio)
        new_items = self.build_new_item_queue(item_type, limit=max_new)

        # A new item is also due (its first review date is its creation time);
        # don't let it take a second slot from the due side.
        chosen = {item.id for item in new_items}
        due_items = [
            item for item in self.build_review_queue(now, item_type) if item.id not in chosen
        ]
        due_items = due_items[: total_size - len(new_items)]

        combined = shuffle_items(due_items + new_items, self.rng)

        logger.debug(
            f"Mixed queue ({item_type.value if item_type else 'all'}): "
            f"{len(due_items)} due + {len(new_items)} new = {len(combined)}"
        )
        return combined
