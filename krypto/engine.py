"""
Review Engine.

Wires the SRS components to an item store and a catalogue:
- initialize(): materialize the universe into an empty store
- grade_review(): estimate quality, update SM-2 state, persist + log
- get_queue(): mixed batch of due and new items
- get_stats() / get_progress(): partition summaries and unlock gates
- reset() / export_data() / import_data(): whole-universe maintenance

Every time-dependent call takes `now` (epoch ms). now_ms() is the single
place the wall clock is read, for callers that want "right now".
"""

from __future__ import annotations

import json
import random
import time
from collections.abc import Mapping
from pathlib import Path

from loguru import logger

from .catalog import Catalog
from .config import Settings
from .srs.errors import ItemNotFound
from .srs.mastery import classify, is_mastered
from .srs.models import (
    ItemType,
    MasteryStatus,
    MasteryThresholds,
    ProgressReport,
    ReviewItem,
    ReviewLogEntry,
    StatsSummary,
)
from .srs.quality import clamp_latency, estimate_quality
from .srs.queue import QueueBuilder
from .srs.scheduler import SM2Scheduler
from .srs.stats import build_progress_report, compute_activity, compute_stats
from .store import ItemStore, create_store

EXPORT_FORMAT_VERSION = 1


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class ReviewEngine:
    """
    Spaced-repetition engine over an item store.

    Holds no mutable state besides its collaborators. Reviews of the same
    item must be serialized by the caller: grading is read-modify-write.
    """

    def __init__(
        self,
        store: ItemStore,
        catalog: Catalog | None = None,
        thresholds: MasteryThresholds | None = None,
        scheduler: SM2Scheduler | None = None,
        rng: random.Random | None = None,
        quiz_size: int = 10,
        new_item_ratio: float = 0.3,
        noun_unlock_percent: float = 80.0,
        verb_unlock_percent: float = 70.0,
    ):
        """
        Args:
            store: Durable item store
            catalog: Universe definition (built-in Greek catalogue if None)
            thresholds: Mastery criteria (defaults if None)
            scheduler: SM-2 updater (default config if None)
            rng: Random source for queue shuffling
            quiz_size: Default mixed-queue size
            new_item_ratio: Default maximum share of new items
            noun_unlock_percent: Letter mastery needed to open noun endings
            verb_unlock_percent: Noun mastery needed to open verb endings
        """
        self.store = store
        self.catalog = catalog or Catalog.default()
        self.thresholds = thresholds or MasteryThresholds()
        self.scheduler = scheduler or SM2Scheduler()
        self.queues = QueueBuilder(store, rng)
        self.quiz_size = quiz_size
        self.new_item_ratio = new_item_ratio
        self.noun_unlock_percent = noun_unlock_percent
        self.verb_unlock_percent = verb_unlock_percent

    @classmethod
    def from_settings(cls, settings: Settings, store: ItemStore | None = None) -> ReviewEngine:
        """
        Build an engine from settings.

        Raises:
            InvalidThreshold: if any threshold or session value is out of range
        """
        thresholds = settings.get_mastery_thresholds()
        settings.validate_session_config()
        catalog = Catalog.from_json(settings.catalog_path) if settings.catalog_path else None

        return cls(
            store=store or create_store(settings),
            catalog=catalog,
            thresholds=thresholds,
            quiz_size=settings.quiz_size,
            new_item_ratio=settings.new_item_ratio,
            noun_unlock_percent=settings.noun_unlock_percent,
            verb_unlock_percent=settings.verb_unlock_percent,
        )

    # =========================================================================
    # Universe
    # =========================================================================

    def initialize(self, now: int) -> int:
        """
        Create default-state items for every catalogue id.

        A store that already holds items is left untouched.

        Returns:
            Number of items created
        """
        if self.store.count() > 0:
            logger.debug("Item store already initialized")
            return 0

        items = self.catalog.materialize(now)
        self.store.put_many(items)

        counts = ", ".join(f"{t.value}={n}" for t, n in self.catalog.counts().items())
        logger.info(f"Initialized {len(items)} review items ({counts})")
        return len(items)

    def reset(self, now: int) -> int:
        """
        Drop all progress and recreate the default universe.

        Returns:
            Number of items recreated
        """
        self.store.clear()
        logger.info("Review progress reset")
        return self.initialize(now)

    # =========================================================================
    # Reviews
    # =========================================================================

    def get_item(self, item_id: str) -> ReviewItem:
        """
        Raises:
            ItemNotFound: if the id is not in the store
        """
        item = self.store.get(item_id)
        if item is None:
            raise ItemNotFound(item_id)
        return item

    def grade_review(
        self,
        item_id: str,
        correct: bool,
        response_time_ms: float,
        now: int,
    ) -> ReviewItem:
        """
        Record a review and update scheduling state.

        Args:
            item_id: The reviewed item
            correct: Whether the answer was correct
            response_time_ms: Time to answer in ms
            now: Review time (epoch ms)

        Returns:
            Updated ReviewItem

        Raises:
            ItemNotFound: if the id is not in the store
        """
        current = self.get_item(item_id)
        updated = self.scheduler.apply_review(current, correct, response_time_ms, now)

        entry = ReviewLogEntry(
            item_id=item_id,
            item_type=updated.item_type,
            correct=correct,
            response_time_ms=int(clamp_latency(response_time_ms)),
            quality=estimate_quality(correct, response_time_ms),
            reviewed_at=now,
        )
        self.store.save_review(updated, entry)

        logger.debug(
            f"Recorded review for {item_id}: q={entry.quality}, "
            f"interval={updated.interval_days}d, next_review={updated.next_review_date}"
        )
        return updated

    def review_history(
        self, item_id: str | None = None, limit: int | None = None
    ) -> list[ReviewLogEntry]:
        return self.store.list_reviews(item_id, limit)

    # =========================================================================
    # Queues
    # =========================================================================

    def get_queue(
        self,
        now: int,
        item_type: ItemType | None = None,
        size: int | None = None,
        new_item_ratio: float | None = None,
    ) -> list[ReviewItem]:
        """Mixed review batch; size and ratio default to the configured values."""
        return self.queues.build_mixed_queue(
            now,
            item_type,
            total_size=self.quiz_size if size is None else size,
            new_item_ratio=self.new_item_ratio if new_item_ratio is None else new_item_ratio,
        )

    def get_review_queue(
        self, now: int, item_type: ItemType | None = None, limit: int | None = None
    ) -> list[ReviewItem]:
        return self.queues.build_review_queue(now, item_type, limit)

    def get_new_items(
        self, item_type: ItemType | None = None, limit: int | None = None
    ) -> list[ReviewItem]:
        return self.queues.build_new_item_queue(item_type, limit)

    # =========================================================================
    # Mastery & Stats
    # =========================================================================

    def is_mastered(self, item: ReviewItem, thresholds: MasteryThresholds | None = None) -> bool:
        return is_mastered(item, thresholds or self.thresholds)

    def classify(self, item: ReviewItem) -> MasteryStatus:
        return classify(item, self.thresholds)

    def get_stats(self, item_type: ItemType, now: int) -> StatsSummary:
        return compute_stats(self.store.list_by_type(item_type), item_type, now, self.thresholds)

    def get_progress(self, now: int) -> ProgressReport:
        """Stats for every partition, unlock gates and practice activity, computed fresh."""
        stats = {item_type: self.get_stats(item_type, now) for item_type in ItemType}
        activity = compute_activity(self.store.list_reviews())
        return build_progress_report(
            stats, self.noun_unlock_percent, self.verb_unlock_percent, activity
        )

    # =========================================================================
    # Backup
    # =========================================================================

    def export_data(self, now: int) -> dict:
        """Snapshot of every item and the full review log (JSON-serializable)."""
        items = self.store.list_all()
        reviews = list(reversed(self.store.list_reviews()))
        logger.info(f"Exporting {len(items)} items and {len(reviews)} reviews")
        return {
            "version": EXPORT_FORMAT_VERSION,
            "exported_at": now,
            "items": [item.to_dict() for item in items],
            "reviews": [entry.to_dict() for entry in reviews],
        }

    def import_data(self, data: Mapping) -> int:
        """
        Upsert items and reviews from an export snapshot.

        Everything is validated first, then written in one store transaction.
        Reviews already in the log are skipped, so importing twice is a no-op.

        Returns:
            Number of items imported

        Raises:
            ValueError / KeyError: malformed snapshot
        """
        items = [ReviewItem.from_dict(raw) for raw in data.get("items", [])]
        reviews = [ReviewLogEntry.from_dict(raw) for raw in data.get("reviews", [])]

        added = self.store.import_snapshot(items, reviews)

        logger.info(f"Imported {len(items)} items and {added} new reviews")
        return len(items)


def load_snapshot(path: Path | str) -> dict:
    """Read an export snapshot written by save_snapshot()."""
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def save_snapshot(path: Path | str, data: Mapping) -> None:
    """Write an export snapshot as indented UTF-8 JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
