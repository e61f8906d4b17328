"""
Data model for the spaced-repetition engine.

- ItemType: closed set of item categories (letters, noun endings, verb endings)
- ReviewItem: SM-2 state plus lifetime counters for one learnable fact
- MasteryThresholds: tunable mastery criteria
- MasteryStatus: tri-state classification derived from the counters
- StatsSummary / ActivitySummary / ProgressReport: aggregate reporting values
- ReviewLogEntry: one graded review, appended to the store's history

All timestamps are integer epoch milliseconds.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum

from .errors import InvalidThreshold

MS_PER_DAY = 86_400_000

DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3


# =============================================================================
# Item Types
# =============================================================================


class ItemType(str, Enum):
    """Partition of the item universe, scheduled independently."""

    LETTER = "letter"
    NOUN_ENDING = "noun-ending"
    VERB_ENDING = "verb-ending"

    @property
    def id_prefix(self) -> str:
        """Prefix used for item ids of this type."""
        return {
            ItemType.LETTER: "letter",
            ItemType.NOUN_ENDING: "noun",
            ItemType.VERB_ENDING: "verb",
        }[self]

    @property
    def display_name(self) -> str:
        return {
            ItemType.LETTER: "Alphabet",
            ItemType.NOUN_ENDING: "Noun Endings",
            ItemType.VERB_ENDING: "Verb Endings",
        }[self]


class MasteryStatus(str, Enum):
    """Derived learning state. The three members partition the universe."""

    NOT_STARTED = "not_started"
    LEARNING = "learning"
    MASTERED = "mastered"

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            MasteryStatus.NOT_STARTED: "dim",
            MasteryStatus.LEARNING: "yellow",
            MasteryStatus.MASTERED: "green",
        }[self]


# =============================================================================
# Review Item
# =============================================================================


@dataclass
class ReviewItem:
    """
    Scheduling state for a single learnable fact.

    Invariants:
    - easiness_factor >= 1.3
    - repetitions >= 0, interval_days >= 0
    - total_reviews >= correct_reviews >= 0
    - next_review_date is derived from interval_days and the review time
    """

    id: str
    item_type: ItemType
    easiness_factor: float = DEFAULT_EASE_FACTOR
    interval_days: int = 0  # 0 = due immediately
    repetitions: int = 0  # Consecutive reviews with quality >= 3
    next_review_date: int = 0
    last_review_date: int = 0  # 0 = never reviewed
    total_reviews: int = 0
    correct_reviews: int = 0
    average_response_time: float = 0.0  # Running mean, ms

    def __post_init__(self):
        self.item_type = ItemType(self.item_type)

    @classmethod
    def new(cls, item_id: str, item_type: ItemType, now: int) -> ReviewItem:
        """Create an item in its default state, due at `now`."""
        return cls(id=item_id, item_type=item_type, next_review_date=now)

    def is_due(self, now: int) -> bool:
        return now >= self.next_review_date

    @property
    def is_new(self) -> bool:
        return self.total_reviews == 0

    @property
    def accuracy(self) -> float:
        """Lifetime accuracy as a 0-1 fraction (0 when never reviewed)."""
        if self.total_reviews == 0:
            return 0.0
        return self.correct_reviews / self.total_reviews

    def to_dict(self) -> dict:
        data = asdict(self)
        data["item_type"] = self.item_type.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> ReviewItem:
        """
        Build an item from a dictionary (JSON backup or store row).

        Raises:
            KeyError: if `id` or `item_type` is missing
            ValueError: if the item type is unknown or the counters are inconsistent
        """
        item = cls(
            id=str(data["id"]),
            item_type=ItemType(data["item_type"]),
            easiness_factor=float(data.get("easiness_factor", DEFAULT_EASE_FACTOR)),
            interval_days=int(data.get("interval_days", 0)),
            repetitions=int(data.get("repetitions", 0)),
            next_review_date=int(data.get("next_review_date", 0)),
            last_review_date=int(data.get("last_review_date", 0)),
            total_reviews=int(data.get("total_reviews", 0)),
            correct_reviews=int(data.get("correct_reviews", 0)),
            average_response_time=float(data.get("average_response_time", 0.0)),
        )
        if item.easiness_factor < MIN_EASE_FACTOR:
            raise ValueError(f"{item.id}: easiness_factor below {MIN_EASE_FACTOR}")
        if item.interval_days < 0 or item.repetitions < 0:
            raise ValueError(f"{item.id}: negative interval or repetitions")
        if not 0 <= item.correct_reviews <= item.total_reviews:
            raise ValueError(f"{item.id}: correct_reviews exceeds total_reviews")
        return item


# =============================================================================
# Configuration Values
# =============================================================================


@dataclass(frozen=True)
class MasteryThresholds:
    """Criteria an item must meet to count as mastered."""

    min_reviews: int = 5
    min_accuracy_percent: float = 80.0
    min_interval_days: int = 7

    def __post_init__(self):
        if self.min_reviews <= 0:
            raise InvalidThreshold("min_reviews", self.min_reviews)
        if not 0 < self.min_accuracy_percent <= 100:
            raise InvalidThreshold(
                "min_accuracy_percent", self.min_accuracy_percent, "must be in (0, 100]"
            )
        if self.min_interval_days <= 0:
            raise InvalidThreshold("min_interval_days", self.min_interval_days)


# =============================================================================
# Reporting Values
# =============================================================================


@dataclass(frozen=True)
class StatsSummary:
    """Aggregate progress for one item-type partition."""

    item_type: ItemType
    total: int = 0
    mastered: int = 0
    learning: int = 0
    not_started: int = 0
    overall_accuracy: float = 0.0  # Percent, 0 when nothing reviewed
    due_now: int = 0

    @property
    def mastery_percent(self) -> float:
        if self.total == 0:
            return 0.0
        return self.mastered / self.total * 100

    def to_dict(self) -> dict:
        data = asdict(self)
        data["item_type"] = self.item_type.value
        data["mastery_percent"] = self.mastery_percent
        return data


@dataclass(frozen=True)
class ActivitySummary:
    """Practice habits derived from the review log."""

    current_streak: int = 0  # Practice days in a row started with a correct answer
    best_streak: int = 0
    last_practice_date: int = 0  # 0 = never practiced
    total_sessions: int = 0
    total_reviews: int = 0
    total_time_spent_ms: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ProgressReport:
    """Stats for every partition plus the unlock gates derived from them."""

    stats: dict[ItemType, StatsSummary] = field(default_factory=dict)
    nouns_unlocked: bool = False
    verbs_unlocked: bool = False
    activity: ActivitySummary = field(default_factory=ActivitySummary)

    def is_unlocked(self, item_type: ItemType) -> bool:
        if item_type is ItemType.LETTER:
            return True
        if item_type is ItemType.NOUN_ENDING:
            return self.nouns_unlocked
        if item_type is ItemType.VERB_ENDING:
            return self.verbs_unlocked
        raise ValueError(f"Unknown item type: {item_type}")


@dataclass(frozen=True)
class ReviewLogEntry:
    """
    A single graded review.

    (item_id, reviewed_at) identifies an entry; a store keeps at most one per key.
    """

    item_id: str
    item_type: ItemType
    correct: bool
    response_time_ms: int
    quality: int
    reviewed_at: int

    def __post_init__(self):
        object.__setattr__(self, "item_type", ItemType(self.item_type))

    @property
    def key(self) -> tuple[str, int]:
        return (self.item_id, self.reviewed_at)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["item_type"] = self.item_type.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> ReviewLogEntry:
        return cls(
            item_id=str(data["item_id"]),
            item_type=ItemType(data["item_type"]),
            correct=bool(data["correct"]),
            response_time_ms=int(data["response_time_ms"]),
            quality=int(data["quality"]),
            reviewed_at=int(data["reviewed_at"]),
        )
