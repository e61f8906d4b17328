"""
krypto: spaced-repetition scheduling for Greek letters and parsing endings.

Quick start:

    from krypto import ReviewEngine, InMemoryItemStore, now_ms

    engine = ReviewEngine(InMemoryItemStore())
    engine.initialize(now_ms())
    batch = engine.get_queue(now_ms())
    engine.grade_review(batch[0].id, correct=True, response_time_ms=1500, now=now_ms())
"""

from .catalog import Catalog
from .config import Settings, get_settings
from .engine import ReviewEngine, now_ms
from .srs import (
    MS_PER_DAY,
    ActivitySummary,
    InvalidThreshold,
    ItemNotFound,
    ItemType,
    KryptoError,
    MasteryStatus,
    MasteryThresholds,
    ProgressReport,
    ReviewItem,
    ReviewLogEntry,
    SM2Scheduler,
    StatsSummary,
    estimate_quality,
)
from .store import InMemoryItemStore, ItemStore, SqlItemStore, create_store

__version__ = "0.1.0"

__all__ = [
    "Catalog",
    "Settings",
    "get_settings",
    "ReviewEngine",
    "now_ms",
    "MS_PER_DAY",
    "ActivitySummary",
    "InvalidThreshold",
    "ItemNotFound",
    "ItemType",
    "KryptoError",
    "MasteryStatus",
    "MasteryThresholds",
    "ProgressReport",
    "ReviewItem",
    "ReviewLogEntry",
    "SM2Scheduler",
    "StatsSummary",
    "estimate_quality",
    "InMemoryItemStore",
    "ItemStore",
    "SqlItemStore",
    "create_store",
]
