"""
Spaced-repetition core.

Components:
- estimate_quality: (correct, latency) -> SM-2 quality 0-5
- SM2Scheduler: applies a graded review to one item
- is_mastered / is_learning / classify: mastery status from counters
- QueueBuilder: due, new and mixed review batches
- compute_stats: partition summary for progress reporting
- compute_activity: streaks and session totals from the review log
"""

from .errors import InvalidThreshold, ItemNotFound, KryptoError
from .models import (
    MS_PER_DAY,
    ActivitySummary,
    ItemType,
    MasteryStatus,
    MasteryThresholds,
    ProgressReport,
    ReviewItem,
    ReviewLogEntry,
    StatsSummary,
)
from .quality import MAX_RESPONSE_MS, LatencyBand, clamp_latency, estimate_quality, is_passing
from .scheduler import SM2Config, SM2Scheduler, next_easiness
from .mastery import classify, is_learning, is_mastered
from .stats import SESSION_GAP_MS, build_progress_report, compute_activity, compute_stats
from .queue import QueueBuilder, due_sort_key, shuffle_items

__all__ = [
    # Errors
    "KryptoError",
    "ItemNotFound",
    "InvalidThreshold",
    # Models
    "MS_PER_DAY",
    "ActivitySummary",
    "ItemType",
    "MasteryStatus",
    "MasteryThresholds",
    "ProgressReport",
    "ReviewItem",
    "ReviewLogEntry",
    "StatsSummary",
    # Quality
    "MAX_RESPONSE_MS",
    "LatencyBand",
    "clamp_latency",
    "estimate_quality",
    "is_passing",
    # Scheduling
    "SM2Config",
    "SM2Scheduler",
    "next_easiness",
    # Mastery
    "classify",
    "is_learning",
    "is_mastered",
    # Stats
    "SESSION_GAP_MS",
    "build_progress_report",
    "compute_activity",
    "compute_stats",
    # Queues
    "QueueBuilder",
    "due_sort_key",
    "shuffle_items",
]
