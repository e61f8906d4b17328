"""
Aggregate statistics and unlock gating.

compute_stats() is a single pass over one partition; accuracy is 0 when
the partition has no reviews at all. compute_activity() derives streaks and
session totals from the review log, so nothing here is stored separately.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .mastery import classify
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

# Reviews further apart than this start a new session
SESSION_GAP_MS = 30 * 60 * 1000


def compute_stats(
    items: Iterable[ReviewItem],
    item_type: ItemType,
    now: int,
    thresholds: MasteryThresholds | None = None,
) -> StatsSummary:
    """
    Summarize a partition for progress reporting.

    Args:
        items: Items of the partition
        item_type: The partition being summarized
        now: Reference time for the due count (epoch ms)
        thresholds: Mastery criteria (defaults if None)

    Returns:
        StatsSummary
    """
    counts = {status: 0 for status in MasteryStatus}
    total = 0
    total_reviews = 0
    correct_reviews = 0
    due_now = 0

    for item in items:
        total += 1
        counts[classify(item, thresholds)] += 1
        total_reviews += item.total_reviews
        correct_reviews += item.correct_reviews
        if item.next_review_date <= now:
            due_now += 1

    accuracy = correct_reviews / total_reviews * 100 if total_reviews > 0 else 0.0

    return StatsSummary(
        item_type=item_type,
        total=total,
        mastered=counts[MasteryStatus.MASTERED],
        learning=counts[MasteryStatus.LEARNING],
        not_started=counts[MasteryStatus.NOT_STARTED],
        overall_accuracy=accuracy,
        due_now=due_now,
    )


def build_progress_report(
    stats: Mapping[ItemType, StatsSummary],
    noun_unlock_percent: float = 80.0,
    verb_unlock_percent: float = 70.0,
    activity: ActivitySummary | None = None,
) -> ProgressReport:
    """
    Derive unlock gates from per-partition stats.

    Noun endings open once enough letters are mastered; verb endings need
    nouns open and enough noun endings mastered.
    """
    letters = stats.get(ItemType.LETTER, StatsSummary(ItemType.LETTER))
    nouns = stats.get(ItemType.NOUN_ENDING, StatsSummary(ItemType.NOUN_ENDING))

    nouns_unlocked = letters.total > 0 and letters.mastery_percent >= noun_unlock_percent
    verbs_unlocked = (
        nouns_unlocked and nouns.total > 0 and nouns.mastery_percent >= verb_unlock_percent
    )

    return ProgressReport(
        stats=dict(stats),
        nouns_unlocked=nouns_unlocked,
        verbs_unlocked=verbs_unlocked,
        activity=activity or ActivitySummary(),
    )


def compute_activity(
    entries: Iterable[ReviewLogEntry],
    session_gap_ms: int = SESSION_GAP_MS,
) -> ActivitySummary:
    """
    Summarize practice habits from the review log.

    Days are UTC calendar days. The first answer of each practice day
    decides the streak: correct extends it, wrong resets it to 0. Later
    answers on the same day leave it alone.

    Args:
        entries: Review log entries, in any order
        session_gap_ms: Idle time that separates two sessions

    Returns:
        ActivitySummary
    """
    streak = 0
    best = 0
    sessions = 0
    total = 0
    time_spent = 0
    last_day: int | None = None
    last_at: int | None = None

    for entry in sorted(entries, key=lambda e: e.reviewed_at):
        total += 1
        time_spent += entry.response_time_ms

        day = entry.reviewed_at // MS_PER_DAY
        if day != last_day:
            streak = streak + 1 if entry.correct else 0
            best = max(best, streak)
            last_day = day

        if last_at is None or entry.reviewed_at - last_at > session_gap_ms:
            sessions += 1
        last_at = entry.reviewed_at

    return ActivitySummary(
        current_streak=streak,
        best_streak=best,
        last_practice_date=last_at or 0,
        total_sessions=sessions,
        total_reviews=total,
        total_time_spent_ms=time_spent,
    )
