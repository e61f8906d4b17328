"""
Mastery Classifier.

Status is always recomputed from the raw counters, so a change of
thresholds applies to the whole history at once.
"""

from __future__ import annotations

from .models import MasteryStatus, MasteryThresholds, ReviewItem

DEFAULT_THRESHOLDS = MasteryThresholds()


def is_mastered(item: ReviewItem, thresholds: MasteryThresholds | None = None) -> bool:
    """
    An item is mastered when it has enough reviews, enough accuracy,
    and an interval at least as long as the configured floor.
    """
    t = thresholds or DEFAULT_THRESHOLDS
    if item.total_reviews < t.min_reviews:
        return False
    if item.correct_reviews / item.total_reviews < t.min_accuracy_percent / 100:
        return False
    return item.interval_days >= t.min_interval_days


def is_learning(item: ReviewItem, thresholds: MasteryThresholds | None = None) -> bool:
    """Started but not mastered."""
    return item.total_reviews > 0 and not is_mastered(item, thresholds)


def classify(item: ReviewItem, thresholds: MasteryThresholds | None = None) -> MasteryStatus:
    if item.total_reviews == 0:
        return MasteryStatus.NOT_STARTED
    if is_mastered(item, thresholds):
        return MasteryStatus.MASTERED
    return MasteryStatus.LEARNING
