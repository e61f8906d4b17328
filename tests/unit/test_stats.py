"""
Unit tests for aggregate stats and unlock gating.
"""

import pytest

from krypto.srs.models import (
    MS_PER_DAY,
    ActivitySummary,
    ItemType,
    ReviewItem,
    ReviewLogEntry,
    StatsSummary,
)
from krypto.srs.stats import (
    SESSION_GAP_MS,
    build_progress_report,
    compute_activity,
    compute_stats,
)


def letter(name, now, total=0, correct=0, interval=0, due_in_days=0):
    return ReviewItem(
        id=f"letter-{name}",
        item_type=ItemType.LETTER,
        total_reviews=total,
        correct_reviews=correct,
        interval_days=interval,
        repetitions=1 if interval else 0,
        next_review_date=now + due_in_days * MS_PER_DAY,
    )


class TestComputeStats:
    def test_partition_counts(self, now):
        items = [
            letter("alpha", now),
            letter("beta", now, total=2, correct=1, interval=1, due_in_days=1),
            letter("gamma", now, total=6, correct=6, interval=15, due_in_days=15),
            letter("delta", now, total=5, correct=5, interval=0),
        ]
        stats = compute_stats(items, ItemType.LETTER, now)

        assert stats.total == 4
        assert stats.mastered == 1
        assert stats.learning == 2
        assert stats.not_started == 1
        assert stats.mastered + stats.learning + stats.not_started == stats.total
        assert stats.due_now == 2
        assert stats.overall_accuracy == pytest.approx(12 / 13 * 100)
        assert stats.mastery_percent == pytest.approx(25.0)

    def test_no_reviews_means_zero_accuracy(self, now):
        stats = compute_stats([letter("alpha", now)], ItemType.LETTER, now)
        assert stats.overall_accuracy == 0.0
        assert stats.not_started == 1

    def test_empty_partition(self, now):
        stats = compute_stats([], ItemType.VERB_ENDING, now)
        assert stats == StatsSummary(ItemType.VERB_ENDING)
        assert stats.mastery_percent == 0.0

    def test_to_dict(self, now):
        data = compute_stats([letter("alpha", now)], ItemType.LETTER, now).to_dict()
        assert data["item_type"] == "letter"
        assert data["mastery_percent"] == 0.0


def summary(item_type, total, mastered):
    return StatsSummary(item_type=item_type, total=total, mastered=mastered)


class TestProgressReport:
    def test_everything_locked_at_start(self):
        report = build_progress_report(
            {
                ItemType.LETTER: summary(ItemType.LETTER, 24, 0),
                ItemType.NOUN_ENDING: summary(ItemType.NOUN_ENDING, 40, 0),
            }
        )
        assert report.is_unlocked(ItemType.LETTER)
        assert not report.nouns_unlocked
        assert not report.verbs_unlocked

    def test_nouns_unlock_once_letters_mastered(self):
        report = build_progress_report(
            {
                ItemType.LETTER: summary(ItemType.LETTER, 4, 4),
                ItemType.NOUN_ENDING: summary(ItemType.NOUN_ENDING, 40, 0),
            }
        )
        assert report.nouns_unlocked
        assert not report.verbs_unlocked

    def test_just_below_noun_gate(self):
        report = build_progress_report({ItemType.LETTER: summary(ItemType.LETTER, 10, 7)})
        assert not report.is_unlocked(ItemType.NOUN_ENDING)

    def test_verbs_need_nouns_unlocked(self):
        report = build_progress_report(
            {
                ItemType.LETTER: summary(ItemType.LETTER, 10, 1),
                ItemType.NOUN_ENDING: summary(ItemType.NOUN_ENDING, 10, 10),
            }
        )
        assert not report.verbs_unlocked

    def test_verbs_unlock_once_nouns_mastered(self):
        report = build_progress_report(
            {
                ItemType.LETTER: summary(ItemType.LETTER, 10, 9),
                ItemType.NOUN_ENDING: summary(ItemType.NOUN_ENDING, 4, 3),
            }
        )
        assert report.is_unlocked(ItemType.VERB_ENDING)

    def test_custom_gates(self):
        report = build_progress_report(
            {ItemType.LETTER: summary(ItemType.LETTER, 10, 5)},
            noun_unlock_percent=50,
        )
        assert report.nouns_unlocked

    def test_activity_defaults_to_empty(self):
        report = build_progress_report({})
        assert report.activity == ActivitySummary()


def review(at, correct=True, ms=1000, item_id="letter-alpha"):
    return ReviewLogEntry(
        item_id=item_id,
        item_type=ItemType.LETTER,
        correct=correct,
        response_time_ms=ms,
        quality=5 if correct else 0,
        reviewed_at=at,
    )


class TestComputeActivity:
    def test_empty_log(self):
        assert compute_activity([]) == ActivitySummary()

    def test_streak_across_consecutive_days(self, now):
        entries = [review(now + day * MS_PER_DAY + 3600_000) for day in range(3)]
        activity = compute_activity(entries)
        assert activity.current_streak == 3
        assert activity.best_streak == 3
        assert activity.last_practice_date == now + 2 * MS_PER_DAY + 3600_000

    def test_wrong_first_answer_resets_streak(self, now):
        entries = [
            review(now),
            review(now + MS_PER_DAY),
            review(now + 2 * MS_PER_DAY, correct=False),
            review(now + 2 * MS_PER_DAY + 60_000),
        ]
        activity = compute_activity(entries)
        assert activity.current_streak == 0
        assert activity.best_streak == 2

    def test_later_answers_same_day_do_not_change_streak(self, now):
        entries = [
            review(now),
            review(now + 60_000, correct=False),
            review(now + MS_PER_DAY),
            review(now + MS_PER_DAY + 60_000, correct=False, item_id="letter-beta"),
        ]
        assert compute_activity(entries).current_streak == 2

    def test_order_of_entries_does_not_matter(self, now):
        entries = [review(now + 2 * MS_PER_DAY), review(now), review(now + MS_PER_DAY)]
        assert compute_activity(entries).current_streak == 3

    def test_sessions_and_time_spent(self, now):
        entries = [
            review(now, ms=1500),
            review(now + 60_000, ms=2500),
            review(now + 60_000 + SESSION_GAP_MS + 1, ms=4000),
        ]
        activity = compute_activity(entries)
        assert activity.total_sessions == 2
        assert activity.total_reviews == 3
        assert activity.total_time_spent_ms == 8000
