"""
SM-2 Item State Updater.

Applies a graded review to one ReviewItem:
- lifetime counters and running mean latency
- repetition streak and interval (1 day, 6 days, then interval * EF)
- easiness factor via the SM-2 recurrence, floored at 1.3
- next review timestamp derived from the interval

Time is always passed in; nothing here reads the clock.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from loguru import logger

from .models import MIN_EASE_FACTOR, MS_PER_DAY, ReviewItem
from .quality import clamp_latency, estimate_quality, is_passing


@dataclass(frozen=True)
class SM2Config:
    """Configuration for SM-2 algorithm."""

    minimum_easiness: float = MIN_EASE_FACTOR
    first_interval: int = 1  # Days after the first passing review
    second_interval: int = 6  # Days after the second passing review


def next_easiness(easiness_factor: float, quality: int, minimum: float = MIN_EASE_FACTOR) -> float:
    """EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)), floored at `minimum`."""
    ef_delta = 0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02)
    return max(minimum, easiness_factor + ef_delta)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class SM2Scheduler:
    """
    Implements the SM-2 spaced repetition algorithm.

    Each item carries:
    - Easiness Factor (EF): How easy the item is (2.5 default, min 1.3)
    - Interval: Days until next review (0 = due immediately)
    - Repetitions: Consecutive passing recalls
    """

    def __init__(self, config: SM2Config | None = None):
        self.config = config or SM2Config()

    def apply_review(
        self,
        item: ReviewItem,
        correct: bool,
        response_time_ms: float,
        now: int,
    ) -> ReviewItem:
        """
        Calculate the item state after one review.

        The input item is not modified.

        Args:
            item: Current state of the reviewed item
            correct: Whether the answer was correct
            response_time_ms: Time taken to answer
            now: Review time (epoch ms)

        Returns:
            Updated ReviewItem
        """
        quality = estimate_quality(correct, response_time_ms)
        latency = clamp_latency(response_time_ms)

        total = item.total_reviews + 1
        correct_count = item.correct_reviews + (1 if correct else 0)
        average = (item.average_response_time * (total - 1) + latency) / total

        if is_passing(quality):
            if item.repetitions == 0:
                interval = self.config.first_interval
            elif item.repetitions == 1:
                interval = self.config.second_interval
            else:
                interval = _round_half_up(item.interval_days * item.easiness_factor)
            repetitions = item.repetitions + 1
        else:
            # Lapse: start over, item is due again right away
            interval = 0
            repetitions = 0

        easiness = next_easiness(item.easiness_factor, quality, self.config.minimum_easiness)

        updated = replace(
            item,
            easiness_factor=easiness,
            interval_days=interval,
            repetitions=repetitions,
            last_review_date=now,
            next_review_date=now + interval * MS_PER_DAY,
            total_reviews=total,
            correct_reviews=correct_count,
            average_response_time=average,
        )

        logger.debug(
            f"SM-2 {item.id}: q={quality} reps={repetitions} "
            f"interval={interval}d ef={easiness:.2f}"
        )
        return updated
