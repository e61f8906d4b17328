"""
Quality Estimator.

Maps a (correct, response latency) pair to an SM-2 quality rating.

SM-2 Grade Scale:
0 - Complete blackout, wrong response
1 - Incorrect, but upon seeing answer remembered
2 - Incorrect, but answer seemed easy to recall
3 - Correct, but with significant difficulty
4 - Correct, with some hesitation
5 - Correct, with perfect recall
"""

from __future__ import annotations

import math
from enum import Enum

# Latency band upper bounds (ms)
FAST_RESPONSE_MS = 2000
MEDIUM_RESPONSE_MS = 5000
SLOW_RESPONSE_MS = 10000

# Latencies are clamped into [0, MAX_RESPONSE_MS] before any use
MAX_RESPONSE_MS = 3_600_000

PASSING_QUALITY = 3


def clamp_latency(response_time_ms: float) -> float:
    """
    Bring a raw latency into [0, MAX_RESPONSE_MS].

    Negative and NaN values become 0; infinite or huge values become the cap.
    """
    try:
        latency = float(response_time_ms)
    except OverflowError:
        # int too large for a float
        return float(MAX_RESPONSE_MS) if response_time_ms > 0 else 0.0
    if math.isnan(latency):
        return 0.0
    return min(max(latency, 0.0), float(MAX_RESPONSE_MS))


class LatencyBand(str, Enum):
    FAST = "fast"
    MEDIUM = "medium"
    SLOW = "slow"
    VERY_SLOW = "very_slow"

    @classmethod
    def from_ms(cls, response_time_ms: float) -> LatencyBand:
        """Classify a latency (clamped first)."""
        latency = clamp_latency(response_time_ms)
        if latency < FAST_RESPONSE_MS:
            return cls.FAST
        elif latency < MEDIUM_RESPONSE_MS:
            return cls.MEDIUM
        elif latency < SLOW_RESPONSE_MS:
            return cls.SLOW
        return cls.VERY_SLOW


def estimate_quality(correct: bool, response_time_ms: float) -> int:
    """
    Convert a graded response to an SM-2 quality rating.

    Args:
        correct: Whether the answer was correct
        response_time_ms: Time taken to respond

    Returns:
        Quality 0-5
    """
    band = LatencyBand.from_ms(response_time_ms)

    if not correct:
        # Incorrect responses: 0-2
        if band in (LatencyBand.FAST, LatencyBand.MEDIUM):
            return 2  # Quick wrong = almost knew it
        elif band is LatencyBand.SLOW:
            return 1
        return 0  # Complete blackout

    # Correct responses: 3-5
    if band is LatencyBand.FAST:
        return 5
    elif band is LatencyBand.MEDIUM:
        return 4
    return 3  # Correct but struggled


def is_passing(quality: int) -> bool:
    """Quality >= 3 advances the repetition streak."""
    return quality >= PASSING_QUALITY
