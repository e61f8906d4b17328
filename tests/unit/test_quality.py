"""
Unit tests for the Quality Estimator.

Band edges are the interesting part: each bound is exclusive.
"""

import pytest

from krypto.srs.quality import (
    MAX_RESPONSE_MS,
    LatencyBand,
    clamp_latency,
    estimate_quality,
    is_passing,
)


class TestLatencyBand:
    @pytest.mark.parametrize(
        "ms,band",
        [
            (0, LatencyBand.FAST),
            (1999, LatencyBand.FAST),
            (2000, LatencyBand.MEDIUM),
            (4999, LatencyBand.MEDIUM),
            (5000, LatencyBand.SLOW),
            (9999, LatencyBand.SLOW),
            (10000, LatencyBand.VERY_SLOW),
            (60000, LatencyBand.VERY_SLOW),
        ],
    )
    def test_band_edges(self, ms, band):
        assert LatencyBand.from_ms(ms) is band

    def test_negative_latency_treated_as_zero(self):
        assert LatencyBand.from_ms(-250) is LatencyBand.FAST


class TestEstimateQuality:
    def test_correct_answers_grade_by_speed(self):
        assert estimate_quality(True, 1500) == 5
        assert estimate_quality(True, 3000) == 4
        assert estimate_quality(True, 7000) == 3
        assert estimate_quality(True, 15000) == 3

    def test_wrong_answers_grade_by_speed(self):
        assert estimate_quality(False, 1500) == 2
        assert estimate_quality(False, 3000) == 2
        assert estimate_quality(False, 7000) == 1
        assert estimate_quality(False, 12000) == 0

    def test_correct_always_passing(self):
        for ms in (0, 2500, 8000, 100000):
            assert is_passing(estimate_quality(True, ms))

    def test_wrong_never_passing(self):
        for ms in (0, 2500, 8000, 100000):
            assert not is_passing(estimate_quality(False, ms))

    def test_fractional_latency(self):
        assert estimate_quality(True, 1999.9) == 5


class TestClampLatency:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            (1500, 1500.0),
            (-250, 0.0),
            (float("nan"), 0.0),
            (float("-inf"), 0.0),
            (float("inf"), MAX_RESPONSE_MS),
            (10**30, MAX_RESPONSE_MS),
            (10**400, MAX_RESPONSE_MS),
        ],
    )
    def test_clamped_into_range(self, raw, expected):
        assert clamp_latency(raw) == expected

    def test_infinite_latency_still_graded(self):
        assert estimate_quality(True, float("inf")) == 3
        assert estimate_quality(False, float("inf")) == 0
        assert estimate_quality(False, 10**400) == 0
