"""Tests for core/pitch/vibrato.py — stability score, vibrato and feedback.

Synthetic cents series are sampled at 100 frames/s, so a 5 Hz vibrato
crosses its mean once every 10 frames.

Test organisation:
    TestCountCrossings     — sign changes and the dead zone
    TestStabilityScore     — std-dev → 0..100 mapping
    TestAnalyzeVibrato     — rate, depth, detection
    TestChallenges         — one test per feedback category
    TestAnalyzeReport      — aggregate fields and empty input
"""

from __future__ import annotations

import math

import pytest

from core.pitch.config import AnalysisConfig
from core.pitch.types import Challenge, RecordedFrame, VibratoStats
from core.pitch.vibrato import (
    analyze,
    analyze_vibrato,
    classify_challenge,
    count_crossings,
    stability_score,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _vibrato_frames(
    frame,
    rate_hz: float,
    amplitude_cents: float,
    seconds: float = 2.0,
    *,
    confidence: float = 0.9,
) -> list[RecordedFrame]:
    """Frames whose cents follow amplitude · sin(2π · rate · t)."""
    n = round(seconds * 100)
    return [
        frame(
            i / 100,
            60,
            cents=amplitude_cents * math.sin(2 * math.pi * rate_hz * i / 100),
            confidence=confidence,
        )
        for i in range(n)
    ]


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------


class TestCountCrossings:
    def test_dead_zone_values_skipped(self) -> None:
        assert count_crossings([5.0, -5.0, 1.0, -1.0, 5.0], dead_zone=2.0) == 2

    def test_no_crossings_for_one_sided_series(self) -> None:
        assert count_crossings([3.0, 4.0, 5.0], dead_zone=2.0) == 0

    def test_empty(self) -> None:
        assert count_crossings([], dead_zone=2.0) == 0

    def test_zero_dead_zone(self) -> None:
        assert count_crossings([1.0, -1.0, 1.0], dead_zone=0.0) == 2


class TestStabilityScore:
    @pytest.mark.parametrize(
        "std_dev,expected",
        [(0.0, 100), (5.0, 80), (12.5, 50), (25.0, 0), (50.0, 0)],
    )
    def test_mapping(self, std_dev: float, expected: int) -> None:
        assert stability_score(std_dev) == expected

    def test_custom_spread(self) -> None:
        assert stability_score(10.0, spread_cents=50.0) == 80

    def test_half_rounds_up(self) -> None:
        # raw 98.5 → 99, raw 50.5 → 51
        assert stability_score(0.375) == 99
        assert stability_score(12.375) == 51


class TestAnalyzeVibrato:
    def test_five_hz_vibrato_detected(self, frame) -> None:
        stats = analyze_vibrato(_vibrato_frames(frame, 5.0, 10.0))
        assert stats is not None
        assert stats.crossings == 19
        assert stats.rate_hz == pytest.approx(19 / (2 * 1.99))
        assert stats.depth_cents == pytest.approx(10.0 / math.sqrt(2), rel=1e-3)
        assert stats.detected is True

    def test_too_few_frames_returns_none(self, frame) -> None:
        assert analyze_vibrato(_vibrato_frames(frame, 5.0, 10.0, seconds=0.05)) is None

    def test_zero_duration_returns_none(self, frame) -> None:
        frames = [frame(1.0, 60, cents=0.0) for _ in range(12)]
        assert analyze_vibrato(frames) is None

    def test_frames_without_cents_ignored(self, frame) -> None:
        frames = _vibrato_frames(frame, 5.0, 10.0)
        frames += [RecordedFrame(t=2.5, frequency=None, midi=None, confidence=0.0, cents=None)]
        stats = analyze_vibrato(frames)
        assert stats is not None
        assert stats.crossings == 19

    def test_custom_rate_window(self, frame) -> None:
        config = AnalysisConfig(vibrato_rate_range=(6.0, 9.0))
        stats = analyze_vibrato(_vibrato_frames(frame, 5.0, 10.0), config)
        assert stats is not None
        assert stats.detected is False


# ---------------------------------------------------------------------------
# Feedback categories
# ---------------------------------------------------------------------------


class TestChallenges:
    def test_good(self, frame) -> None:
        report = analyze(_vibrato_frames(frame, 5.0, 10.0))
        assert report.stability_score == 72
        assert report.challenge is Challenge.GOOD

    def test_insufficient_data(self, frame) -> None:
        report = analyze([frame(i / 100, 60) for i in range(5)])
        assert report.challenge is Challenge.INSUFFICIENT_DATA
        assert report.sufficient is False

    def test_low_confidence(self, frame) -> None:
        report = analyze(_vibrato_frames(frame, 5.0, 10.0, confidence=0.2))
        assert report.challenge is Challenge.LOW_CONFIDENCE

    def test_low_stability(self, frame) -> None:
        report = analyze(_vibrato_frames(frame, 5.0, 40.0))
        assert report.stability_score == 0
        assert report.challenge is Challenge.LOW_STABILITY

    def test_no_vibrato_when_no_time_span(self, frame) -> None:
        report = analyze([frame(1.0, 60, cents=0.0) for _ in range(12)])
        assert report.vibrato is None
        assert report.challenge is Challenge.NO_VIBRATO

    def test_weak_vibrato_shallow(self, frame) -> None:
        report = analyze(_vibrato_frames(frame, 5.0, 3.0))
        assert report.challenge is Challenge.WEAK_VIBRATO

    def test_weak_vibrato_flat_line(self, frame) -> None:
        report = analyze([frame(i / 100, 60, cents=0.0) for i in range(50)])
        assert report.stability_score == 100
        assert report.challenge is Challenge.WEAK_VIBRATO

    def test_slow_vibrato(self, frame) -> None:
        report = analyze(_vibrato_frames(frame, 2.0, 10.0, seconds=3.0))
        assert report.vibrato is not None
        assert report.vibrato.rate_hz < 3.0
        assert report.challenge is Challenge.SLOW_VIBRATO

    def test_fast_vibrato(self, frame) -> None:
        report = analyze(_vibrato_frames(frame, 10.0, 10.0))
        assert report.vibrato is not None
        assert report.vibrato.rate_hz > 8.0
        assert report.challenge is Challenge.FAST_VIBRATO

    def test_priority_low_confidence_before_low_stability(self, frame) -> None:
        report = analyze(_vibrato_frames(frame, 5.0, 40.0, confidence=0.2))
        assert report.challenge is Challenge.LOW_CONFIDENCE

    def test_classify_directly(self) -> None:
        vibrato = VibratoStats(rate_hz=5.0, depth_cents=8.0, crossings=20, detected=True)
        assert classify_challenge(30, 0.9, 80, vibrato) is Challenge.GOOD
        assert classify_challenge(9, 0.9, 80, vibrato) is Challenge.INSUFFICIENT_DATA
        assert classify_challenge(30, 0.9, 59, vibrato) is Challenge.LOW_STABILITY


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------


class TestAnalyzeReport:
    def test_empty_input(self) -> None:
        report = analyze([])
        assert report.total_frames == 0
        assert report.valid_frames == 0
        assert report.avg_abs_cents is None
        assert report.cents_std_dev is None
        assert report.stability_score is None
        assert report.avg_confidence == 0.0
        assert report.challenge is Challenge.INSUFFICIENT_DATA

    def test_aggregate_fields(self, frame) -> None:
        locked = [frame(i / 10, 60, cents=10.0 if i % 2 else -10.0) for i in range(20)]
        unlocked = [
            RecordedFrame(t=2.0 + i / 10, frequency=None, midi=None, confidence=0.0, cents=None)
            for i in range(5)
        ]
        report = analyze(locked + unlocked)
        assert report.total_frames == 25
        assert report.valid_frames == 20
        assert report.avg_abs_cents == pytest.approx(10.0)
        assert report.cents_std_dev == pytest.approx(10.0)
        assert report.stability_score == 60
        assert report.avg_confidence == pytest.approx(20 * 0.9 / 25)

    def test_only_unlocked_frames(self) -> None:
        frames = [
            RecordedFrame(t=i / 10, frequency=None, midi=None, confidence=0.0, cents=None)
            for i in range(20)
        ]
        report = analyze(frames)
        assert report.total_frames == 20
        assert report.valid_frames == 0
        assert report.stability_score is None
        assert report.challenge is Challenge.INSUFFICIENT_DATA
