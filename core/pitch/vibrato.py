"""
core/pitch/vibrato.py — Post-hoc stability and vibrato review of a recording.

Works on the cents series (offset from the target note) of the frames that
had a locked note. Everything here degrades to None / INSUFFICIENT_DATA
instead of raising, so the review panel can always render something.

Vibrato measurement:
    centred    = cents − mean(cents)
    crossings  = sign changes of `centred`, ignoring |centred| < dead zone
    rate_hz    = crossings / (2 × duration)      (two crossings per cycle)
    depth      = std(cents)
    detected   ⇔ rate ∈ [3, 8] Hz ∧ depth ≥ 6¢ ∧ crossings ≥ 4

Stability score:
    100 − std(cents) / 25 × 100, clamped to [0, 100] and rounded.

Feedback rules, first match wins:
    too few samples → low confidence → low stability → no vibrato data →
    weak vibrato → slow vibrato → fast vibrato → good
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from core.pitch.config import AnalysisConfig
from core.pitch.types import AnalysisReport, Challenge, RecordedFrame, VibratoStats


def _cents_frames(frames: Sequence[RecordedFrame]) -> list[RecordedFrame]:
    """Time-sorted frames that carry a cents value."""
    return sorted((f for f in frames if f.cents is not None), key=lambda f: f.t)


def count_crossings(values: Sequence[float], dead_zone: float) -> int:
    """Count sign changes of a centred series, skipping values inside the dead zone."""
    crossings = 0
    prev_sign = 0
    for value in values:
        if abs(value) < dead_zone:
            continue
        sign = 1 if value > 0 else -1
        if prev_sign != 0 and sign != prev_sign:
            crossings += 1
        prev_sign = sign
    return crossings


def stability_score(std_dev: float, spread_cents: float = 25.0) -> int:
    """Map a cents standard deviation to a 0–100 steadiness score."""
    raw = 100.0 - (std_dev / spread_cents) * 100.0
    # Halves round up
    return int(math.floor(min(max(raw, 0.0), 100.0) + 0.5))


def analyze_vibrato(
    frames: Sequence[RecordedFrame],
    config: AnalysisConfig | None = None,
) -> VibratoStats | None:
    """Measure vibrato rate and depth over the frames that carry cents.

    Returns:
        VibratoStats, or None when there are fewer than
        `config.min_valid_frames` cents samples or they span no time.
    """
    config = config if config is not None else AnalysisConfig()
    valid = _cents_frames(frames)
    if len(valid) < config.min_valid_frames:
        return None

    cents = np.array([f.cents for f in valid], dtype=np.float64)
    duration = valid[-1].t - valid[0].t
    if duration <= 0:
        return None

    crossings = count_crossings(cents - cents.mean(), config.dead_zone_cents)
    rate = crossings / (2.0 * duration)
    depth = float(np.std(cents))
    low, high = config.vibrato_rate_range
    detected = (
        low <= rate <= high
        and depth >= config.vibrato_min_depth_cents
        and crossings >= config.vibrato_min_crossings
    )
    return VibratoStats(rate_hz=rate, depth_cents=depth, crossings=crossings, detected=detected)


def classify_challenge(
    valid_frames: int,
    avg_confidence: float,
    score: int | None,
    vibrato: VibratoStats | None,
    config: AnalysisConfig | None = None,
) -> Challenge:
    """Pick the single most pressing feedback category."""
    config = config if config is not None else AnalysisConfig()
    if valid_frames < config.min_valid_frames:
        return Challenge.INSUFFICIENT_DATA
    if avg_confidence < config.low_confidence_threshold:
        return Challenge.LOW_CONFIDENCE
    if score is not None and score < config.low_stability_score:
        return Challenge.LOW_STABILITY
    if vibrato is None:
        return Challenge.NO_VIBRATO
    if not vibrato.detected and (
        vibrato.depth_cents < config.vibrato_min_depth_cents
        or vibrato.crossings < config.vibrato_min_crossings
    ):
        return Challenge.WEAK_VIBRATO
    low, high = config.vibrato_rate_range
    if vibrato.rate_hz < low:
        return Challenge.SLOW_VIBRATO
    if vibrato.rate_hz > high:
        return Challenge.FAST_VIBRATO
    return Challenge.GOOD


def analyze(
    frames: Sequence[RecordedFrame],
    config: AnalysisConfig | None = None,
) -> AnalysisReport:
    """Build the review report for one finished recording.

    Args:
        frames: Recorded frames in any order. May be empty.
        config: Review thresholds. Defaults to AnalysisConfig().

    Returns:
        AnalysisReport. Statistics are None when no frame carries cents;
        the challenge is INSUFFICIENT_DATA below `min_valid_frames`.
    """
    config = config if config is not None else AnalysisConfig()
    if not frames:
        return AnalysisReport(
            total_frames=0,
            valid_frames=0,
            avg_abs_cents=None,
            avg_confidence=0.0,
            cents_std_dev=None,
            stability_score=None,
            vibrato=None,
            challenge=Challenge.INSUFFICIENT_DATA,
        )

    valid = _cents_frames(frames)
    avg_confidence = float(np.mean([f.confidence for f in frames]))

    avg_abs_cents: float | None = None
    std_dev: float | None = None
    score: int | None = None
    if valid:
        cents = np.array([f.cents for f in valid], dtype=np.float64)
        avg_abs_cents = float(np.mean(np.abs(cents)))
        std_dev = float(np.std(cents))
        score = stability_score(std_dev, config.stability_spread_cents)

    vibrato = analyze_vibrato(valid, config)
    return AnalysisReport(
        total_frames=len(frames),
        valid_frames=len(valid),
        avg_abs_cents=avg_abs_cents,
        avg_confidence=avg_confidence,
        cents_std_dev=std_dev,
        stability_score=score,
        vibrato=vibrato,
        challenge=classify_challenge(len(valid), avg_confidence, score, vibrato, config),
    )
