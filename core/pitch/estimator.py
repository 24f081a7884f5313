"""
core/pitch/estimator.py — Per-frame fundamental frequency estimation.

Two pure stages run on every captured frame:

    Signal Gate  — RMS silence detector. Frames under the floor never reach
                   the estimator, so noise-floor artifacts cannot produce a
                   phantom low-energy "pitch".
    Estimator    — time-domain autocorrelation over a bounded lag range.

Algorithm (estimate_pitch):
    1. Subtract the frame mean; total variance = Σ(x − mean)².
    2. variance < 1e-7 → silent/DC frame → (None, 0.0).
    3. For each lag in [floor(sr / fmax), floor(sr / fmin)]:
           r(lag) = Σ x[i] · x[i + lag] over the overlapping region
    4. Keep the single highest positive r (strict >, so ties keep the lowest lag).
    5. confidence = clamp(r_best / variance, 0, 1); frequency = sr / lag_best.

Cost is O(N · L) per frame. At capture frame sizes (≤ a few thousand
samples) one numpy dot product per lag is fast enough for a 60 Hz tick and
keeps the peak-picking easy to reason about.
"""

from __future__ import annotations

import math

import numpy as np

from core.pitch.config import TrackerConfig
from core.pitch.types import SILENT_ESTIMATE, PitchEstimate

_MIN_VARIANCE: float = 1e-7
"""Sum of squared deviations below which a frame is treated as DC/silence."""


# ---------------------------------------------------------------------------
# Input handling
# ---------------------------------------------------------------------------


def _as_frame(samples: np.ndarray | list[float]) -> np.ndarray:
    """Coerce samples to a 1-D float64 array.

    Raises:
        ValueError: If the frame is empty or not one-dimensional.
    """
    frame = np.asarray(samples, dtype=np.float64)
    if frame.ndim != 1:
        raise ValueError(f"Frame must be 1-D, got shape {frame.shape}")
    if frame.size == 0:
        raise ValueError("Frame must contain at least one sample")
    return frame


def _lag_range(n_samples: int, sample_rate: float, min_freq: float, max_freq: float) -> range:
    """Inclusive lag range covering [min_freq, max_freq], bounded by the frame."""
    min_lag = max(1, math.floor(sample_rate / max_freq))
    max_lag = min(n_samples - 1, math.floor(sample_rate / min_freq))
    return range(min_lag, max_lag + 1)


# ---------------------------------------------------------------------------
# Signal Gate
# ---------------------------------------------------------------------------


def frame_rms(samples: np.ndarray | list[float]) -> float:
    """Root-mean-square level of a frame: sqrt(mean(x²))."""
    frame = _as_frame(samples)
    return float(np.sqrt(np.mean(frame**2)))


def is_silent(samples: np.ndarray | list[float], min_rms: float) -> bool:
    """True when the frame's RMS is below the configured floor."""
    return frame_rms(samples) < min_rms


# ---------------------------------------------------------------------------
# Estimator
# ---------------------------------------------------------------------------


def estimate_pitch(
    samples: np.ndarray | list[float],
    sample_rate: float,
    *,
    min_frequency: float = 55.0,
    max_frequency: float = 1000.0,
) -> PitchEstimate:
    """Estimate the fundamental frequency of one frame by autocorrelation.

    Args:
        samples: Mono frame, values in [-1, 1]. Any 1-D array-like.
        sample_rate: Sample rate in Hz. Must be > 0.
        min_frequency: Lowest frequency searched (sets the longest lag).
        max_frequency: Highest frequency searched (sets the shortest lag).

    Returns:
        PitchEstimate. frequency is None for DC/silent frames (confidence 0.0)
        and for frames without any positively correlated lag (confidence is
        still reported).

    Raises:
        ValueError: If sample_rate ≤ 0 or the frame is empty.
    """
    if sample_rate <= 0:
        raise ValueError(f"sample_rate must be > 0, got {sample_rate}")
    frame = _as_frame(samples)

    centered = frame - frame.mean()
    variance = float(np.dot(centered, centered))
    if variance < _MIN_VARIANCE:
        return SILENT_ESTIMATE

    best_lag = -1
    best_correlation = 0.0
    for lag in _lag_range(centered.size, sample_rate, min_frequency, max_frequency):
        correlation = float(np.dot(centered[:-lag], centered[lag:]))
        if correlation > best_correlation:
            best_correlation = correlation
            best_lag = lag

    confidence = min(max(best_correlation / variance, 0.0), 1.0)
    if best_lag <= 0:
        return PitchEstimate(frequency=None, confidence=confidence)
    return PitchEstimate(frequency=sample_rate / best_lag, confidence=confidence)


def gated_estimate(
    samples: np.ndarray | list[float],
    sample_rate: float,
    config: TrackerConfig,
) -> PitchEstimate:
    """Run the gate, then the estimator, with the bounds from `config`.

    Silent frames short-circuit to (None, 0.0) without estimating.
    """
    if sample_rate <= 0:
        raise ValueError(f"sample_rate must be > 0, got {sample_rate}")
    if is_silent(samples, config.min_rms):
        return SILENT_ESTIMATE
    return estimate_pitch(
        samples,
        sample_rate,
        min_frequency=config.min_frequency,
        max_frequency=config.max_frequency,
    )
