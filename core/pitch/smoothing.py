"""
core/pitch/smoothing.py — Exponential moving average over accepted pitches.

The smoother holds a single value. Rejected estimates (no pitch, or
confidence under the floor) leave it untouched; only the session, acting on
the Stability Engine's silence reset, clears it.
"""

from __future__ import annotations

from core.pitch.types import PitchEstimate


class FrequencySmoother:
    """EMA filter: s ← s + alpha · (f − s), seeded by the first accepted f.

    Args:
        alpha: Smoothing factor in (0, 1]. 1.0 disables smoothing.
    """

    def __init__(self, alpha: float = 0.2) -> None:
        if not 0.0 < alpha <= 1.0:
            raise ValueError(f"alpha must be in (0, 1], got {alpha}")
        self.alpha = alpha
        self._value: float | None = None

    @property
    def value(self) -> float | None:
        """Current smoothed frequency, None until the first accepted estimate."""
        return self._value

    def update(self, estimate: PitchEstimate, min_confidence: float) -> bool:
        """Fold an estimate into the average.

        Returns:
            True if the estimate was accepted and the value moved.
        """
        if estimate.frequency is None or estimate.confidence < min_confidence:
            return False
        if self._value is None:
            self._value = estimate.frequency
        else:
            self._value += self.alpha * (estimate.frequency - self._value)
        return True

    def reset(self) -> None:
        self._value = None
