"""
Configuration dataclasses for live pitch tracking and recording review.

These immutable config objects decouple tuning constants from function
signatures. A "sensitivity" control swaps in a new config between ticks
(see capture/session.py); nothing here is hardcoded in the algorithms.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TrackerConfig:
    """
    Configuration for the live tick chain (Gate → Estimator → Smoother → Stability).

    Attributes:
        min_frequency: Lowest detectable fundamental in Hz. Sets the longest
            autocorrelation lag. Defaults to 55 Hz (A1).
        max_frequency: Highest detectable fundamental in Hz. Sets the shortest lag.
        min_confidence: Estimates below this are treated as "no pitch".
        min_rms: Frames quieter than this RMS are silenced before estimation.
        smoothing: EMA factor applied to accepted frequencies (0 < alpha <= 1).
        hold_frames: Consecutive agreeing frames needed before the lock moves.
        window_size: Number of recent frequencies in the median window.
        silence_frames: Consecutive rejected frames that reset the lock.
        hangover_frames: Rejected frames during which the last note is re-emitted.
            Must be smaller than silence_frames.
        record_every: Keep every N-th tick while recording.

    Example:
        >>> config = TrackerConfig(hold_frames=6, min_confidence=0.4)
        >>> session = PitchSession(config)
    """

    min_frequency: float = 55.0
    max_frequency: float = 1000.0
    min_confidence: float = 0.25
    min_rms: float = 0.01
    smoothing: float = 0.2
    hold_frames: int = 4
    window_size: int = 7
    silence_frames: int = 10
    hangover_frames: int = 6
    record_every: int = 6

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.min_frequency <= 0:
            raise ValueError(f"min_frequency must be positive, got {self.min_frequency}")
        if self.max_frequency <= self.min_frequency:
            raise ValueError(
                f"max_frequency ({self.max_frequency}) must be greater than "
                f"min_frequency ({self.min_frequency})"
            )
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ValueError(f"min_confidence must be in [0, 1], got {self.min_confidence}")
        if self.min_rms < 0:
            raise ValueError(f"min_rms must be non-negative, got {self.min_rms}")
        if not 0.0 < self.smoothing <= 1.0:
            raise ValueError(f"smoothing must be in (0, 1], got {self.smoothing}")
        if self.hold_frames < 1:
            raise ValueError(f"hold_frames must be at least 1, got {self.hold_frames}")
        if self.window_size < 1:
            raise ValueError(f"window_size must be at least 1, got {self.window_size}")
        if self.silence_frames < 1:
            raise ValueError(f"silence_frames must be at least 1, got {self.silence_frames}")
        if self.hangover_frames < 0:
            raise ValueError(f"hangover_frames must be non-negative, got {self.hangover_frames}")
        if self.hangover_frames >= self.silence_frames:
            raise ValueError(
                f"hangover_frames ({self.hangover_frames}) must be less than "
                f"silence_frames ({self.silence_frames})"
            )
        if self.record_every < 1:
            raise ValueError(f"record_every must be at least 1, got {self.record_every}")


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Configuration for batch review of a finished recording.

    Attributes:
        melody_step_seconds: Grid step of the melody quantizer.
        min_confidence: Frames below this are ignored by quantizer and segmenter.
        gap_tolerance_seconds: Largest time gap that still continues a segment.
        midi_tolerance: Largest semitone wobble that still continues a segment.
        min_segment_seconds: Segments are extended to at least this length.
        segment_hold_seconds: Visual tail added to a segment when it closes.
        min_valid_frames: Cents samples needed before any statistics are trusted.
        dead_zone_cents: Deviations smaller than this never count as a crossing.
        vibrato_rate_range: Inclusive (low, high) vibrato rate window in Hz.
        vibrato_min_depth_cents: Minimum cents spread for a detected vibrato.
        vibrato_min_crossings: Minimum crossings for a detected vibrato.
        low_confidence_threshold: Average confidence under which input is unstable.
        low_stability_score: Stability scores under this trigger LOW_STABILITY.
        stability_spread_cents: Cents std-dev that maps to a score of zero.
    """

    melody_step_seconds: float = 0.1
    min_confidence: float = 0.25
    gap_tolerance_seconds: float = 0.22
    midi_tolerance: int = 1
    min_segment_seconds: float = 0.08
    segment_hold_seconds: float = 0.12
    min_valid_frames: int = 10
    dead_zone_cents: float = 2.0
    vibrato_rate_range: tuple[float, float] = (3.0, 8.0)
    vibrato_min_depth_cents: float = 6.0
    vibrato_min_crossings: int = 4
    low_confidence_threshold: float = 0.3
    low_stability_score: int = 60
    stability_spread_cents: float = 25.0

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.melody_step_seconds <= 0:
            raise ValueError(
                f"melody_step_seconds must be positive, got {self.melody_step_seconds}"
            )
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ValueError(f"min_confidence must be in [0, 1], got {self.min_confidence}")
        if self.gap_tolerance_seconds < 0:
            raise ValueError(
                f"gap_tolerance_seconds must be non-negative, got {self.gap_tolerance_seconds}"
            )
        if self.midi_tolerance < 0:
            raise ValueError(f"midi_tolerance must be non-negative, got {self.midi_tolerance}")
        if self.min_segment_seconds <= 0:
            raise ValueError(
                f"min_segment_seconds must be positive, got {self.min_segment_seconds}"
            )
        if self.segment_hold_seconds < 0:
            raise ValueError(
                f"segment_hold_seconds must be non-negative, got {self.segment_hold_seconds}"
            )
        if self.min_valid_frames < 1:
            raise ValueError(f"min_valid_frames must be at least 1, got {self.min_valid_frames}")
        if self.dead_zone_cents < 0:
            raise ValueError(f"dead_zone_cents must be non-negative, got {self.dead_zone_cents}")
        low, high = self.vibrato_rate_range
        if not 0.0 < low < high:
            raise ValueError(f"vibrato_rate_range must satisfy 0 < low < high, got {low}–{high}")
        if self.vibrato_min_depth_cents < 0:
            raise ValueError(
                f"vibrato_min_depth_cents must be non-negative, got {self.vibrato_min_depth_cents}"
            )
        if self.vibrato_min_crossings < 0:
            raise ValueError(
                f"vibrato_min_crossings must be non-negative, got {self.vibrato_min_crossings}"
            )
        if not 0.0 <= self.low_confidence_threshold <= 1.0:
            raise ValueError(
                f"low_confidence_threshold must be in [0, 1], got {self.low_confidence_threshold}"
            )
        if not 0 <= self.low_stability_score <= 100:
            raise ValueError(
                f"low_stability_score must be in [0, 100], got {self.low_stability_score}"
            )
        if self.stability_spread_cents <= 0:
            raise ValueError(
                f"stability_spread_cents must be positive, got {self.stability_spread_cents}"
            )


# Pre-defined configurations for common use cases

DEFAULT_TRACKER_CONFIG = TrackerConfig()
"""Default live tracking: 55–1000 Hz, confidence 0.25, 4 hold frames."""

SENSITIVE_TRACKER_CONFIG = TrackerConfig(min_confidence=0.15, min_rms=0.003, hold_frames=3)
"""Quiet singers or distant microphones: lower floors, faster lock."""

STRICT_TRACKER_CONFIG = TrackerConfig(min_confidence=0.45, min_rms=0.02, hold_frames=6)
"""Noisy rooms: higher floors, slower lock."""

DEFAULT_ANALYSIS_CONFIG = AnalysisConfig()
"""Default review: 100 ms melody grid, 220 ms / ±1 semitone segment tolerance."""
