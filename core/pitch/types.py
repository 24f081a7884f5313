"""
core/pitch/types.py — Frozen data types for live pitch tracking and review.

All types are frozen dataclasses — immutable value objects that can be
safely passed from the live tick to the recorder and on to batch analysis.

Design principles:
    - No I/O, no state, no side effects.
    - Invariants are documented but NOT enforced at construction time —
      validation happens at creation sites (stability.py, melody.py, ...).
    - Note names are computed properties to avoid duplicate storage.
    - Collections inside results are tuples for hashability.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from core.pitch.notes import midi_to_name

# ---------------------------------------------------------------------------
# Live path
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PitchEstimate:
    """Raw per-frame output of the autocorrelation estimator.

    Invariants:
        0.0 <= confidence <= 1.0
        frequency is None or frequency > 0
    """

    frequency: float | None
    """Estimated fundamental in Hz. None when no periodicity was found."""

    confidence: float
    """Normalized peak autocorrelation. 0.0 for silent or DC frames."""

    @property
    def voiced(self) -> bool:
        return self.frequency is not None


SILENT_ESTIMATE = PitchEstimate(frequency=None, confidence=0.0)
"""What the gate hands downstream for a frame below the RMS floor."""


@dataclass(frozen=True)
class StableNote:
    """The Stability Engine's current locked note.

    Invariants:
        frequency > 0
        0 <= midi <= 127 for any audible input
    """

    frequency: float
    """Window median while on the locked note, else the locked note's exact Hz."""

    confidence: float

    midi: int
    """Locked MIDI note. Changes only after hold_frames agreeing frames."""

    cents_from_target: float
    """Signed offset of `frequency` from the selected target note."""

    @property
    def name(self) -> str:
        """Scientific pitch name, e.g. 'A4'."""
        return midi_to_name(self.midi)


# ---------------------------------------------------------------------------
# Recording buffer
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RecordedFrame:
    """One decimated sample of the live path during a recording.

    Invariants:
        t >= 0
        midi and cents are None exactly when no note was locked
    """

    t: float
    """Seconds since the recording started."""

    frequency: float | None
    midi: int | None
    confidence: float
    cents: float | None

    @property
    def name(self) -> str | None:
        return midi_to_name(self.midi) if self.midi is not None else None


# ---------------------------------------------------------------------------
# Batch results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MelodyEvent:
    """A run of identical grid buckets. midi=None is a rest."""

    midi: int | None
    duration: float


@dataclass(frozen=True)
class Segment:
    """A continuously sung run used to pace the karaoke lane.

    Invariants:
        end >= start
        end - start >= the configured minimum segment length
    """

    midi: int
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass(frozen=True)
class VibratoStats:
    """Periodic pitch modulation measured over a recording."""

    rate_hz: float
    """Oscillation rate: crossings / (2 × duration)."""

    depth_cents: float
    """Standard deviation of the cents series."""

    crossings: int
    """Sign changes of the mean-centred cents series outside the dead zone."""

    detected: bool


class Challenge(Enum):
    """Practice feedback category, chosen by fixed-priority rules."""

    INSUFFICIENT_DATA = "insufficient_data"
    LOW_CONFIDENCE = "low_confidence"
    LOW_STABILITY = "low_stability"
    NO_VIBRATO = "no_vibrato"
    WEAK_VIBRATO = "weak_vibrato"
    SLOW_VIBRATO = "slow_vibrato"
    FAST_VIBRATO = "fast_vibrato"
    GOOD = "good"

    @property
    def message(self) -> str:
        return _CHALLENGE_MESSAGES[self]


_CHALLENGE_MESSAGES: dict[Challenge, str] = {
    Challenge.INSUFFICIENT_DATA: "Too few usable samples. Record again.",
    Challenge.LOW_CONFIDENCE: "Input is unstable. Adjust microphone distance or volume.",
    Challenge.LOW_STABILITY: "Pitch wavers. Practise long tones to hold it steady.",
    Challenge.NO_VIBRATO: "Not enough sustained pitch to measure vibrato.",
    Challenge.WEAK_VIBRATO: "Vibrato is weak. Keep the airflow steady and let the pitch swing.",
    Challenge.SLOW_VIBRATO: "Vibrato is slow. Try a slightly faster pulse.",
    Challenge.FAST_VIBRATO: "Vibrato is fast. Let the pulse settle down a little.",
    Challenge.GOOD: "Recording looks good. Try another target note.",
}


@dataclass(frozen=True)
class AnalysisReport:
    """Aggregate review of one finished recording.

    Invariants:
        0 <= valid_frames <= total_frames
        stability_score is None or 0 <= stability_score <= 100
    """

    total_frames: int
    valid_frames: int
    """Frames carrying a cents value (a note was locked)."""

    avg_abs_cents: float | None
    avg_confidence: float
    cents_std_dev: float | None
    stability_score: int | None
    vibrato: VibratoStats | None
    challenge: Challenge

    @property
    def sufficient(self) -> bool:
        return self.challenge is not Challenge.INSUFFICIENT_DATA
