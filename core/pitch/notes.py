"""
core/pitch/notes.py — Pure pitch arithmetic and note naming.

Conversions between Hz, fractional MIDI note numbers and cents, plus the
display labels the capture UI shows next to a detected note. No state, no
I/O — every function here is deterministic.

Conventions:
    - A4 = 440 Hz = MIDI 69.
    - hz_to_midi() returns a FRACTIONAL note number; callers round when they
      need a discrete note (the Stability Engine and the quantizer do).
    - Cents are 1200 × log₂(f1 / f2); 100 cents = one semitone.
"""

from __future__ import annotations

import math
from enum import Enum

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

A4_HZ: float = 440.0
A4_MIDI: int = 69

NOTE_NAMES: tuple[str, ...] = (
    "C",
    "C#",
    "D",
    "D#",
    "E",
    "F",
    "F#",
    "G",
    "G#",
    "A",
    "A#",
    "B",
)

# Fixed-do solfège, same chromatic ordering as NOTE_NAMES
SOLFEGE_NAMES: tuple[str, ...] = (
    "ド",
    "ド#",
    "レ",
    "レ#",
    "ミ",
    "ファ",
    "ファ#",
    "ソ",
    "ソ#",
    "ラ",
    "ラ#",
    "シ",
)

TARGET_START_MIDI: int = 48
"""C3 — lowest selectable target note."""

TARGET_END_MIDI: int = 83
"""B5 — highest selectable target note."""

GOOD_CENTS: float = 10.0
OK_CENTS: float = 25.0


class TuningLevel(Enum):
    """How close the sung pitch is to the target, as shown on the gauge."""

    OFF = "off"
    GOOD = "good"
    OK = "ok"
    BAD = "bad"


# ---------------------------------------------------------------------------
# Conversions
# ---------------------------------------------------------------------------


def hz_to_midi(hz: float) -> float:
    """Convert a frequency to a fractional MIDI note number.

    Formula: midi = 69 + 12 × log₂(hz / 440)

    Args:
        hz: Frequency in Hz. Must be > 0.

    Returns:
        Fractional MIDI note number (not clamped, not rounded).

    Raises:
        ValueError: If hz ≤ 0.
    """
    if hz <= 0.0:
        raise ValueError(f"Hz must be > 0, got {hz}")
    return A4_MIDI + 12.0 * math.log2(hz / A4_HZ)


def midi_to_frequency(midi: float) -> float:
    """Theoretical equal-tempered frequency of a (possibly fractional) MIDI note."""
    return A4_HZ * 2.0 ** ((midi - A4_MIDI) / 12.0)


def cents_between(hz: float, reference_hz: float) -> float:
    """Signed distance from reference_hz to hz in cents.

    Raises:
        ValueError: If either frequency is ≤ 0.
    """
    if hz <= 0.0 or reference_hz <= 0.0:
        raise ValueError(f"Frequencies must be > 0, got {hz} and {reference_hz}")
    return 1200.0 * math.log2(hz / reference_hz)


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------


def midi_to_name(midi: float) -> str:
    """Scientific pitch name of the nearest note, e.g. 60 → 'C4', 61 → 'C#4'.

    Works for any integer (negative notes wrap the pitch class correctly).
    """
    rounded = round(midi)
    name = NOTE_NAMES[rounded % 12]
    octave = rounded // 12 - 1
    return f"{name}{octave}"


def midi_to_solfege(midi: float) -> str:
    """Fixed-do solfège syllable of the nearest note, e.g. 60 → 'ド'."""
    return SOLFEGE_NAMES[round(midi) % 12]


def target_options(
    start: int = TARGET_START_MIDI, end: int = TARGET_END_MIDI
) -> list[tuple[int, str]]:
    """Selectable target notes with their labels, e.g. (60, 'C4 (ド)').

    Raises:
        ValueError: If the range is empty or outside 0–127.
    """
    if not 0 <= start <= end <= 127:
        raise ValueError(f"Invalid target range {start}–{end}")
    return [(midi, f"{midi_to_name(midi)} ({midi_to_solfege(midi)})") for midi in range(start, end + 1)]


def tuning_level(
    cents: float | None,
    confidence: float,
    min_confidence: float,
) -> TuningLevel:
    """Classify a cents offset into a gauge level.

    OFF when there is no reliable reading; GOOD within ±10¢, OK within ±25¢,
    BAD beyond that.
    """
    if cents is None or confidence < min_confidence:
        return TuningLevel.OFF
    offset = abs(cents)
    if offset <= GOOD_CENTS:
        return TuningLevel.GOOD
    if offset <= OK_CENTS:
        return TuningLevel.OK
    return TuningLevel.BAD
