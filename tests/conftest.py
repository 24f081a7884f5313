"""
Shared fixtures for the test suite.

Centralizes synthetic audio and recording factories so individual test
files don't need to repeat numpy boilerplate.
"""

from __future__ import annotations

from collections.abc import Callable

import numpy as np
import pytest

from core.pitch.notes import midi_to_frequency
from core.pitch.types import RecordedFrame

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SAMPLE_RATE: int = 44100
"""Capture sample rate used throughout the tests."""

FRAME_SIZE: int = 2048
"""Analyser frame size of the capture subsystem."""


# ---------------------------------------------------------------------------
# Synthetic audio
# ---------------------------------------------------------------------------


def make_sine(
    frequency: float,
    n_samples: int = FRAME_SIZE,
    sample_rate: int = SAMPLE_RATE,
    amplitude: float = 0.5,
) -> np.ndarray:
    """Pure sine frame as float32, like a browser analyser buffer."""
    t = np.arange(n_samples) / sample_rate
    return (amplitude * np.sin(2.0 * np.pi * frequency * t)).astype(np.float32)


@pytest.fixture
def sine() -> Callable[..., np.ndarray]:
    """Factory fixture: sine(frequency, n_samples=2048, amplitude=0.5)."""
    return make_sine


@pytest.fixture
def silent_frame() -> np.ndarray:
    return np.zeros(FRAME_SIZE, dtype=np.float32)


# ---------------------------------------------------------------------------
# Recording factories
# ---------------------------------------------------------------------------


def make_frame(
    t: float,
    midi: int | None = 60,
    *,
    confidence: float = 0.9,
    cents: float | None = None,
    frequency: float | None = None,
) -> RecordedFrame:
    """RecordedFrame whose frequency defaults to the exact pitch of `midi`."""
    if frequency is None and midi is not None:
        frequency = midi_to_frequency(midi)
    if cents is None and midi is not None:
        cents = 0.0
    return RecordedFrame(t=t, frequency=frequency, midi=midi, confidence=confidence, cents=cents)


@pytest.fixture
def frame() -> Callable[..., RecordedFrame]:
    """Factory fixture: frame(t, midi=60, confidence=0.9, cents=None, frequency=None)."""
    return make_frame


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced monotonic clock for recorder tests."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
