"""
core/pitch/stability.py — Hysteresis state machine that locks a sung note.

Turns a jittery per-frame frequency into a note that only moves when the
singer actually moves. Three timescales work together:

    window median   — last W accepted frequencies; one outlier frame cannot
                      move the median.
    hold frames     — a new candidate note must win `hold_frames` ticks in a
                      row before the lock moves to it.
    silence/hangover — short dropouts re-emit the last note unchanged; a long
                      dropout (`silence_frames`) is true silence and clears
                      the lock.

State machine (per tick)::

    rejected frame ──→ silence_frames += 1, window/candidate cleared
        silence_frames ≥ silence_threshold  → lock cleared, emit None
        silence_frames ≤ hangover_threshold → emit last StableNote
        otherwise                           → emit None (lock kept)

    accepted frame ──→ silence_frames = 0, push to window
        candidate = round(hz_to_midi(median))
        same candidate as before → candidate_frames += 1, else restart at 1
        candidate_frames ≥ hold_frames → lock = candidate
        emit the locked note (median Hz when on it, exact Hz otherwise)

One engine instance per tracking session: the counters are owned state, so
independent sessions (and tests) never interfere.
"""

from __future__ import annotations

import logging
from collections import deque

import numpy as np

from core.pitch.config import TrackerConfig
from core.pitch.notes import cents_between, hz_to_midi, midi_to_frequency, midi_to_name
from core.pitch.types import StableNote

logger = logging.getLogger(__name__)


class StabilityEngine:
    """Flicker-free note lock over smoothed frequency estimates.

    Args:
        config: Tracker configuration. Reads min_confidence, hold_frames,
            window_size, silence_frames and hangover_frames.

    Example::

        engine = StabilityEngine(TrackerConfig())
        for frequency, confidence in estimates:
            note = engine.update(frequency, confidence, target_midi=60)
            if note is not None:
                print(note.name, f"{note.cents_from_target:+.1f}¢")
    """

    def __init__(self, config: TrackerConfig | None = None) -> None:
        self._config = config if config is not None else TrackerConfig()
        self._window: deque[float] = deque(maxlen=self._config.window_size)
        self._candidate_midi: int | None = None
        self._candidate_frames = 0
        self._stable_midi: int | None = None
        self._silence_frames = 0
        self._last_stable: StableNote | None = None

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def config(self) -> TrackerConfig:
        return self._config

    @property
    def stable_midi(self) -> int | None:
        """Currently locked MIDI note, None when nothing is locked."""
        return self._stable_midi

    @property
    def candidate_midi(self) -> int | None:
        return self._candidate_midi

    @property
    def silence_frames(self) -> int:
        return self._silence_frames

    @property
    def is_silent(self) -> bool:
        """True once the dropout has lasted long enough to count as silence."""
        return self._silence_frames >= self._config.silence_frames

    @property
    def last_stable(self) -> StableNote | None:
        return self._last_stable

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Forget everything: window, candidate, lock and counters."""
        self._window.clear()
        self._candidate_midi = None
        self._candidate_frames = 0
        self._stable_midi = None
        self._silence_frames = 0
        self._last_stable = None

    def reconfigure(self, config: TrackerConfig) -> None:
        """Apply new tuning between ticks. The window keeps its newest samples."""
        if config.window_size != self._config.window_size:
            self._window = deque(self._window, maxlen=config.window_size)
        self._config = config

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def _median_frequency(self) -> float | None:
        if not self._window:
            return None
        return float(np.median(self._window))

    def _clear_tracking(self) -> None:
        self._window.clear()
        self._candidate_midi = None
        self._candidate_frames = 0

    def _on_rejected(self) -> StableNote | None:
        """Handle a frame without a usable pitch."""
        self._silence_frames += 1
        self._clear_tracking()

        if self._silence_frames >= self._config.silence_frames:
            if self._stable_midi is not None:
                logger.debug(
                    "Lock released after %d silent frames (was %s)",
                    self._silence_frames,
                    midi_to_name(self._stable_midi),
                )
            self._stable_midi = None
            self._last_stable = None
            return None

        if self._silence_frames <= self._config.hangover_frames and self._last_stable is not None:
            return self._last_stable
        return None

    def _commit(self, candidate: int) -> None:
        """Move the lock to `candidate` once it has held long enough."""
        if self._candidate_frames < self._config.hold_frames:
            return
        if self._stable_midi != candidate:
            logger.debug(
                "Lock %s → %s after %d frames",
                midi_to_name(self._stable_midi) if self._stable_midi is not None else "none",
                midi_to_name(candidate),
                self._candidate_frames,
            )
        self._stable_midi = candidate

    def update(
        self,
        frequency: float | None,
        confidence: float,
        target_midi: int,
    ) -> StableNote | None:
        """Advance the state machine by one tick.

        Args:
            frequency: Smoothed frequency in Hz, or None when the tick had no
                accepted estimate.
            confidence: Confidence of this tick's estimate.
            target_midi: Note the singer is aiming for; cents are measured
                against its exact frequency.

        Returns:
            The locked StableNote, the previous one during a hangover, or None.
        """
        if frequency is None or confidence < self._config.min_confidence:
            return self._on_rejected()

        self._silence_frames = 0
        self._window.append(frequency)
        median = self._median_frequency()
        if median is None:
            return None

        candidate = round(hz_to_midi(median))
        if candidate == self._candidate_midi:
            self._candidate_frames += 1
        else:
            self._candidate_midi = candidate
            self._candidate_frames = 1
        self._commit(candidate)

        if self._stable_midi is None:
            return None

        if self._stable_midi == self._candidate_midi:
            emitted = median
        else:
            # Waiting for a new candidate to earn its hold: report the old
            # lock's exact pitch, not the drifting median.
            emitted = midi_to_frequency(self._stable_midi)

        note = StableNote(
            frequency=emitted,
            confidence=confidence,
            midi=self._stable_midi,
            cents_from_target=cents_between(emitted, midi_to_frequency(target_midi)),
        )
        self._last_stable = note
        return note
