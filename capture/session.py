"""
capture/session.py — One live pitch tracking session, tick by tick.

PitchSession wires the pure live path to the capture loop and the recording
buffer:

    audio frame (from the capture callback)
        │
        ├─ gated_estimate()     [core/pitch/estimator.py — RMS gate + autocorrelation]
        │       ↓
        ├─ FrequencySmoother    [core/pitch/smoothing.py — EMA over accepted Hz]
        │       ↓
        ├─ StabilityEngine      [core/pitch/stability.py — hysteresis note lock]
        │       ↓
        └─ FrameRecorder        [capture/recorder.py — decimated, timestamped buffer]

    finalize()
        ├─ quantize_melody()    [core/pitch/melody.py]
        ├─ build_segments()     [core/pitch/segments.py]
        └─ analyze()            [core/pitch/vibrato.py]

The caller owns the scheduling loop and its cadence; process_frame() never
blocks or sleeps. All mutable tracking state belongs to the instance, so
independent sessions never interfere.

Usage:
    session = PitchSession()
    session.start_recording()
    for frame in capture_frames():
        note, confidence = session.process_frame(frame, 44100, target_midi=60)
    summary = session.finalize()
    print(summary.report.challenge.message)
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np

from capture.recorder import FrameRecorder
from core.pitch.config import AnalysisConfig, TrackerConfig
from core.pitch.estimator import gated_estimate
from core.pitch.melody import quantize_melody
from core.pitch.notes import midi_to_name
from core.pitch.segments import build_segments
from core.pitch.smoothing import FrequencySmoother
from core.pitch.stability import StabilityEngine
from core.pitch.types import AnalysisReport, MelodyEvent, RecordedFrame, Segment, StableNote
from core.pitch.vibrato import analyze
from infrastructure.metrics import (
    LatencyTimer,
    record_analysis,
    record_frame,
    record_note_change,
    record_recording,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# SessionSummary — the output of finalize()
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SessionSummary:
    """Derived views of one finished recording.

    Attributes:
        frames:   The recorded frames the views were computed from.
        melody:   Fixed-grid melody events for reference playback.
        segments: Continuously sung segments for the karaoke lane.
        report:   Stability, vibrato and feedback statistics.
    """

    frames: tuple[RecordedFrame, ...]
    melody: tuple[MelodyEvent, ...]
    segments: tuple[Segment, ...]
    report: AnalysisReport


def review_recording(
    frames: Sequence[RecordedFrame],
    config: AnalysisConfig | None = None,
) -> SessionSummary:
    """Run melody, segment and report analysis over a frame buffer.

    Pure apart from metrics: the same frames always give the same summary.
    """
    config = config if config is not None else AnalysisConfig()
    snapshot = tuple(frames)

    with LatencyTimer() as timer:
        melody = quantize_melody(
            snapshot,
            config.melody_step_seconds,
            min_confidence=config.min_confidence,
        )
    record_analysis(stage="melody", latency_seconds=timer.elapsed)

    with LatencyTimer() as timer:
        segments = build_segments(
            snapshot,
            config.gap_tolerance_seconds,
            config.midi_tolerance,
            min_confidence=config.min_confidence,
            min_segment_seconds=config.min_segment_seconds,
            hold_seconds=config.segment_hold_seconds,
        )
    record_analysis(stage="segments", latency_seconds=timer.elapsed)

    with LatencyTimer() as timer:
        report = analyze(snapshot, config)
    record_analysis(stage="report", latency_seconds=timer.elapsed)

    return SessionSummary(
        frames=snapshot,
        melody=tuple(melody),
        segments=tuple(segments),
        report=report,
    )


# ---------------------------------------------------------------------------
# PitchSession
# ---------------------------------------------------------------------------


class PitchSession:
    """Live tick chain plus recording lifecycle for one singer.

    Args:
        config: Live tracking configuration.
        analysis_config: Review configuration used by finalize().
        recorder: Frame recorder, e.g. one with an injected clock. Its
            sample_every is set from config.record_every.

    Example:
        session = PitchSession(TrackerConfig(hold_frames=5))
        note, confidence = session.process_frame(samples, 48000, target_midi=57)
        session.configure(min_confidence=0.4)   # "sensitivity" control
    """

    def __init__(
        self,
        config: TrackerConfig | None = None,
        *,
        analysis_config: AnalysisConfig | None = None,
        recorder: FrameRecorder | None = None,
    ) -> None:
        self._config = config if config is not None else TrackerConfig()
        self.analysis_config = (
            analysis_config if analysis_config is not None else AnalysisConfig()
        )
        self._smoother = FrequencySmoother(self._config.smoothing)
        self._engine = StabilityEngine(self._config)
        if recorder is None:
            recorder = FrameRecorder(sample_every=self._config.record_every)
        else:
            # config.record_every governs decimation for injected recorders too
            recorder.sample_every = self._config.record_every
        self._recorder = recorder
        self._last_confidence = 0.0

        logger.info(
            "PitchSession initialized (range=%.0f–%.0f Hz, hold=%d, window=%d)",
            self._config.min_frequency,
            self._config.max_frequency,
            self._config.hold_frames,
            self._config.window_size,
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def config(self) -> TrackerConfig:
        return self._config

    @property
    def engine(self) -> StabilityEngine:
        return self._engine

    @property
    def smoothed_frequency(self) -> float | None:
        return self._smoother.value

    @property
    def last_confidence(self) -> float:
        return self._last_confidence

    @property
    def recorder(self) -> FrameRecorder:
        return self._recorder

    @property
    def is_recording(self) -> bool:
        return self._recorder.is_recording

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def configure(self, **changes: Any) -> TrackerConfig:
        """Replace tracker settings between ticks.

        Args:
            **changes: TrackerConfig fields to change.

        Returns:
            The new, validated configuration.

        Raises:
            TypeError: On an unknown field name.
            ValueError: If the resulting configuration is invalid.
        """
        new_config = dataclasses.replace(self._config, **changes)
        self._config = new_config
        self._engine.reconfigure(new_config)
        self._smoother.alpha = new_config.smoothing
        self._recorder.sample_every = new_config.record_every
        logger.info("Tracker reconfigured: %s", ", ".join(f"{k}={v!r}" for k, v in changes.items()))
        return new_config

    # ------------------------------------------------------------------
    # Live path
    # ------------------------------------------------------------------

    def process_frame(
        self,
        samples: np.ndarray | Sequence[float],
        sample_rate: float,
        target_midi: int,
    ) -> tuple[StableNote | None, float]:
        """Run one tick: Gate → Estimator → Smoother → Stability Engine.

        Args:
            samples: One mono audio frame, values in [-1, 1].
            sample_rate: Sample rate in Hz. Must be > 0.
            target_midi: Selected target note (0–127) for cents measurement.

        Returns:
            (stable note or None, this tick's confidence).

        Raises:
            ValueError: If sample_rate ≤ 0, the frame is empty, or
                target_midi is outside 0–127.
        """
        if not 0 <= target_midi <= 127:
            raise ValueError(f"target_midi must be in [0, 127], got {target_midi}")

        estimate = gated_estimate(samples, sample_rate, self._config)
        self._last_confidence = estimate.confidence

        accepted = self._smoother.update(estimate, self._config.min_confidence)
        frequency = self._smoother.value if accepted else None

        previous_lock = self._engine.stable_midi
        note = self._engine.update(frequency, estimate.confidence, target_midi)

        if self._engine.is_silent:
            self._smoother.reset()
        if self._engine.stable_midi is not None and self._engine.stable_midi != previous_lock:
            record_note_change()

        if note is not None:
            status = "locked" if accepted else "hangover"
        elif self._engine.silence_frames > 0:
            status = "silent"
        else:
            status = "unvoiced"
        record_frame(status=status)

        self._recorder.record(note, estimate.confidence)
        return note, estimate.confidence

    def reset(self) -> None:
        """Forget live tracking state (smoother and note lock)."""
        self._smoother.reset()
        self._engine.reset()
        self._last_confidence = 0.0

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def start_recording(self) -> None:
        self._recorder.start()

    def stop_recording(self) -> None:
        self._recorder.stop()

    def finalize(self) -> SessionSummary:
        """Stop recording (if running) and review the recorded frames.

        Idempotent: calling it again on an unchanged buffer gives an equal
        summary.
        """
        self._recorder.stop()
        summary = review_recording(self._recorder.snapshot(), self.analysis_config)
        record_recording(challenge=summary.report.challenge.value)

        voiced = [e for e in summary.melody if e.midi is not None]
        logger.info(
            "Recording reviewed: %d frames, %d melody events (%d voiced), %d segments, "
            "challenge=%s, first note=%s",
            len(summary.frames),
            len(summary.melody),
            len(voiced),
            len(summary.segments),
            summary.report.challenge.value,
            midi_to_name(voiced[0].midi) if voiced else "none",
        )
        return summary
