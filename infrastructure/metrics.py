"""Prometheus metrics for live pitch tracking sessions.

Exposes how the tracker behaves while someone sings, so a dashboard can show
lock rate, dropouts and review latency rather than bare frame counts.

Metrics:
    pitch_frames_total            Counter of processed ticks by status
                                  (locked/hangover/silent/unvoiced)
    pitch_note_changes_total      Times the stable note lock moved
    pitch_recorded_frames_total   Frames appended to recording buffers
    pitch_recordings_total        Finished recordings by review challenge
    pitch_analysis_seconds        Histogram of batch review latency by stage

Usage::

    from infrastructure.metrics import LatencyTimer, record_analysis, record_frame

    record_frame(status="locked")
    with LatencyTimer() as t:
        events = quantize_melody(frames)
    record_analysis(stage="melody", latency_seconds=t.elapsed)
"""

from __future__ import annotations

import logging
import time

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

FRAME_STATUSES: frozenset[str] = frozenset({"locked", "hangover", "silent", "unvoiced"})

_REGISTRY = CollectorRegistry()

pitch_frames_total = Counter(
    "pitch_frames_total",
    "Processed live ticks by outcome",
    ["status"],
    registry=_REGISTRY,
)

pitch_note_changes_total = Counter(
    "pitch_note_changes_total",
    "Times the stable note lock moved to a new note",
    registry=_REGISTRY,
)

pitch_recorded_frames_total = Counter(
    "pitch_recorded_frames_total",
    "Frames appended to recording buffers",
    registry=_REGISTRY,
)

pitch_recordings_total = Counter(
    "pitch_recordings_total",
    "Finished recordings by review challenge",
    ["challenge"],
    registry=_REGISTRY,
)

pitch_analysis_seconds = Histogram(
    "pitch_analysis_seconds",
    "Batch review latency in seconds",
    ["stage"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
    registry=_REGISTRY,
)

logger.info("Prometheus metrics registry initialized")


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def record_frame(*, status: str) -> None:
    """Record one processed tick.

    Args:
        status: One of "locked", "hangover", "silent", "unvoiced".

    Raises:
        ValueError: If status is not a known tick outcome.
    """
    if status not in FRAME_STATUSES:
        raise ValueError(f"Unknown frame status {status!r}, valid: {sorted(FRAME_STATUSES)}")
    pitch_frames_total.labels(status=status).inc()


def record_note_change() -> None:
    """Increment the lock-moved counter."""
    pitch_note_changes_total.inc()


def record_recorded_frame() -> None:
    """Increment the recorded-frame counter."""
    pitch_recorded_frames_total.inc()


def record_recording(*, challenge: str) -> None:
    """Record a finished, reviewed recording.

    Args:
        challenge: Challenge value chosen by the review (e.g. "good").
    """
    pitch_recordings_total.labels(challenge=challenge).inc()


def record_analysis(*, stage: str, latency_seconds: float) -> None:
    """Observe the latency of one batch review stage.

    Args:
        stage: "melody", "segments" or "report".
        latency_seconds: Wall-clock time of the stage.
    """
    pitch_analysis_seconds.labels(stage=stage).observe(latency_seconds)


def get_metrics_response() -> tuple[bytes, str]:
    """Generate Prometheus text exposition format.

    Exposition hook for the host application: whatever HTTP server embeds
    the tracker mounts this body and content type at its /metrics route.

    Returns:
        Tuple of (body_bytes, content_type_string).
    """
    return generate_latest(_REGISTRY), CONTENT_TYPE_LATEST


class LatencyTimer:
    """Context manager for measuring latency.

    Usage::

        with LatencyTimer() as t:
            report = analyze(frames)
        record_analysis(stage="report", latency_seconds=t.elapsed)
    """

    def __init__(self) -> None:
        """Initialize timer."""
        self._start: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> LatencyTimer:
        """Start timing."""
        self._start = time.perf_counter()
        return self

    def __exit__(self, *_: object) -> None:
        """Stop timing and record elapsed."""
        self.elapsed = time.perf_counter() - self._start
