"""
core/pitch/melody.py — Fixed-grid melody quantization of a recording.

Turns the recorded frame buffer into a coarse piano-roll that can be played
back with a reference instrument:

    1. Sort frames by t (ingestion order is not guaranteed).
    2. Cut the timeline [0, last t] into buckets of `step_seconds`.
    3. Per bucket, keep frames with confidence ≥ min and a known pitch.
         - any of them carry a midi → majority vote, ties → first-seen midi
         - else average their Hz and round to the nearest note
         - else the bucket is a rest (midi=None)
    4. Run-length compress equal neighbours (rests included).

This is deliberately simple and deterministic: it ignores note onsets and
does no key detection. Bucket boundaries are grid-aligned, so the total
duration is the last timestamp rounded up to the grid.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable, Sequence

from core.pitch.notes import hz_to_midi
from core.pitch.types import MelodyEvent, RecordedFrame

_GRID_EPS: float = 1e-9
"""Tolerance so a timestamp such as 0.3 lands in bucket 3, not 2.999…"""


# ---------------------------------------------------------------------------
# Bucketing
# ---------------------------------------------------------------------------


def _bucket_index(t: float, step_seconds: float) -> int:
    return max(0, math.floor(t / step_seconds + _GRID_EPS))


def _bucket_frames(
    frames: Sequence[RecordedFrame], step_seconds: float
) -> list[list[RecordedFrame]]:
    """Distribute time-sorted frames over grid buckets covering [0, last t]."""
    n_buckets = _bucket_index(frames[-1].t, step_seconds) + 1
    buckets: list[list[RecordedFrame]] = [[] for _ in range(n_buckets)]
    for frame in frames:
        buckets[_bucket_index(frame.t, step_seconds)].append(frame)
    return buckets


def _bucket_midi(bucket: Iterable[RecordedFrame], min_confidence: float) -> int | None:
    """Representative note of one bucket, None for a rest."""
    valid = [
        f
        for f in bucket
        if f.confidence >= min_confidence and (f.midi is not None or f.frequency is not None)
    ]
    if not valid:
        return None

    midis = [f.midi for f in valid if f.midi is not None]
    if midis:
        # Counter preserves first-seen order for equal counts
        return Counter(midis).most_common(1)[0][0]

    frequencies = [f.frequency for f in valid if f.frequency is not None and f.frequency > 0]
    if not frequencies:
        return None
    return round(hz_to_midi(sum(frequencies) / len(frequencies)))


# ---------------------------------------------------------------------------
# Compression
# ---------------------------------------------------------------------------


def compress_events(events: Iterable[MelodyEvent]) -> list[MelodyEvent]:
    """Merge neighbouring events with the same midi, summing durations."""
    compressed: list[MelodyEvent] = []
    for event in events:
        if compressed and compressed[-1].midi == event.midi:
            last = compressed[-1]
            compressed[-1] = MelodyEvent(midi=last.midi, duration=last.duration + event.duration)
        else:
            compressed.append(event)
    return compressed


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def quantize_melody(
    frames: Sequence[RecordedFrame],
    step_seconds: float = 0.1,
    *,
    min_confidence: float = 0.25,
) -> list[MelodyEvent]:
    """Quantize a recording into run-length compressed melody events.

    Args:
        frames: Recorded frames in any order.
        step_seconds: Grid step in seconds. Must be > 0.
        min_confidence: Frames below this confidence are ignored.

    Returns:
        Ordered MelodyEvents; neighbours never share a midi value. Empty when
        there are no frames or the last timestamp is ≤ 0.

    Raises:
        ValueError: If step_seconds ≤ 0.

    Example:
        >>> events = quantize_melody(recorder.snapshot(), step_seconds=0.1)
        >>> [(e.midi, round(e.duration, 2)) for e in events]
        [(60, 0.5), (64, 0.5)]
    """
    if step_seconds <= 0:
        raise ValueError(f"step_seconds must be > 0, got {step_seconds}")
    if not frames:
        return []

    ordered = sorted(frames, key=lambda f: f.t)
    if ordered[-1].t <= 0:
        return []

    raw = (
        MelodyEvent(midi=_bucket_midi(bucket, min_confidence), duration=step_seconds)
        for bucket in _bucket_frames(ordered, step_seconds)
    )
    return compress_events(raw)


def has_voiced_events(events: Iterable[MelodyEvent]) -> bool:
    """True when at least one event is a note rather than a rest."""
    return any(event.midi is not None for event in events)


def total_duration(events: Iterable[MelodyEvent]) -> float:
    return sum(event.duration for event in events)
