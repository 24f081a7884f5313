"""
core/pitch/segments.py — Contiguous sung segments for the karaoke lane.

Unlike the melody quantizer this is not grid-aligned: a segment is a run of
frames that were *continuously* sung, so the lane can draw one bar per held
note at its real start and end.

Continuation rule (against the segment's opening note):
    gap  = t − previous frame t     ≤ gap_tolerance
    |midi − segment midi|           ≤ midi_tolerance
Both must hold; otherwise the active segment closes and a new one opens.

Closing a segment:
    end ← min(end + hold_seconds, next frame t)   visual tail, capped
    end ← max(end, start + min_segment_seconds)   minimum visible length
A new segment never starts before the previous one ends, which keeps the
output ordered and non-overlapping even when the minimum-length extension
reaches past the next frame.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from core.pitch.types import RecordedFrame, Segment


@dataclass(frozen=True)
class KaraokePoint:
    """A filtered (t, midi) sample of the lane's point stream."""

    t: float
    midi: int


def karaoke_points(
    frames: Sequence[RecordedFrame],
    min_confidence: float = 0.25,
) -> list[KaraokePoint]:
    """Time-sorted points that carry a note and pass the confidence floor."""
    ordered = sorted(frames, key=lambda f: f.t)
    return [
        KaraokePoint(t=f.t, midi=f.midi)
        for f in ordered
        if f.midi is not None and f.confidence >= min_confidence
    ]


def _close(
    segment: Segment,
    *,
    next_t: float | None,
    hold_seconds: float,
    min_segment_seconds: float,
) -> Segment:
    """Apply the visual tail and the minimum length to a finished segment."""
    end = segment.end + hold_seconds
    if next_t is not None:
        end = min(end, next_t)
    end = max(end, segment.end, segment.start + min_segment_seconds)
    return Segment(midi=segment.midi, start=segment.start, end=end)


def build_segments(
    frames: Sequence[RecordedFrame],
    gap_tolerance: float = 0.22,
    midi_tolerance: int = 1,
    *,
    min_confidence: float = 0.25,
    min_segment_seconds: float = 0.08,
    hold_seconds: float = 0.12,
) -> list[Segment]:
    """Group a recording into continuously sung segments.

    Args:
        frames: Recorded frames in any order.
        gap_tolerance: Largest gap in seconds that still continues a segment.
        midi_tolerance: Largest semitone distance that still continues a segment.
        min_confidence: Frames below this confidence are discarded.
        min_segment_seconds: Every segment is at least this long. Must be > 0.
        hold_seconds: Tail added to a segment when it closes.

    Returns:
        Ordered, non-overlapping segments. Empty when no frame carries a note.

    Raises:
        ValueError: On negative tolerances or hold, or a non-positive minimum length.
    """
    if gap_tolerance < 0:
        raise ValueError(f"gap_tolerance must be non-negative, got {gap_tolerance}")
    if midi_tolerance < 0:
        raise ValueError(f"midi_tolerance must be non-negative, got {midi_tolerance}")
    if hold_seconds < 0:
        raise ValueError(f"hold_seconds must be non-negative, got {hold_seconds}")
    if min_segment_seconds <= 0:
        raise ValueError(f"min_segment_seconds must be > 0, got {min_segment_seconds}")

    points = karaoke_points(frames, min_confidence)
    if not points:
        return []

    segments: list[Segment] = []
    active = Segment(midi=points[0].midi, start=points[0].t, end=points[0].t)
    last_t = points[0].t

    for point in points[1:]:
        gap = point.t - last_t
        if gap <= gap_tolerance and abs(point.midi - active.midi) <= midi_tolerance:
            active = Segment(midi=active.midi, start=active.start, end=max(active.end, point.t))
        else:
            closed = _close(
                active,
                next_t=point.t,
                hold_seconds=hold_seconds,
                min_segment_seconds=min_segment_seconds,
            )
            segments.append(closed)
            start = max(point.t, closed.end)
            active = Segment(midi=point.midi, start=start, end=start)
        last_t = point.t

    segments.append(
        _close(
            active,
            next_t=None,
            hold_seconds=hold_seconds,
            min_segment_seconds=min_segment_seconds,
        )
    )
    return segments
