"""Tests for core/pitch/melody.py — fixed-grid melody quantization.

Test organisation:
    TestQuantizeMelody  — the C4/E4 scenario, ordering, rests, voting
    TestGridInvariants  — adjacency, total duration and round trip
    TestHelpers         — compress_events / has_voiced_events / total_duration
"""

from __future__ import annotations

import random

import pytest

from core.pitch.melody import compress_events, has_voiced_events, quantize_melody, total_duration
from core.pitch.types import MelodyEvent, RecordedFrame

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _two_note_recording(frame) -> list[RecordedFrame]:
    """50 frames of C4 then 50 of E4, one every 10 ms."""
    return [frame(i / 100, 60) for i in range(50)] + [frame(i / 100, 64) for i in range(50, 100)]


def _frames_from_buckets(
    frame, buckets: list[int | None], per_bucket: int = 10
) -> list[RecordedFrame]:
    """Synthesize a recording whose 100 ms buckets hold the given notes."""
    frames = []
    for i in range(len(buckets) * per_bucket):
        midi = buckets[i // per_bucket]
        t = i / (per_bucket * 10)
        if midi is None:
            frames.append(RecordedFrame(t=t, frequency=None, midi=None, confidence=0.0, cents=None))
        else:
            frames.append(frame(t, midi))
    return frames


# ---------------------------------------------------------------------------
# quantize_melody
# ---------------------------------------------------------------------------


class TestQuantizeMelody:
    def test_two_note_scenario(self, frame) -> None:
        events = quantize_melody(_two_note_recording(frame), 0.1)
        assert [e.midi for e in events] == [60, 64]
        assert events[0].duration == pytest.approx(0.5)
        assert events[1].duration == pytest.approx(0.5)

    def test_input_order_does_not_matter(self, frame) -> None:
        frames = _two_note_recording(frame)
        shuffled = frames[:]
        random.Random(7).shuffle(shuffled)
        assert quantize_melody(shuffled) == quantize_melody(frames)

    def test_empty_input(self) -> None:
        assert quantize_melody([]) == []

    def test_last_timestamp_zero(self, frame) -> None:
        assert quantize_melody([frame(0.0, 60), frame(0.0, 62)]) == []

    @pytest.mark.parametrize("step", [0.0, -0.1])
    def test_invalid_step_raises(self, frame, step: float) -> None:
        with pytest.raises(ValueError, match="step_seconds must be > 0"):
            quantize_melody([frame(0.5, 60)], step)

    def test_low_confidence_frames_become_rest(self, frame) -> None:
        frames = [frame(i / 100, 60, confidence=0.1) for i in range(30)]
        events = quantize_melody(frames)
        assert [e.midi for e in events] == [None]
        assert events[0].duration == pytest.approx(0.3)

    def test_leading_rest(self, frame) -> None:
        frames = [frame(t, 67) for t in (0.25, 0.28, 0.31, 0.35)]
        events = quantize_melody(frames)
        assert [e.midi for e in events] == [None, 67]
        assert events[0].duration == pytest.approx(0.2)
        assert events[1].duration == pytest.approx(0.2)

    def test_majority_vote_in_bucket(self, frame) -> None:
        frames = [frame(0.00, 62), frame(0.02, 60), frame(0.04, 60), frame(0.06, 60)]
        events = quantize_melody(frames)
        assert events == [MelodyEvent(midi=60, duration=0.1)]

    def test_vote_tie_goes_to_first_seen(self, frame) -> None:
        frames = [frame(0.00, 62), frame(0.02, 60), frame(0.04, 60), frame(0.06, 62)]
        assert quantize_melody(frames)[0].midi == 62

    def test_frequency_fallback_without_midi(self) -> None:
        """Frames without a midi but with Hz are averaged and rounded."""
        frames = [
            RecordedFrame(t=0.01, frequency=440.0, midi=None, confidence=0.9, cents=None),
            RecordedFrame(t=0.05, frequency=446.0, midi=None, confidence=0.9, cents=None),
        ]
        assert quantize_melody(frames)[0].midi == 69

    def test_silent_gap_becomes_rest(self, frame) -> None:
        frames = [frame(i / 100, 60) for i in range(20)]
        frames += [frame(i / 100, 60) for i in range(40, 60)]
        events = quantize_melody(frames)
        assert [e.midi for e in events] == [60, None, 60]
        assert events[1].duration == pytest.approx(0.2)


# ---------------------------------------------------------------------------
# Grid invariants
# ---------------------------------------------------------------------------


class TestGridInvariants:
    def test_no_adjacent_duplicates(self, frame) -> None:
        rng = random.Random(3)
        frames = [frame(i / 50, rng.choice([60, 60, 62, None])) for i in range(200)]
        events = quantize_melody(frames)
        for a, b in zip(events, events[1:]):
            assert a.midi != b.midi

    def test_total_duration_covers_last_timestamp(self, frame) -> None:
        """Durations sum to the last timestamp rounded up to the grid."""
        frames = [frame(t, 60) for t in (0.0, 0.13, 0.47, 0.93)]
        events = quantize_melody(frames, 0.1)
        total = total_duration(events)
        assert total == pytest.approx(1.0)
        assert 0.93 < total <= 0.93 + 0.1

    def test_durations_are_grid_multiples(self, frame) -> None:
        frames = _two_note_recording(frame)
        for event in quantize_melody(frames, 0.1):
            steps = event.duration / 0.1
            assert steps == pytest.approx(round(steps))

    def test_round_trip_through_frames(self, frame) -> None:
        """Events → synthetic frames → quantize gives the same events back."""
        expected = [
            MelodyEvent(midi=60, duration=0.3),
            MelodyEvent(midi=None, duration=0.2),
            MelodyEvent(midi=64, duration=0.4),
            MelodyEvent(midi=67, duration=0.1),
        ]
        buckets: list[int | None] = []
        for event in expected:
            buckets.extend([event.midi] * round(event.duration / 0.1))

        events = quantize_melody(_frames_from_buckets(frame, buckets), 0.1)

        assert [e.midi for e in events] == [e.midi for e in expected]
        for got, want in zip(events, expected):
            assert got.duration == pytest.approx(want.duration)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    def test_compress_merges_equal_neighbours(self) -> None:
        events = [
            MelodyEvent(60, 0.1),
            MelodyEvent(60, 0.1),
            MelodyEvent(None, 0.1),
            MelodyEvent(None, 0.1),
            MelodyEvent(60, 0.1),
        ]
        compressed = compress_events(events)
        assert [e.midi for e in compressed] == [60, None, 60]
        assert compressed[0].duration == pytest.approx(0.2)

    def test_compress_empty(self) -> None:
        assert compress_events([]) == []

    def test_has_voiced_events(self) -> None:
        assert has_voiced_events([MelodyEvent(None, 0.1), MelodyEvent(60, 0.1)]) is True
        assert has_voiced_events([MelodyEvent(None, 0.5)]) is False
        assert has_voiced_events([]) is False

    def test_total_duration(self) -> None:
        assert total_duration([MelodyEvent(60, 0.2), MelodyEvent(None, 0.3)]) == pytest.approx(0.5)
