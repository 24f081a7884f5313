"""
capture/recorder.py — Thread-safe buffer of decimated live-path results.

While a recording runs, every `sample_every`-th tick is turned into a
RecordedFrame stamped with seconds since start(). The buffer is append-only
during a recording and cleared by the next start().

Concurrency: the capture callback is the single writer; review code reads
through snapshot(), which returns an immutable tuple taken under the same
lock as append. Batch analysis therefore never sees a half-written buffer,
even if a caller forgets to stop the recording first.

This module owns a clock, which is why it lives in capture/ and not core/.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from core.pitch.types import RecordedFrame, StableNote
from infrastructure.metrics import record_recorded_frame

logger = logging.getLogger(__name__)


class FrameRecorder:
    """Accumulates RecordedFrames for one recording at a time.

    Args:
        sample_every: Keep one tick in N (default 6, ~10 frames/s at 60 Hz).
        clock: Monotonic seconds source. Injected in tests.

    Example::

        recorder = FrameRecorder()
        recorder.start()
        for note, confidence in ticks:
            recorder.record(note, confidence)
        recorder.stop()
        frames = recorder.snapshot()
    """

    def __init__(
        self,
        sample_every: int = 6,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        if sample_every < 1:
            raise ValueError(f"sample_every must be at least 1, got {sample_every}")
        self._sample_every = sample_every
        self._clock = clock
        self._frames: list[RecordedFrame] = []
        self._tick_counter = 0
        self._start_time = 0.0
        self._recording = False
        self._lock = threading.Lock()

    @property
    def is_recording(self) -> bool:
        with self._lock:
            return self._recording

    @property
    def sample_every(self) -> int:
        return self._sample_every

    @sample_every.setter
    def sample_every(self, value: int) -> None:
        if value < 1:
            raise ValueError(f"sample_every must be at least 1, got {value}")
        with self._lock:
            self._sample_every = value

    def __len__(self) -> int:
        with self._lock:
            return len(self._frames)

    def start(self) -> None:
        """Begin a new recording, discarding the previous buffer."""
        with self._lock:
            discarded = len(self._frames)
            self._frames = []
            self._tick_counter = 0
            self._start_time = self._clock()
            self._recording = True
        logger.info("Recording started (discarded %d frames)", discarded)

    def stop(self) -> None:
        """Stop appending. The buffer is kept until the next start()."""
        with self._lock:
            if not self._recording:
                return
            self._recording = False
            count = len(self._frames)
        logger.info("Recording stopped with %d frames", count)

    def record(self, note: StableNote | None, confidence: float) -> RecordedFrame | None:
        """Offer one tick's result to the buffer.

        Returns:
            The appended frame, or None when not recording or the tick was
            skipped by decimation.
        """
        with self._lock:
            if not self._recording:
                return None
            self._tick_counter += 1
            if self._tick_counter % self._sample_every != 0:
                return None
            frame = RecordedFrame(
                t=self._clock() - self._start_time,
                frequency=note.frequency if note is not None else None,
                midi=note.midi if note is not None else None,
                confidence=confidence,
                cents=note.cents_from_target if note is not None else None,
            )
            self._frames.append(frame)
        record_recorded_frame()
        return frame

    def snapshot(self) -> tuple[RecordedFrame, ...]:
        """Immutable copy of the current buffer."""
        with self._lock:
            return tuple(self._frames)
