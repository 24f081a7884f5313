"""
core/pitch — Live singing pitch tracking and recording review.

Provides the pure analysis pipeline behind the practice tuner. Per tick a
frame flows Gate → Estimator → Smoother → Stability Engine; per finished
recording the frame buffer is reviewed by the melody quantizer, the karaoke
segmenter and the vibrato analyzer.

Architecture note:
    numpy is a pure computation library (no I/O, no side effects). Audio
    capture, clocks and recording buffers live in capture/; nothing in this
    package reads a device or a file.

Public API:
    Types:      PitchEstimate, StableNote, RecordedFrame, MelodyEvent, Segment,
                VibratoStats, AnalysisReport, Challenge, TuningLevel
    Config:     TrackerConfig, AnalysisConfig
    Live:       estimate_pitch, gated_estimate, FrequencySmoother, StabilityEngine
    Review:     quantize_melody, build_segments, analyze
"""

from core.pitch.config import (
    DEFAULT_ANALYSIS_CONFIG,
    DEFAULT_TRACKER_CONFIG,
    SENSITIVE_TRACKER_CONFIG,
    STRICT_TRACKER_CONFIG,
    AnalysisConfig,
    TrackerConfig,
)
from core.pitch.estimator import estimate_pitch, frame_rms, gated_estimate, is_silent
from core.pitch.melody import has_voiced_events, quantize_melody, total_duration
from core.pitch.notes import (
    TuningLevel,
    cents_between,
    hz_to_midi,
    midi_to_frequency,
    midi_to_name,
    midi_to_solfege,
    target_options,
    tuning_level,
)
from core.pitch.segments import KaraokePoint, build_segments, karaoke_points
from core.pitch.smoothing import FrequencySmoother
from core.pitch.stability import StabilityEngine
from core.pitch.types import (
    AnalysisReport,
    Challenge,
    MelodyEvent,
    PitchEstimate,
    RecordedFrame,
    Segment,
    StableNote,
    VibratoStats,
)
from core.pitch.vibrato import analyze, analyze_vibrato, stability_score

__all__ = [
    # Types
    "PitchEstimate",
    "StableNote",
    "RecordedFrame",
    "MelodyEvent",
    "Segment",
    "KaraokePoint",
    "VibratoStats",
    "AnalysisReport",
    "Challenge",
    "TuningLevel",
    # Config
    "TrackerConfig",
    "AnalysisConfig",
    "DEFAULT_TRACKER_CONFIG",
    "SENSITIVE_TRACKER_CONFIG",
    "STRICT_TRACKER_CONFIG",
    "DEFAULT_ANALYSIS_CONFIG",
    # Note math
    "hz_to_midi",
    "midi_to_frequency",
    "cents_between",
    "midi_to_name",
    "midi_to_solfege",
    "target_options",
    "tuning_level",
    # Live path
    "frame_rms",
    "is_silent",
    "estimate_pitch",
    "gated_estimate",
    "FrequencySmoother",
    "StabilityEngine",
    # Review
    "quantize_melody",
    "has_voiced_events",
    "total_duration",
    "karaoke_points",
    "build_segments",
    "analyze",
    "analyze_vibrato",
    "stability_score",
]
