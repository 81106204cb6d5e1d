"""Chord Tracker - On-device chord and beat grid extraction.

Architecture Layers:
    1. core/       - Chord labels, result types, constants, errors
    2. input/      - Audio decoding to a mono SampleBuffer
    3. analysis/   - Low-level signal analysis (tempo, dual-band chroma)
    4. inference/  - Musical interpretation (chord per beat, key root)
    5. processing/ - Cleanup, measure grid, playback synchronization
    6. output/     - Export (JSON, MIDI)

Pipeline: decode → tempo/offset → chord per beat → cleanup → AnalysisResult
"""

__version__ = "0.3.0"

# Core types
from .core import (
    ChordLabel,
    ChordEvent,
    NO_CHORD,
    SampleBuffer,
    AnalysisResult,
    GridMeasure,
    PlaybackPosition,
    AnalysisError,
    DecodeError,
    AnalysisCancelled,
)

# Input layer
from .input import AudioLoader

# Analysis layer
from .analysis import RhythmDetector, TempoInfo, ChromaExtractor

# Inference layer
from .inference import HarmonicAnalyzer, HarmonyConfig, KeyEstimator

# Processing layer
from .processing import (
    ChordCleanup,
    CleanupConfig,
    GridBuilder,
    GridSettings,
    PlaybackSynchronizer,
    PlaybackClock,
    GridCache,
)

# Output layer
from .output import AnalysisExporter, ChordMidiExporter

# Orchestration
from .pipeline import AnalysisPipeline, AnalysisState, CancellationToken, PipelineConfig

__all__ = [
    # Core
    "ChordLabel",
    "ChordEvent",
    "NO_CHORD",
    "SampleBuffer",
    "AnalysisResult",
    "GridMeasure",
    "PlaybackPosition",
    "AnalysisError",
    "DecodeError",
    "AnalysisCancelled",
    # Input
    "AudioLoader",
    # Analysis
    "RhythmDetector",
    "TempoInfo",
    "ChromaExtractor",
    # Inference
    "HarmonicAnalyzer",
    "HarmonyConfig",
    "KeyEstimator",
    # Processing
    "ChordCleanup",
    "CleanupConfig",
    "GridBuilder",
    "GridSettings",
    "PlaybackSynchronizer",
    "PlaybackClock",
    "GridCache",
    # Output
    "AnalysisExporter",
    "ChordMidiExporter",
    # Pipeline
    "AnalysisPipeline",
    "AnalysisState",
    "CancellationToken",
    "PipelineConfig",
]
