"""Core types and constants for Chord Tracker."""

from .chord import ChordLabel, ChordEvent, NO_CHORD, transpose_symbol
from .types import SampleBuffer, AnalysisResult, GridMeasure, PlaybackPosition
from .errors import AnalysisError, DecodeError, AnalysisCancelled
from .constants import (
    PITCH_NAMES,
    DEFAULT_SR,
    DEFAULT_TEMPO,
    DEFAULT_BEATS_PER_MEASURE,
)

__all__ = [
    "ChordLabel",
    "ChordEvent",
    "NO_CHORD",
    "transpose_symbol",
    "SampleBuffer",
    "AnalysisResult",
    "GridMeasure",
    "PlaybackPosition",
    "AnalysisError",
    "DecodeError",
    "AnalysisCancelled",
    "PITCH_NAMES",
    "DEFAULT_SR",
    "DEFAULT_TEMPO",
    "DEFAULT_BEATS_PER_MEASURE",
]
