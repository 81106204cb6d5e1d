"""Analysis layer - Low-level signal analysis.

This layer extracts measurements from the mono signal:
- Temporal features (tempo, first strong beat)
- Dual-band chroma (bass root, treble third)
"""

from .tempo import RhythmDetector, TempoInfo, fold_bpm
from .chroma import ChromaExtractor, DualChroma, goertzel_magnitude, midi_to_freq

__all__ = [
    "RhythmDetector",
    "TempoInfo",
    "fold_bpm",
    "ChromaExtractor",
    "DualChroma",
    "goertzel_magnitude",
    "midi_to_freq",
]
