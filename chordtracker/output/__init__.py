"""Output layer - Export analysis results.

This layer hands analyses to the outside world:
- JSON documents (for storage alongside the source audio)
- MIDI chord tracks
"""

from .exporter import AnalysisExporter
from .midi import ChordMidiExporter

__all__ = [
    "AnalysisExporter",
    "ChordMidiExporter",
]
