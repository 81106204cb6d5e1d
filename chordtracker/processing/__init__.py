"""Processing layer - Turning detected chords into a playable grid.

This layer refines and lays out chord events:
- Cleanup (gap filling, flicker removal)
- Measure grid construction (time signature, offset, transpose)
- Playback synchronization (time → measure/beat)
- Grid caching per analysis
"""

from .cleanup import ChordCleanup, CleanupConfig, CleanupStats
from .grid import GridBuilder, GridSettings
from .sync import PlaybackSynchronizer, PlaybackClock
from .cache import GridCache

__all__ = [
    "ChordCleanup",
    "CleanupConfig",
    "CleanupStats",
    "GridBuilder",
    "GridSettings",
    "PlaybackSynchronizer",
    "PlaybackClock",
    "GridCache",
]
