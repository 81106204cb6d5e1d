"""Chord cleanup - Stabilize the raw per-beat chord sequence.

Visual stability matters more than instant accuracy, so two passes run over
the interior beats (the first and last beat are never changed):
- Gap filling: a "no chord" beat after a chord sustains that chord
- Flicker removal: A-B-A becomes A-A-A
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

from ..core import ChordEvent


@dataclass
class CleanupConfig:
    """Configuration for chord cleanup passes.

    Attributes:
        fill_gaps: Treat brief dropouts as sustain of the previous chord
        remove_flicker: Replace single-beat outliers between equal neighbours
    """

    fill_gaps: bool = True
    remove_flicker: bool = True


@dataclass
class CleanupStats:
    """Statistics from cleanup operations."""

    original_count: int = 0
    filled_gaps: int = 0
    removed_flicker: int = 0

    @property
    def total_changed(self) -> int:
        return self.filled_gaps + self.removed_flicker


class ChordCleanup:
    """Pure, idempotent cleanup of a chord event sequence."""

    def __init__(self, config: CleanupConfig = None):
        self.config = config or CleanupConfig()

    def cleanup(
        self,
        events: Sequence[ChordEvent],
        return_stats: bool = False,
    ) -> Union[List[ChordEvent], Tuple[List[ChordEvent], CleanupStats]]:
        """Apply all enabled passes.

        Args:
            events: Raw chord events, ascending by timestamp
            return_stats: Whether to return cleanup statistics

        Returns:
            New list of cleaned events, optionally with statistics
        """
        stats = CleanupStats(original_count=len(events))
        result = list(events)

        if self.config.fill_gaps:
            stats.filled_gaps = self.fill_gaps(result)
        if self.config.remove_flicker:
            stats.removed_flicker = self.remove_flicker(result)

        if return_stats:
            return result, stats
        return result

    @staticmethod
    def fill_gaps(events: List[ChordEvent]) -> int:
        """Fill interior "no chord" beats with the preceding chord, in place.

        Returns:
            Number of beats changed
        """
        changed = 0
        for i in range(1, len(events) - 1):
            prev = events[i - 1].chord
            if events[i].chord.is_no_chord and not prev.is_no_chord:
                events[i] = events[i].with_chord(prev)
                changed += 1
        return changed

    @staticmethod
    def remove_flicker(events: List[ChordEvent]) -> int:
        """Replace a beat that differs from two equal neighbours, in place.

        Returns:
            Number of beats changed
        """
        changed = 0
        for i in range(1, len(events) - 1):
            prev = events[i - 1].chord
            if prev == events[i + 1].chord and events[i].chord != prev:
                events[i] = events[i].with_chord(prev)
                changed += 1
        return changed
