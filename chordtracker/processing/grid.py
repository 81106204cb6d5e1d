"""Chord grid - Partition a chord sequence into fixed-size measures."""

import math
from bisect import bisect_right
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..core import AnalysisResult, ChordLabel, GridMeasure, NO_CHORD

Transposer = Callable[[ChordLabel, int], ChordLabel]


def _default_transposer(label: ChordLabel, semitones: int) -> ChordLabel:
    return label.transposed(semitones)


@dataclass(frozen=True)
class GridSettings:
    """User adjustments applied on top of an analysis.

    Attributes:
        beats_per_measure: Override the analysis time signature (None = keep)
        offset_ms: Added to the detected offset, in milliseconds
        transpose: Semitones applied to every label
    """

    beats_per_measure: Optional[int] = None
    offset_ms: float = 0.0
    transpose: int = 0

    def resolve_beats(self, result: AnalysisResult) -> int:
        beats = result.beats_per_measure if self.beats_per_measure is None else self.beats_per_measure
        if isinstance(beats, bool) or not isinstance(beats, int) or beats <= 0:
            raise ValueError(f"beats_per_measure must be a positive integer, got {beats!r}")
        return beats

    def effective_offset(self, result: AnalysisResult) -> float:
        return result.offset + self.offset_ms / 1000.0


class GridBuilder:
    """Build the measure grid rendered during playback.

    Each beat slot shows the chord sounding at the middle of the slot, so a
    change landing exactly on a beat boundary is never ambiguous. The grid is
    rebuilt from scratch whenever any setting changes.
    """

    def __init__(
        self,
        transposer: Optional[Transposer] = None,
        pad_trailing_measure: bool = False,
    ):
        """
        Initialize GridBuilder.

        Args:
            transposer: Callable mapping (label, semitones) to a label
            pad_trailing_measure: Append one extra measure past the end of
                the track instead of clipping the last one to the duration
        """
        self.transposer = transposer or _default_transposer
        self.pad_trailing_measure = pad_trailing_measure

    def build(
        self,
        result: AnalysisResult,
        settings: Optional[GridSettings] = None,
    ) -> List[GridMeasure]:
        """
        Build the grid.

        Args:
            result: Analysis to lay out
            settings: Time signature, offset and transpose adjustments

        Returns:
            Measures in order; empty when there is nothing to lay out
        """
        settings = settings or GridSettings()
        beats_per_measure = settings.resolve_beats(result)

        if result.bpm <= 0:
            return []

        beat_duration = 60.0 / result.bpm
        measure_duration = beat_duration * beats_per_measure
        start = max(0.0, settings.effective_offset(result))
        span = result.duration - start
        if span <= 0:
            return []

        total_measures = math.ceil(span / measure_duration)
        if self.pad_trailing_measure:
            total_measures += 1

        timestamps = [e.timestamp for e in result.chord_events]
        measures = []

        for i in range(total_measures):
            # Both edges from the same product so neighbours share boundaries exactly
            m_start = start + i * measure_duration
            m_end = start + (i + 1) * measure_duration
            if not self.pad_trailing_measure:
                if m_start >= result.duration:
                    break
                if i == total_measures - 1 or m_end > result.duration:
                    m_end = result.duration

            beats = []
            for b in range(beats_per_measure):
                sample_time = m_start + b * beat_duration + beat_duration / 2
                label = self._chord_at(result, timestamps, sample_time)
                beats.append(self.transposer(label, settings.transpose))

            measures.append(
                GridMeasure(index=i, start_time=m_start, end_time=m_end, beats=tuple(beats))
            )

        return measures

    @staticmethod
    def _chord_at(result: AnalysisResult, timestamps: List[float], time: float) -> ChordLabel:
        """Most recent chord at or before ``time``."""
        idx = bisect_right(timestamps, time) - 1
        if idx < 0:
            return NO_CHORD
        return result.chord_events[idx].chord
