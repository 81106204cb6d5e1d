"""Data containers passed between the analysis stages."""

from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np

from .chord import ChordEvent, ChordLabel
from .constants import DEFAULT_BEATS_PER_MEASURE, DEFAULT_KEY


@dataclass(frozen=True)
class SampleBuffer:
    """Immutable mono signal with its sample rate."""

    samples: np.ndarray
    sample_rate: int

    def __post_init__(self):
        samples = np.asarray(self.samples, dtype=np.float32)
        if samples.ndim != 1:
            raise ValueError(f"SampleBuffer expects mono samples, got shape {samples.shape}")
        if self.sample_rate <= 0:
            raise ValueError(f"Invalid sample rate: {self.sample_rate}")
        if samples is self.samples and samples.flags.writeable:
            # Never freeze the caller's array
            samples = samples.copy()
        samples.flags.writeable = False
        object.__setattr__(self, "samples", samples)

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return len(self.samples) / self.sample_rate

    def slice(self, start: float, end: float) -> np.ndarray:
        """Read-only view of the samples between two times in seconds."""
        start_idx = max(0, int(start * self.sample_rate))
        end_idx = min(len(self.samples), int(end * self.sample_rate))
        return self.samples[start_idx:end_idx]


@dataclass(frozen=True, eq=False)
class AnalysisResult:
    """Outcome of one analysis run.

    Compared and hashed by identity so caches can key on the result object
    itself without hashing the whole event sequence.
    """

    bpm: float
    chord_events: Tuple[ChordEvent, ...]
    duration: float
    offset: float
    beats_per_measure: int = DEFAULT_BEATS_PER_MEASURE
    key: str = DEFAULT_KEY

    def __post_init__(self):
        events = tuple(self.chord_events)
        for prev, cur in zip(events, events[1:]):
            if cur.timestamp <= prev.timestamp:
                raise ValueError(
                    f"Chord events must be strictly increasing: "
                    f"{prev.timestamp} then {cur.timestamp}"
                )
        if self.beats_per_measure <= 0:
            raise ValueError(f"beats_per_measure must be positive, got {self.beats_per_measure}")
        object.__setattr__(self, "chord_events", events)

    @property
    def time_signature(self) -> str:
        return f"{self.beats_per_measure}/4"

    @property
    def chords(self) -> Tuple[ChordLabel, ...]:
        return tuple(e.chord for e in self.chord_events)


@dataclass(frozen=True)
class GridMeasure:
    """One measure of the chord grid, a label per beat slot."""

    index: int
    start_time: float
    end_time: float
    beats: Tuple[ChordLabel, ...] = field(default_factory=tuple)

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    @property
    def symbols(self):
        return [b.symbol for b in self.beats]


@dataclass(frozen=True)
class PlaybackPosition:
    """Where the playhead sits on the grid."""

    active_measure_index: int = 0
    beat_index: int = 0
    fraction_within_measure: float = 0.0
