"""Playback sync - Map a playback time to a grid position.

Runs on every rendered frame, so the position is computed arithmetically
from tempo and offset instead of searching the grid.
"""

import math
import time
from typing import Callable, Optional

from ..core import AnalysisResult, PlaybackPosition
from .grid import GridSettings

# Absorbs float error when a time lands exactly on a beat boundary
_EPSILON = 1e-9
_MAX_FRACTION = math.nextafter(1.0, 0.0)


class PlaybackSynchronizer:
    """Constant-time playback time to (measure, beat, fraction) mapping."""

    def __init__(
        self,
        bpm: float,
        offset: float,
        beats_per_measure: int,
        offset_ms: float = 0.0,
    ):
        """
        Initialize PlaybackSynchronizer.

        Args:
            bpm: Tempo in beats per minute
            offset: Detected offset in seconds
            beats_per_measure: Beats in one measure
            offset_ms: User adjustment added to the offset, in milliseconds
        """
        if bpm <= 0:
            raise ValueError(f"bpm must be positive, got {bpm}")
        if isinstance(beats_per_measure, bool) or not isinstance(beats_per_measure, int) or beats_per_measure <= 0:
            raise ValueError(f"beats_per_measure must be a positive integer, got {beats_per_measure!r}")

        self.bpm = bpm
        self.beats_per_measure = beats_per_measure
        self.effective_offset = offset + offset_ms / 1000.0
        self.beat_duration = 60.0 / bpm
        self.measure_duration = self.beat_duration * beats_per_measure

    @classmethod
    def from_result(
        cls,
        result: AnalysisResult,
        settings: Optional[GridSettings] = None,
    ) -> "PlaybackSynchronizer":
        """Synchronizer matching a grid built with the same settings.

        When ``offset_ms`` pulls the effective offset below zero, the grid is
        drawn from 0 s but positions are still measured from the negative
        offset, so the playhead runs ``-offset`` seconds ahead of the drawn
        measures.
        """
        settings = settings or GridSettings()
        return cls(
            bpm=result.bpm,
            offset=result.offset,
            beats_per_measure=settings.resolve_beats(result),
            offset_ms=settings.offset_ms,
        )

    def position(self, current_time: float) -> PlaybackPosition:
        """
        Locate ``current_time`` on the grid.

        Times before the grid start map to the start of measure 0.
        """
        time_in_grid = current_time - self.effective_offset
        if time_in_grid < 0:
            return PlaybackPosition(0, 0, 0.0)

        measures_elapsed = time_in_grid / self.measure_duration
        measure_index = int(math.floor(measures_elapsed + _EPSILON))
        within = measures_elapsed - measure_index

        beat_index = int(math.floor(within * self.beats_per_measure + _EPSILON))
        beat_index = min(max(beat_index, 0), self.beats_per_measure - 1)
        fraction = min(max(within, 0.0), _MAX_FRACTION)

        return PlaybackPosition(
            active_measure_index=measure_index,
            beat_index=beat_index,
            fraction_within_measure=fraction,
        )


class PlaybackClock:
    """Media-time clock for a render loop.

    Media time advances at ``rate`` times wall-clock time. The rate only
    affects how fast the clock runs, never the grid parameters.
    """

    def __init__(self, rate: float = 1.0, clock: Callable[[], float] = time.monotonic):
        if rate <= 0:
            raise ValueError(f"Playback rate must be positive, got {rate}")
        self.rate = rate
        self._clock = clock
        self._media_time = 0.0
        self._started_at: Optional[float] = None

    @property
    def is_running(self) -> bool:
        return self._started_at is not None

    def now(self) -> float:
        """Current media time in seconds."""
        if self._started_at is None:
            return self._media_time
        return self._media_time + (self._clock() - self._started_at) * self.rate

    def start(self) -> None:
        if self._started_at is None:
            self._started_at = self._clock()

    def pause(self) -> None:
        self._media_time = self.now()
        self._started_at = None

    def seek(self, media_time: float) -> None:
        self._media_time = max(0.0, media_time)
        if self._started_at is not None:
            self._started_at = self._clock()

    def set_rate(self, rate: float) -> None:
        if rate <= 0:
            raise ValueError(f"Playback rate must be positive, got {rate}")
        # Rebase so the change only affects time from now on
        self._media_time = self.now()
        if self._started_at is not None:
            self._started_at = self._clock()
        self.rate = rate
