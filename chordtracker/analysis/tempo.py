"""Tempo and downbeat offset estimation."""

from dataclasses import dataclass

import numpy as np

from ..core import SampleBuffer
from ..core.constants import (
    DEFAULT_TEMPO,
    DEFAULT_BEATS_PER_MEASURE,
    MIN_CANONICAL_BPM,
    MAX_CANONICAL_BPM,
    ENVELOPE_RATE_HZ,
    MIN_BEAT_PERIOD,
    MAX_BEAT_PERIOD,
    AUTOCORR_STRIDE,
    OFFSET_SEARCH_BEATS,
)


@dataclass
class TempoInfo:
    """Container for tempo analysis results."""

    bpm: float
    offset: float  # Time of the first strong beat in seconds
    beats_per_measure: int = DEFAULT_BEATS_PER_MEASURE
    confidence: float = 0.0
    is_fallback: bool = False  # True when the signal was too weak to measure

    @property
    def beat_duration(self) -> float:
        return 60.0 / self.bpm

    @property
    def measure_duration(self) -> float:
        return self.beat_duration * self.beats_per_measure

    def beat_times(self, duration: float) -> np.ndarray:
        """Beat start times from the offset up to ``duration``."""
        if duration <= self.offset:
            return np.zeros(0)
        n_beats = int(np.ceil((duration - self.offset) / self.beat_duration))
        return self.offset + np.arange(n_beats) * self.beat_duration


def fold_bpm(bpm: float, low: float = MIN_CANONICAL_BPM, high: float = MAX_CANONICAL_BPM) -> float:
    """Double or halve a tempo until it lies in ``[low, high]``.

    Half/double-time tracks are folded too; this is a known limitation.
    """
    if bpm <= 0 or not np.isfinite(bpm):
        raise ValueError(f"Cannot fold tempo {bpm}")
    while bpm < low:
        bpm *= 2
    while bpm > high:
        bpm /= 2
    return bpm


class RhythmDetector:
    """Detect tempo and first strong beat from an energy envelope.

    The envelope is block RMS at roughly 1 kHz; its autocorrelation over
    beat periods of 0.28-1.0 s picks the tempo. Weak or very short input
    degrades to 120 BPM with offset 0 instead of failing.
    """

    def __init__(
        self,
        envelope_rate: int = ENVELOPE_RATE_HZ,
        stride: int = AUTOCORR_STRIDE,
        beats_per_measure: int = DEFAULT_BEATS_PER_MEASURE,
    ):
        self.envelope_rate = envelope_rate
        self.stride = stride
        self.beats_per_measure = beats_per_measure

    def envelope(self, buffer: SampleBuffer):
        """
        Compute the block-RMS energy envelope.

        Returns:
            Tuple of (envelope array, envelope rate in Hz)
        """
        hop = max(1, buffer.sample_rate // self.envelope_rate)
        n_blocks = len(buffer) // hop
        if n_blocks == 0:
            return np.zeros(0, dtype=np.float64), buffer.sample_rate / hop
        blocks = buffer.samples[: n_blocks * hop].astype(np.float64).reshape(n_blocks, hop)
        env = np.sqrt(np.mean(blocks ** 2, axis=1))
        return env, buffer.sample_rate / hop

    def detect(self, buffer: SampleBuffer) -> TempoInfo:
        """
        Estimate tempo and offset.

        Args:
            buffer: Mono signal

        Returns:
            TempoInfo with bpm folded into the canonical range
        """
        env, rate = self.envelope(buffer)
        n = len(env)

        min_lag = int(MIN_BEAT_PERIOD * rate)
        max_lag = min(int(MAX_BEAT_PERIOD * rate), n)
        if min_lag < 1 or n <= min_lag:
            return self._fallback()

        best_lag = 0
        best_corr = 0.0
        for lag in range(min_lag, max_lag):
            # Only every stride-th pair is summed
            corr = float(np.dot(env[: n - lag : self.stride], env[lag : n : self.stride]))
            if corr > best_corr:
                best_corr = corr
                best_lag = lag

        if best_lag == 0:
            return self._fallback()

        bpm = fold_bpm(60.0 / (best_lag / rate))

        # Offset: loudest envelope block within the first two beats
        samples_per_beat = (60.0 / bpm) * rate
        search = max(1, min(n, int(samples_per_beat * OFFSET_SEARCH_BEATS)))
        offset_idx = int(np.argmax(env[:search]))

        energy = float(np.dot(env[:: self.stride], env[:: self.stride]))
        confidence = min(1.0, best_corr / energy) if energy > 0 else 0.0

        return TempoInfo(
            bpm=bpm,
            offset=offset_idx / rate,
            beats_per_measure=self.beats_per_measure,
            confidence=confidence,
        )

    def _fallback(self) -> TempoInfo:
        return TempoInfo(
            bpm=DEFAULT_TEMPO,
            offset=0.0,
            beats_per_measure=self.beats_per_measure,
            confidence=0.0,
            is_fallback=True,
        )
