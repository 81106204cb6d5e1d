"""Dual-band chroma extraction with single-frequency Goertzel probes.

Only ~46 fixed note frequencies are needed per frame, so each one is probed
with a Goertzel resonator instead of computing a full spectrum.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import numpy as np
from scipy.signal import lfilter
from scipy.signal.windows import hann

from ..core.constants import (
    CHROMA_MIDI_MIN,
    CHROMA_MIDI_MAX,
    TREBLE_CUTOFF_HZ,
    BASS_SPLIT_HZ,
    BASS_WEIGHT_HZ,
)


def midi_to_freq(midi: int) -> float:
    """Convert MIDI pitch to frequency (Hz)."""
    return 440.0 * (2 ** ((midi - 69) / 12.0))


def goertzel_magnitude(frame: np.ndarray, freq: float, sr: int) -> float:
    """
    Spectral magnitude of ``frame`` at the DFT bin nearest ``freq``.

    Runs the resonator ``s[n] = x[n] + 2cos(w) s[n-1] - s[n-2]`` and reads
    the power from its last two states.
    """
    n = len(frame)
    if n < 2:
        return 0.0
    k = round(n * freq / sr)
    omega = 2.0 * np.pi * k / n
    coeff = 2.0 * np.cos(omega)
    states = lfilter([1.0], [1.0, -coeff, 1.0], frame)
    s_prev, s_prev2 = states[-1], states[-2]
    power = s_prev2 * s_prev2 + s_prev * s_prev - coeff * s_prev * s_prev2
    return float(np.sqrt(max(power, 0.0)))


@dataclass
class DualChroma:
    """Pitch-class energy split into a bass band and a treble band."""

    bass: np.ndarray = field(default_factory=lambda: np.zeros(12))
    treble: np.ndarray = field(default_factory=lambda: np.zeros(12))

    def __add__(self, other: "DualChroma") -> "DualChroma":
        return DualChroma(bass=self.bass + other.bass, treble=self.treble + other.treble)


class ChromaExtractor:
    """Extract bass and treble chroma from short audio frames.

    Notes above ``cutoff_hz`` are never probed, which keeps vocals and lead
    lines out of the harmony estimate. Bass notes are weighted by
    ``BASS_WEIGHT_HZ / freq`` so the lowest octave dominates root choice.
    """

    def __init__(
        self,
        sr: int,
        midi_min: int = CHROMA_MIDI_MIN,
        midi_max: int = CHROMA_MIDI_MAX,
        cutoff_hz: float = TREBLE_CUTOFF_HZ,
        bass_split_hz: float = BASS_SPLIT_HZ,
    ):
        self.sr = sr
        self.cutoff_hz = cutoff_hz
        self.bass_split_hz = bass_split_hz
        self.notes: List[Tuple[int, float]] = [
            (midi, midi_to_freq(midi))
            for midi in range(midi_min, midi_max)
            if midi_to_freq(midi) <= cutoff_hz
        ]
        self._windows: Dict[int, np.ndarray] = {}

    def _window(self, n: int) -> np.ndarray:
        if n not in self._windows:
            self._windows[n] = hann(n, sym=True)
        return self._windows[n]

    def extract(self, frame: np.ndarray) -> DualChroma:
        """
        Compute dual-band chroma for one frame.

        Args:
            frame: Mono samples

        Returns:
            DualChroma with 12-element bass and treble vectors
        """
        chroma = DualChroma()
        if len(frame) < 2:
            return chroma

        windowed = np.asarray(frame, dtype=np.float64) * self._window(len(frame))

        for midi, freq in self.notes:
            magnitude = goertzel_magnitude(windowed, freq, self.sr)
            pc = midi % 12
            if freq < self.bass_split_hz:
                chroma.bass[pc] += magnitude * (BASS_WEIGHT_HZ / freq)
            else:
                chroma.treble[pc] += magnitude

        return chroma
