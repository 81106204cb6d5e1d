"""Harmony analysis - Beat-synchronous chord classification.

Each beat is analysed as one block: its sub-window chroma vectors are summed
so a note held through most of the beat outweighs short passing notes.
Classification then follows three rules:
- Root: strongest pitch class in the bass band
- Noise rejection: the root must stand out from the bass mean
- Quality: minor only if the treble minor third clearly beats the major third
"""

import warnings
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

from ..analysis.chroma import ChromaExtractor, DualChroma
from ..analysis.tempo import TempoInfo
from ..core import ChordEvent, ChordLabel, NO_CHORD, SampleBuffer
from ..core.constants import (
    SILENCE_RMS,
    CHROMA_WINDOW_SIZE,
    CHROMA_WINDOW_STEPS,
    NOISE_REJECTION_RATIO,
    MINOR_THIRD_BIAS,
    MAX_ANALYSIS_DURATION,
)


@dataclass
class HarmonyConfig:
    """Configuration for harmonic analysis.

    Attributes:
        silence_rms: Beats quieter than this RMS are "no chord"
        window_size: Sub-window length in samples
        window_steps: Number of hops across a beat
        noise_ratio: Required ratio of the strongest bass class to the bass mean
        minor_bias: Minor third must exceed major third by this factor
        max_duration: Analysis stops after this many seconds (None = whole track)
    """

    silence_rms: float = SILENCE_RMS
    window_size: int = CHROMA_WINDOW_SIZE
    window_steps: int = CHROMA_WINDOW_STEPS
    noise_ratio: float = NOISE_REJECTION_RATIO
    minor_bias: float = MINOR_THIRD_BIAS
    max_duration: Optional[float] = MAX_ANALYSIS_DURATION


def calculate_rms(frame: np.ndarray) -> float:
    if len(frame) == 0:
        return 0.0
    return float(np.sqrt(np.mean(np.square(frame, dtype=np.float64))))


class HarmonicAnalyzer:
    """Classify one chord label per beat from a mono signal."""

    def __init__(self, config: Optional[HarmonyConfig] = None):
        self.config = config or HarmonyConfig()
        self._extractors = {}

    def _extractor(self, sr: int) -> ChromaExtractor:
        if sr not in self._extractors:
            self._extractors[sr] = ChromaExtractor(sr)
        return self._extractors[sr]

    def analyze(
        self,
        buffer: SampleBuffer,
        bpm: float,
        offset: float,
        check_cancelled: Optional[Callable[[], None]] = None,
        on_progress: Optional[Callable[[float], None]] = None,
    ) -> List[ChordEvent]:
        """
        Detect a chord on every beat from ``offset`` to the end of the track.

        Args:
            buffer: Mono signal
            bpm: Tempo in beats per minute
            offset: Time of the first beat in seconds
            check_cancelled: Called before each beat; raises to abort
            on_progress: Receives the fraction of beats processed

        Returns:
            ChordEvent list in ascending timestamp order
        """
        if bpm <= 0:
            raise ValueError(f"bpm must be positive, got {bpm}")

        sr = buffer.sample_rate
        seconds_per_beat = 60.0 / bpm
        end_time = buffer.duration
        if self.config.max_duration is not None and end_time > self.config.max_duration:
            warnings.warn(
                f"Track is {end_time:.0f}s long; analysing only the first "
                f"{self.config.max_duration:.0f}s"
            )
            end_time = self.config.max_duration

        slot_times = TempoInfo(bpm=bpm, offset=offset).beat_times(end_time)
        n_slots = len(slot_times)
        events: List[ChordEvent] = []

        for i, t in enumerate(slot_times):
            if check_cancelled is not None:
                check_cancelled()

            t = float(t)
            # A trailing partial beat is not analysed
            if int((t + seconds_per_beat) * sr) > len(buffer):
                break

            beat = buffer.slice(t, t + seconds_per_beat)
            events.append(ChordEvent(timestamp=t, chord=self.analyze_beat(beat, sr)))

            if on_progress is not None:
                on_progress((i + 1) / n_slots)

        return events

    def analyze_beat(self, beat: np.ndarray, sr: int) -> ChordLabel:
        """Classify the samples of a single beat."""
        if calculate_rms(beat) < self.config.silence_rms:
            return NO_CHORD
        return self.classify(self.beat_chroma(beat, sr))

    def beat_chroma(self, beat: np.ndarray, sr: int) -> DualChroma:
        """
        Accumulate chroma over overlapping sub-windows of one beat.

        Beats shorter than the window are analysed as a single frame.
        """
        extractor = self._extractor(sr)
        window = self.config.window_size
        step = (len(beat) - window) // self.config.window_steps

        if step <= 0:
            return extractor.extract(beat)

        total = DualChroma()
        for start in range(0, len(beat) - window, step):
            total = total + extractor.extract(beat[start:start + window])
        return total

    def classify(self, chroma: DualChroma) -> ChordLabel:
        """
        Turn accumulated chroma into a chord label.

        Returns:
            NO_CHORD when the bass energy is spread evenly (percussion, noise)
        """
        bass = chroma.bass
        root = int(np.argmax(bass))
        max_bass = float(bass[root])
        mean_bass = float(np.mean(bass))

        if max_bass <= 0 or max_bass < mean_bass * self.config.noise_ratio:
            return NO_CHORD

        minor_energy = chroma.treble[(root + 3) % 12]
        major_energy = chroma.treble[(root + 4) % 12]

        # Major wins unless the minor third is clearly louder
        is_minor = minor_energy > major_energy * self.config.minor_bias
        return ChordLabel(root=root, minor=bool(is_minor))
