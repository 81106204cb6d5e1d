"""Analysis pipeline - decode, tempo, harmony, cleanup.

Each stage consumes the immutable output of the previous one, so a run needs
no locking. Runs can be moved to a background worker with ``submit`` and are
stopped cooperatively between stages and between beats.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

from .analysis import RhythmDetector
from .core import AnalysisResult, SampleBuffer, AnalysisCancelled, DecodeError
from .core.constants import DEFAULT_BEATS_PER_MEASURE, DEFAULT_SR
from .inference import HarmonicAnalyzer, HarmonyConfig, KeyEstimator
from .input import AudioLoader
from .processing import ChordCleanup, CleanupConfig

_LOG = logging.getLogger(__name__)

AudioSource = Union[str, Path, bytes, SampleBuffer]
ProgressCallback = Callable[["AnalysisState", float, str], None]


class AnalysisState(Enum):
    """Pipeline states, in the order a successful run visits them."""

    IDLE = "idle"
    DECODING = "decoding"
    RHYTHM_DETECTING = "rhythm_detecting"
    HARMONIC_ANALYZING = "harmonic_analyzing"
    POST_PROCESSING = "post_processing"
    READY = "ready"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (AnalysisState.READY, AnalysisState.FAILED, AnalysisState.CANCELLED)


STAGE_MESSAGES = {
    AnalysisState.DECODING: "Loading audio",
    AnalysisState.RHYTHM_DETECTING: "Detecting tempo and downbeat",
    AnalysisState.HARMONIC_ANALYZING: "Analysing harmony",
    AnalysisState.POST_PROCESSING: "Cleaning up chord sequence",
    AnalysisState.READY: "Analysis complete",
}


class CancellationToken:
    """Cooperative cancellation flag shared with a running analysis."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise AnalysisCancelled("Analysis was cancelled")


@dataclass
class PipelineConfig:
    """Configuration for a full analysis run.

    Attributes:
        target_sr: Sample rate the input is resampled to
        normalize_audio: Peak-normalize before analysis
        beats_per_measure: Time signature assumed for the result
        harmony: Harmonic analysis options
        cleanup: Sequence cleanup options
        progress_step: Minimum change in harmony progress between reports
    """

    target_sr: int = DEFAULT_SR
    normalize_audio: bool = False
    beats_per_measure: int = DEFAULT_BEATS_PER_MEASURE
    harmony: HarmonyConfig = field(default_factory=HarmonyConfig)
    cleanup: CleanupConfig = field(default_factory=CleanupConfig)
    progress_step: float = 0.05


class AnalysisPipeline:
    """Run the full chord analysis and track its state."""

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        on_progress: Optional[ProgressCallback] = None,
    ):
        self.config = config or PipelineConfig()
        self.on_progress = on_progress
        self.loader = AudioLoader(
            target_sr=self.config.target_sr,
            normalize=self.config.normalize_audio,
        )
        self.rhythm = RhythmDetector(beats_per_measure=self.config.beats_per_measure)
        self.harmony = HarmonicAnalyzer(self.config.harmony)
        self.cleanup = ChordCleanup(self.config.cleanup)
        self.key_estimator = KeyEstimator()

        self.state = AnalysisState.IDLE
        self.error: Optional[BaseException] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._token: Optional[CancellationToken] = None
        self._lock = threading.Lock()

    def _enter(self, state: AnalysisState, fraction: float = 0.0, message: Optional[str] = None) -> None:
        if state != self.state:
            _LOG.debug("Pipeline %s -> %s", self.state.value, state.value)
        self.state = state
        if self.on_progress is not None:
            self.on_progress(state, fraction, message or STAGE_MESSAGES.get(state, state.value))

    def decode(self, source: AudioSource) -> SampleBuffer:
        """Turn any supported source into a SampleBuffer."""
        if isinstance(source, SampleBuffer):
            return source
        if isinstance(source, (bytes, bytearray)):
            return self.loader.load_bytes(bytes(source))
        return self.loader.load(source)

    def run(
        self,
        source: AudioSource,
        cancel_token: Optional[CancellationToken] = None,
    ) -> AnalysisResult:
        """
        Analyse ``source`` synchronously.

        Args:
            source: File path, encoded bytes, or an already decoded SampleBuffer
            cancel_token: Checked between stages and between beats

        Returns:
            AnalysisResult with tempo, offset and cleaned chord events

        Raises:
            DecodeError: Input could not be decoded (state FAILED)
            AnalysisCancelled: Token was cancelled (state CANCELLED)
            Any other error from a stage is re-raised after entering FAILED
        """
        token = cancel_token or CancellationToken()
        self.error = None

        try:
            self._enter(AnalysisState.DECODING)
            buffer = self.decode(source)
            token.raise_if_cancelled()

            self._enter(AnalysisState.RHYTHM_DETECTING, 0.25)
            tempo = self.rhythm.detect(buffer)
            if tempo.is_fallback:
                _LOG.info("Signal too weak for tempo detection; using %.0f BPM", tempo.bpm)
            token.raise_if_cancelled()

            self._enter(AnalysisState.HARMONIC_ANALYZING, 0.35)
            last_reported = [0.0]

            def report(fraction: float) -> None:
                if fraction - last_reported[0] >= self.config.progress_step or fraction >= 1.0:
                    last_reported[0] = fraction
                    self._enter(
                        AnalysisState.HARMONIC_ANALYZING,
                        0.35 + 0.55 * fraction,
                        f"Analysing harmony ({fraction:.0%})",
                    )

            events = self.harmony.analyze(
                buffer,
                tempo.bpm,
                tempo.offset,
                check_cancelled=token.raise_if_cancelled,
                on_progress=report,
            )
            token.raise_if_cancelled()

            self._enter(AnalysisState.POST_PROCESSING, 0.9)
            cleaned = self.cleanup.cleanup(events)

            result = AnalysisResult(
                bpm=tempo.bpm,
                chord_events=tuple(cleaned),
                duration=buffer.duration,
                offset=tempo.offset,
                beats_per_measure=self.config.beats_per_measure,
                key=self.key_estimator.estimate(cleaned),
            )
        except AnalysisCancelled as e:
            self.error = e
            self._enter(AnalysisState.CANCELLED, 0.0, "Analysis cancelled")
            raise
        except (DecodeError, FileNotFoundError) as e:
            self.error = e
            _LOG.warning("Decoding failed: %s", e)
            self._enter(AnalysisState.FAILED, 0.0, str(e))
            raise
        except Exception as e:
            self.error = e
            _LOG.exception("Analysis failed in state %s", self.state.value)
            self._enter(AnalysisState.FAILED, 0.0, f"Analysis failed: {e}")
            raise

        self._enter(AnalysisState.READY, 1.0)
        return result

    def submit(self, source: AudioSource) -> "Future[AnalysisResult]":
        """
        Start an analysis on the background worker.

        Any analysis still in flight is cancelled first, so only the most
        recent submission runs to completion.
        """
        with self._lock:
            if self._token is not None:
                self._token.cancel()
            token = CancellationToken()
            self._token = token
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ChordAnalysis")
            return self._executor.submit(self.run, source, token)

    def cancel(self) -> None:
        """Cancel the analysis started by the latest ``submit``."""
        with self._lock:
            if self._token is not None:
                self._token.cancel()

    def shutdown(self, wait: bool = True) -> None:
        self.cancel()
        with self._lock:
            if self._executor is not None:
                self._executor.shutdown(wait=wait)
                self._executor = None
