"""Audio loading and preprocessing utilities."""

import io
from pathlib import Path
from typing import Optional, Union

import numpy as np
import librosa
import soundfile as sf

from ..core import SampleBuffer, DecodeError, DEFAULT_SR


class AudioLoader:
    """Decodes audio into a mono ``SampleBuffer`` at a fixed sample rate."""

    SUPPORTED_FORMATS = {
        ".wav", ".mp3", ".flac", ".ogg", ".m4a", ".mp4", ".aac", ".webm", ".opus",
    }

    def __init__(
        self,
        target_sr: Optional[int] = DEFAULT_SR,
        mono: bool = True,
        normalize: bool = False,
    ):
        """
        Initialize AudioLoader.

        Args:
            target_sr: Target sample rate for resampling (None keeps native rate)
            mono: Downmix to mono if True
            normalize: Peak-normalize audio amplitude if True
        """
        self.target_sr = target_sr
        self.mono = mono
        self.normalize = normalize

    def load(self, path: Union[str, Path]) -> SampleBuffer:
        """
        Load an audio file and preprocess it.

        Args:
            path: Path to audio file

        Returns:
            SampleBuffer with mono samples

        Raises:
            FileNotFoundError: If file doesn't exist
            DecodeError: If the format is unsupported or decoding fails
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")

        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise DecodeError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {sorted(self.SUPPORTED_FORMATS)}"
            )

        try:
            # librosa handles container decoding, resampling and downmix
            audio, sr = librosa.load(str(path), sr=self.target_sr, mono=self.mono)
        except Exception as e:
            raise DecodeError(f"Failed to decode {path.name}: {e}") from e

        return self.from_array(audio, sr)

    def load_bytes(self, data: bytes) -> SampleBuffer:
        """
        Decode an in-memory audio byte stream.

        Raises:
            DecodeError: If soundfile cannot read the stream
        """
        if not data:
            raise DecodeError("Empty audio stream")

        try:
            audio, sr = sf.read(io.BytesIO(data), dtype="float32", always_2d=True)
        except (sf.SoundFileError, RuntimeError, TypeError) as e:
            raise DecodeError(f"Failed to decode audio stream: {e}") from e

        # soundfile returns (frames, channels)
        return self.from_array(audio.T, sr)

    def from_array(self, audio: np.ndarray, sr: int) -> SampleBuffer:
        """
        Wrap raw samples, downmixing and resampling as configured.

        Accepts mono ``(n,)`` or multi-channel ``(channels, n)`` arrays.

        Raises:
            DecodeError: If the signal is empty or not finite
        """
        audio = np.asarray(audio, dtype=np.float32)

        if audio.ndim == 2:
            if audio.shape[0] > audio.shape[1]:
                # Channel-last layout
                audio = audio.T
            if audio.shape[0] == 1:
                audio = audio[0]
            elif self.mono:
                audio = librosa.to_mono(audio)
        elif audio.ndim != 1:
            raise DecodeError(f"Unexpected audio shape: {audio.shape}")

        if audio.ndim != 1:
            raise DecodeError("Multi-channel audio requires mono=True")

        if audio.size == 0:
            raise DecodeError("Decoded signal has zero length")

        if not np.all(np.isfinite(audio)):
            raise DecodeError("Decoded signal contains non-finite samples")

        if self.target_sr and sr != self.target_sr:
            audio = librosa.resample(audio, orig_sr=sr, target_sr=self.target_sr)
            sr = self.target_sr

        if self.normalize:
            audio = self._normalize(audio)

        return SampleBuffer(samples=audio, sample_rate=int(sr))

    def _normalize(self, audio: np.ndarray) -> np.ndarray:
        """Normalize audio to [-1, 1] range using peak normalization."""
        peak = np.abs(audio).max()
        if peak > 0:
            audio = audio / peak
        return audio
