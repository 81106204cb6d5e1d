"""Input layer - Decoding audio into a uniform mono signal."""

from .loader import AudioLoader

__all__ = ["AudioLoader"]
