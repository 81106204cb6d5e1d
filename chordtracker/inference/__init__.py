"""Inference layer - Musical interpretation of the signal.

Pipeline: beat slots → dual chroma → chord label per beat → key estimate
"""

from .harmony import HarmonicAnalyzer, HarmonyConfig
from .key import KeyEstimator

__all__ = [
    "HarmonicAnalyzer",
    "HarmonyConfig",
    "KeyEstimator",
]
