"""Exceptions raised by the analysis pipeline."""


class AnalysisError(Exception):
    """Base class for analysis failures."""


class DecodeError(AnalysisError):
    """Input audio could not be decoded (unsupported, corrupt or empty)."""


class AnalysisCancelled(AnalysisError):
    """The caller abandoned an in-flight analysis."""
