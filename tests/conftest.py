"""Shared fixtures for Chord Tracker tests."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from chordtracker.core import AnalysisResult, ChordEvent, ChordLabel, SampleBuffer
from generate_test_audio import (
    SR,
    C_MAJOR,
    G_MAJOR,
    generate_pulsed_progression,
    generate_silence,
)


def make_result(symbols, bpm=120.0, offset=0.0, duration=None, beats_per_measure=4):
    """Result with one event per beat from a list of chord symbols."""
    beat = 60.0 / bpm
    events = tuple(
        ChordEvent(timestamp=offset + i * beat, chord=ChordLabel.parse(s))
        for i, s in enumerate(symbols)
    )
    if duration is None:
        duration = offset + len(symbols) * beat
    return AnalysisResult(
        bpm=bpm,
        chord_events=events,
        duration=duration,
        offset=offset,
        beats_per_measure=beats_per_measure,
    )


@pytest.fixture
def c_then_g_buffer():
    """8 s at 120 BPM: C major for 4 s, then G major for 4 s."""
    audio = generate_pulsed_progression([C_MAJOR, G_MAJOR], beats_per_chord=8)
    return SampleBuffer(samples=audio, sample_rate=SR)


@pytest.fixture
def silent_buffer():
    return SampleBuffer(samples=generate_silence(2.0), sample_rate=SR)


@pytest.fixture
def c_then_g_wav(tmp_path):
    import soundfile as sf

    path = tmp_path / "c_then_g.wav"
    audio = generate_pulsed_progression([C_MAJOR, G_MAJOR], beats_per_chord=8)
    sf.write(str(path), audio, SR, subtype="PCM_16")
    return path


@pytest.fixture
def simple_result():
    """Two bars of C then two bars of G, 120 BPM, offset 0."""
    return make_result(["C"] * 8 + ["G"] * 8)
