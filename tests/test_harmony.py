"""Tests for chroma extraction and per-beat chord classification."""

import numpy as np
import pytest

from chordtracker.analysis.chroma import (
    ChromaExtractor,
    DualChroma,
    goertzel_magnitude,
    midi_to_freq,
)
from chordtracker.analysis.tempo import TempoInfo
from chordtracker.core import NO_CHORD
from chordtracker.inference import HarmonicAnalyzer, HarmonyConfig, KeyEstimator
from chordtracker.inference.harmony import calculate_rms

from conftest import make_result
from generate_test_audio import SR, A_MINOR, C_MAJOR, F_MAJOR, generate_chord_beat


def _chroma(bass_pcs, treble=None):
    chroma = DualChroma()
    for pc, value in bass_pcs.items():
        chroma.bass[pc] = value
    for pc, value in (treble or {}).items():
        chroma.treble[pc] = value
    return chroma


class TestGoertzel:
    """Tests for the single-bin Goertzel probe."""

    def test_peak_at_tone(self):
        t = np.arange(4096) / SR
        frame = np.sin(2 * np.pi * 440.0 * t)
        on = goertzel_magnitude(frame, 440.0, SR)
        off = goertzel_magnitude(frame, 330.0, SR)
        assert on > 10 * off

    def test_matches_dft_bin(self):
        rng = np.random.default_rng(1)
        frame = rng.normal(size=1024)
        k = round(1024 * 300.0 / SR)
        expected = np.abs(np.fft.fft(frame)[k])
        assert goertzel_magnitude(frame, 300.0, SR) == pytest.approx(expected, rel=1e-4)

    def test_tiny_frame(self):
        assert goertzel_magnitude(np.zeros(1), 440.0, SR) == 0.0

    def test_midi_to_freq(self):
        assert midi_to_freq(69) == pytest.approx(440.0)
        assert midi_to_freq(57) == pytest.approx(220.0)


class TestChromaExtractor:
    """Tests for dual-band chroma."""

    def test_notes_stop_at_cutoff(self):
        extractor = ChromaExtractor(SR)
        assert all(freq <= 600.0 for _, freq in extractor.notes)
        assert extractor.notes[0][0] == 28

    def test_bass_and_treble_split(self):
        t = np.arange(8192) / SR
        frame = np.sin(2 * np.pi * midi_to_freq(43) * t) + np.sin(2 * np.pi * midi_to_freq(64) * t)
        chroma = ChromaExtractor(SR).extract(frame)
        assert int(np.argmax(chroma.bass)) == 7  # G2
        assert int(np.argmax(chroma.treble)) == 4  # E4

    def test_vocal_range_ignored(self):
        t = np.arange(8192) / SR
        frame = np.sin(2 * np.pi * 880.0 * t)
        chroma = ChromaExtractor(SR).extract(frame)
        assert chroma.treble[9] < 1.0

    def test_add(self):
        a = _chroma({0: 1.0}, {4: 2.0})
        b = _chroma({0: 0.5}, {4: 1.0})
        total = a + b
        assert total.bass[0] == 1.5
        assert total.treble[4] == 3.0


class TestClassify:
    """Tests for the chord decision rules."""

    @pytest.fixture
    def analyzer(self):
        return HarmonicAnalyzer()

    def test_root_from_bass(self, analyzer):
        label = analyzer.classify(_chroma({7: 10.0, 2: 1.0}, {11: 5.0}))
        assert label.symbol == "G"

    def test_major_by_default(self, analyzer):
        # Equal thirds resolve to major
        label = analyzer.classify(_chroma({0: 10.0}, {3: 1.0, 4: 1.0}))
        assert label.symbol == "C"

    def test_minor_needs_clear_margin(self, analyzer):
        assert analyzer.classify(_chroma({9: 10.0}, {0: 1.1, 1: 1.0})).symbol == "A"
        assert analyzer.classify(_chroma({9: 10.0}, {0: 1.2, 1: 1.0})).symbol == "Am"

    def test_minor_with_no_major_third(self, analyzer):
        assert analyzer.classify(_chroma({2: 5.0}, {5: 1.0})).symbol == "Dm"

    def test_flat_bass_rejected(self, analyzer):
        assert analyzer.classify(_chroma({pc: 1.0 for pc in range(12)})) == NO_CHORD

    def test_rejection_threshold(self, analyzer):
        # max / mean must reach 2.2
        spread = {pc: 1.0 for pc in range(12)}
        spread[0] = 2.0
        assert analyzer.classify(_chroma(spread)) == NO_CHORD

    def test_empty_chroma(self, analyzer):
        assert analyzer.classify(DualChroma()) == NO_CHORD

    def test_thresholds_configurable(self):
        loose = HarmonicAnalyzer(HarmonyConfig(noise_ratio=1.5, minor_bias=1.0))
        spread = {pc: 1.0 for pc in range(12)}
        spread[0] = 2.0
        assert loose.classify(_chroma(spread, {3: 1.01, 4: 1.0})).symbol == "Cm"


class TestHarmonicAnalyzer:
    """Tests for beat-synchronous analysis on synthetic audio."""

    @pytest.fixture
    def analyzer(self):
        return HarmonicAnalyzer()

    @pytest.mark.parametrize("voicing,expected", [
        (C_MAJOR, "C"),
        (A_MINOR, "Am"),
        (F_MAJOR, "F"),
    ])
    def test_single_beat(self, analyzer, voicing, expected):
        beat = generate_chord_beat(voicing, 0.5)
        assert analyzer.analyze_beat(beat, SR).symbol == expected

    def test_silent_beat(self, analyzer):
        assert analyzer.analyze_beat(np.zeros(11025), SR) == NO_CHORD

    def test_quiet_beat(self, analyzer):
        beat = generate_chord_beat(C_MAJOR, 0.5) * 0.01
        assert calculate_rms(beat) < 0.01
        assert analyzer.analyze_beat(beat, SR) == NO_CHORD

    def test_short_beat_single_window(self, analyzer):
        # Shorter than one chroma window
        beat = generate_chord_beat(C_MAJOR, 0.25)
        assert len(beat) < 8192
        assert analyzer.analyze_beat(beat, SR).symbol == "C"

    def test_events_on_beat_grid(self, analyzer, c_then_g_buffer):
        events = analyzer.analyze(c_then_g_buffer, bpm=120.0, offset=0.0)
        assert len(events) == 16
        assert [e.timestamp for e in events] == pytest.approx([i * 0.5 for i in range(16)])

    def test_events_follow_tempo_beat_times(self, analyzer, c_then_g_buffer):
        events = analyzer.analyze(c_then_g_buffer, bpm=100.0, offset=0.3)
        expected = TempoInfo(bpm=100.0, offset=0.3).beat_times(c_then_g_buffer.duration)
        # The last slot is a partial beat
        assert len(events) == len(expected) - 1
        assert [e.timestamp for e in events] == pytest.approx(list(expected[:len(events)]))

    def test_detects_progression(self, analyzer, c_then_g_buffer):
        events = analyzer.analyze(c_then_g_buffer, bpm=120.0, offset=0.0)
        symbols = [e.chord.symbol for e in events]
        assert symbols == ["C"] * 8 + ["G"] * 8

    def test_silence_all_no_chord(self, analyzer, silent_buffer):
        events = analyzer.analyze(silent_buffer, bpm=120.0, offset=0.0)
        assert len(events) == 4
        assert all(e.chord.is_no_chord for e in events)

    def test_partial_trailing_beat_dropped(self, analyzer, c_then_g_buffer):
        events = analyzer.analyze(c_then_g_buffer, bpm=120.0, offset=0.25)
        assert len(events) == 15
        assert events[-1].timestamp == pytest.approx(7.25)

    def test_offset_past_end(self, analyzer, silent_buffer):
        assert analyzer.analyze(silent_buffer, bpm=120.0, offset=5.0) == []

    def test_invalid_bpm(self, analyzer, silent_buffer):
        with pytest.raises(ValueError):
            analyzer.analyze(silent_buffer, bpm=0.0, offset=0.0)

    def test_max_duration_warns(self, c_then_g_buffer):
        analyzer = HarmonicAnalyzer(HarmonyConfig(max_duration=2.0))
        with pytest.warns(UserWarning):
            events = analyzer.analyze(c_then_g_buffer, bpm=120.0, offset=0.0)
        assert len(events) == 4

    def test_progress_reported(self, analyzer, c_then_g_buffer):
        seen = []
        analyzer.analyze(c_then_g_buffer, 120.0, 0.0, on_progress=seen.append)
        assert seen[-1] == pytest.approx(1.0)
        assert seen == sorted(seen)

    def test_cancel_check_called_per_beat(self, analyzer, silent_buffer):
        calls = []
        analyzer.analyze(silent_buffer, 120.0, 0.0, check_cancelled=lambda: calls.append(1))
        assert len(calls) == 4

    def test_cancel_check_can_abort(self, analyzer, c_then_g_buffer):
        class Stop(Exception):
            pass

        def stop():
            raise Stop()

        with pytest.raises(Stop):
            analyzer.analyze(c_then_g_buffer, 120.0, 0.0, check_cancelled=stop)


class TestKeyEstimator:
    """Tests for the tonic root estimate."""

    def test_most_common_root(self):
        result = make_result(["G", "G", "C", "G", "D", "G"])
        assert KeyEstimator().estimate(result.chord_events) == "G"

    def test_last_chord_weighted(self):
        result = make_result(["C"] * 10 + ["Am"])
        assert KeyEstimator().estimate(result.chord_events) == "A"

    def test_quality_ignored(self):
        result = make_result(["Am", "A", "Am", "C"])
        assert KeyEstimator(last_chord_weight=0).estimate(result.chord_events) == "A"

    def test_all_no_chord(self):
        result = make_result(["N.C."] * 4)
        assert KeyEstimator().estimate(result.chord_events) == "C"

    def test_empty(self):
        assert KeyEstimator(default="E").estimate([]) == "E"
