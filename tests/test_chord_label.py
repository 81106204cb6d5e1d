"""Tests for chord labels and events."""

import pytest

from chordtracker.core import ChordEvent, ChordLabel, NO_CHORD, transpose_symbol


class TestChordLabel:
    """Tests for ChordLabel."""

    def test_major_symbol(self):
        assert ChordLabel(root=0).symbol == "C"
        assert ChordLabel(root=6).symbol == "F#"

    def test_minor_symbol(self):
        label = ChordLabel(root=9, minor=True)
        assert label.symbol == "Am"
        assert label.quality == "minor"

    def test_no_chord(self):
        assert NO_CHORD.is_no_chord
        assert NO_CHORD.symbol == "N.C."
        assert NO_CHORD.quality is None
        assert NO_CHORD.pitch_classes == ()

    def test_invalid_root(self):
        with pytest.raises(ValueError):
            ChordLabel(root=12)

    def test_no_chord_cannot_be_minor(self):
        with pytest.raises(ValueError):
            ChordLabel(root=None, minor=True)

    def test_pitch_classes(self):
        assert ChordLabel(root=0).pitch_classes == (0, 4, 7)
        assert ChordLabel(root=9, minor=True).pitch_classes == (9, 0, 4)

    def test_str(self):
        assert str(ChordLabel(root=7)) == "G"


class TestParse:
    """Tests for parsing chord symbols."""

    @pytest.mark.parametrize("symbol,root,minor", [
        ("C", 0, False),
        ("Am", 9, True),
        ("F#", 6, False),
        ("Bbm", 10, True),
        ("Cb", 11, False),
    ])
    def test_parse(self, symbol, root, minor):
        label = ChordLabel.parse(symbol)
        assert label.root == root
        assert label.minor == minor

    def test_parse_no_chord(self):
        assert ChordLabel.parse("N.C.") is NO_CHORD

    def test_parse_keeps_flat_spelling(self):
        assert ChordLabel.parse("Eb").symbol == "Eb"

    @pytest.mark.parametrize("symbol", ["", "H", "C7", "Csus4", "cm"])
    def test_parse_rejects_unknown(self, symbol):
        with pytest.raises(ValueError):
            ChordLabel.parse(symbol)


class TestTranspose:
    """Tests for transposition."""

    def test_transpose_up(self):
        assert ChordLabel(root=0).transposed(2).symbol == "D"

    def test_transpose_wraps(self):
        assert ChordLabel(root=11).transposed(1).symbol == "C"

    def test_transpose_down_uses_flats(self):
        assert ChordLabel(root=3).transposed(-2).symbol == "Db"

    def test_transpose_keeps_quality(self):
        assert ChordLabel(root=9, minor=True).transposed(3).symbol == "Cm"

    def test_no_chord_unchanged(self):
        assert NO_CHORD.transposed(5) is NO_CHORD

    @pytest.mark.parametrize("n", [-11, -3, 1, 5, 12])
    def test_round_trip(self, n):
        for root in range(12):
            for minor in (False, True):
                label = ChordLabel(root=root, minor=minor)
                assert label.transposed(n).transposed(-n) == label

    def test_enharmonic_equality(self):
        assert ChordLabel.parse("C#") == ChordLabel.parse("Db")

    def test_transpose_symbol(self):
        assert transpose_symbol("Am", 2) == "Bm"
        assert transpose_symbol("N.C.", 4) == "N.C."


class TestChordEvent:
    """Tests for ChordEvent."""

    def test_default_is_no_chord(self):
        assert ChordEvent(timestamp=1.0).chord.is_no_chord

    def test_with_chord(self):
        event = ChordEvent(timestamp=1.5, chord=NO_CHORD)
        updated = event.with_chord(ChordLabel(root=7))
        assert updated.timestamp == 1.5
        assert updated.chord.symbol == "G"
        assert event.chord.is_no_chord
