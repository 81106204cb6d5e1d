"""Chord labels and per-beat chord events."""

import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .constants import PITCH_NAMES, PITCH_NAMES_FLAT, NO_CHORD_SYMBOL, MINOR_SUFFIX

_SYMBOL_RE = re.compile(r"^([A-G])(#|b)?(m)?$")


@dataclass(frozen=True)
class ChordLabel:
    """A major/minor triad on one of the 12 pitch classes, or "no chord".

    Equality ignores spelling: ``C#`` and ``Db`` compare equal, so a label
    transposed up and back down is the same label.
    """

    root: Optional[int] = None  # Pitch class 0-11, None for no chord
    minor: bool = False
    prefer_flats: bool = field(default=False, compare=False)

    def __post_init__(self):
        if self.root is not None and not 0 <= self.root < 12:
            raise ValueError(f"Pitch class out of range: {self.root}")
        if self.root is None and self.minor:
            raise ValueError("'No chord' cannot have a quality")

    @property
    def is_no_chord(self) -> bool:
        return self.root is None

    @property
    def root_name(self) -> Optional[str]:
        """Root spelled with sharps or flats (e.g. "F#", "Gb")."""
        if self.root is None:
            return None
        names = PITCH_NAMES_FLAT if self.prefer_flats else PITCH_NAMES
        return names[self.root]

    @property
    def quality(self) -> Optional[str]:
        if self.root is None:
            return None
        return "minor" if self.minor else "major"

    @property
    def symbol(self) -> str:
        """Chord symbol (e.g. "C", "F#m", "N.C.")."""
        if self.root is None:
            return NO_CHORD_SYMBOL
        return self.root_name + (MINOR_SUFFIX if self.minor else "")

    @property
    def pitch_classes(self) -> Tuple[int, ...]:
        """Triad pitch classes: root, third, fifth."""
        if self.root is None:
            return ()
        third = 3 if self.minor else 4
        return (self.root, (self.root + third) % 12, (self.root + 7) % 12)

    def transposed(self, semitones: int) -> "ChordLabel":
        """Shift by semitones; spelled with flats when moving down."""
        if self.root is None or semitones == 0:
            return self
        return ChordLabel(
            root=(self.root + semitones) % 12,
            minor=self.minor,
            prefer_flats=semitones < 0,
        )

    @classmethod
    def parse(cls, symbol: str) -> "ChordLabel":
        """Parse a symbol produced by ``symbol`` ("Bbm", "G", "N.C.")."""
        text = symbol.strip()
        if text == NO_CHORD_SYMBOL:
            return NO_CHORD
        match = _SYMBOL_RE.match(text)
        if not match:
            raise ValueError(f"Not a major/minor chord symbol: {symbol!r}")
        letter, accidental, minor = match.groups()
        pc = PITCH_NAMES.index(letter)
        if accidental == "#":
            pc += 1
        elif accidental == "b":
            pc -= 1
        return cls(root=pc % 12, minor=bool(minor), prefer_flats=accidental == "b")

    def __str__(self) -> str:
        return self.symbol


NO_CHORD = ChordLabel()


def transpose_symbol(symbol: str, semitones: int) -> str:
    """Transpose a chord symbol string, e.g. ``transpose_symbol("Am", 2) == "Bm"``."""
    return ChordLabel.parse(symbol).transposed(semitones).symbol


@dataclass(frozen=True)
class ChordEvent:
    """Chord heard on the beat starting at ``timestamp`` seconds."""

    timestamp: float
    chord: ChordLabel = NO_CHORD

    def with_chord(self, chord: ChordLabel) -> "ChordEvent":
        return ChordEvent(timestamp=self.timestamp, chord=chord)
