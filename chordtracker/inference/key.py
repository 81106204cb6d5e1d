"""Key estimate - Best-guess tonal root from a chord sequence.

Counts chord roots (quality ignored) and gives the final chord extra weight,
since songs usually resolve to the tonic. Only the root is reported.
"""

from collections import Counter
from typing import Sequence

from ..core import ChordEvent
from ..core.constants import PITCH_NAMES, LAST_CHORD_WEIGHT, DEFAULT_KEY


class KeyEstimator:
    """Guess the tonic root of a cleaned chord sequence."""

    def __init__(self, last_chord_weight: int = LAST_CHORD_WEIGHT, default: str = DEFAULT_KEY):
        self.last_chord_weight = last_chord_weight
        self.default = default

    def estimate(self, events: Sequence[ChordEvent]) -> str:
        """
        Estimate the key root.

        Args:
            events: Chord events, typically after cleanup

        Returns:
            Root name (e.g. "G"), or the default when no chord was heard
        """
        counts: Counter = Counter()
        for event in events:
            if not event.chord.is_no_chord:
                counts[event.chord.root] += 1

        if events and not events[-1].chord.is_no_chord:
            counts[events[-1].chord.root] += self.last_chord_weight

        if not counts:
            return self.default

        # most_common keeps first-seen order for ties
        root, _ = counts.most_common(1)[0]
        return PITCH_NAMES[root]
