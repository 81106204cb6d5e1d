"""MIDI export of the detected chord track."""

from pathlib import Path
from typing import List, Optional

import pretty_midi

from ..core import AnalysisResult, ChordEvent


class ChordMidiExporter:
    """Export chord events as block-chord triads."""

    def __init__(
        self,
        octave: int = 3,
        velocity: int = 80,
        instrument_name: str = "Acoustic Grand Piano",
        instrument_program: int = 0,
    ):
        """
        Initialize ChordMidiExporter.

        Args:
            octave: Octave of the chord root (3 = C3..B3)
            velocity: MIDI velocity (0-127)
            instrument_name: MIDI instrument name
            instrument_program: MIDI program number (0-127)
        """
        self.octave = octave
        self.velocity = velocity
        self.instrument_name = instrument_name
        self.instrument_program = instrument_program

    def to_pretty_midi(self, result: AnalysisResult) -> pretty_midi.PrettyMIDI:
        """Convert an analysis to a PrettyMIDI object without saving."""
        midi = pretty_midi.PrettyMIDI(initial_tempo=result.bpm)
        instrument = pretty_midi.Instrument(
            program=self.instrument_program,
            name=self.instrument_name,
        )

        end_of_track = result.duration
        beat = 60.0 / result.bpm
        for start, end, event in self._segments(list(result.chord_events), beat, end_of_track):
            base = (self.octave + 1) * 12
            for pc in event.chord.pitch_classes:
                # Keep the voicing ascending from the root
                pitch = base + pc if pc >= event.chord.root else base + 12 + pc
                instrument.notes.append(
                    pretty_midi.Note(velocity=self.velocity, pitch=pitch, start=start, end=end)
                )

        midi.instruments.append(instrument)
        return midi

    def export(self, result: AnalysisResult, output_path: str) -> None:
        """
        Export the chord track to a MIDI file.

        Args:
            result: Analysis to export
            output_path: Path to output MIDI file
        """
        midi = self.to_pretty_midi(result)

        # Ensure output directory exists
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        midi.write(output_path)

    @staticmethod
    def _segments(events: List[ChordEvent], beat: float, end_of_track: Optional[float]):
        """Merge consecutive equal chords into (start, end, event) spans."""
        spans = []
        for i, event in enumerate(events):
            if event.chord.is_no_chord:
                continue
            end = events[i + 1].timestamp if i + 1 < len(events) else event.timestamp + beat
            if end_of_track is not None:
                end = min(end, end_of_track)
            if end <= event.timestamp:
                continue
            if spans and spans[-1][1] == event.timestamp and spans[-1][2].chord == event.chord:
                spans[-1] = (spans[-1][0], end, spans[-1][2])
            else:
                spans.append((event.timestamp, end, event))
        return spans
