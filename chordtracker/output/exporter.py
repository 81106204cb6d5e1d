"""JSON export of analysis results for persistence."""

import json
from pathlib import Path
from typing import Any, Dict, Union

from ..core import AnalysisResult, ChordEvent, ChordLabel
from ..core.constants import DEFAULT_BEATS_PER_MEASURE, DEFAULT_KEY

FORMAT_VERSION = 1


class AnalysisExporter:
    """Serialize ``AnalysisResult`` to and from JSON documents."""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def to_dict(self, result: AnalysisResult) -> Dict[str, Any]:
        return {
            "version": FORMAT_VERSION,
            "bpm": result.bpm,
            "beats_per_measure": result.beats_per_measure,
            "time_signature": result.time_signature,
            "key": result.key,
            "duration": result.duration,
            "offset": result.offset,
            "chords": [
                {"timestamp": e.timestamp, "chord": e.chord.symbol}
                for e in result.chord_events
            ],
        }

    def from_dict(self, data: Dict[str, Any]) -> AnalysisResult:
        """
        Rebuild an analysis from a document produced by ``to_dict``.

        Raises:
            ValueError: If required fields are missing or malformed
        """
        try:
            events = tuple(
                ChordEvent(
                    timestamp=float(item["timestamp"]),
                    chord=ChordLabel.parse(item["chord"]),
                )
                for item in data["chords"]
            )
            return AnalysisResult(
                bpm=float(data["bpm"]),
                chord_events=events,
                duration=float(data["duration"]),
                offset=float(data.get("offset", 0.0)),
                beats_per_measure=int(data.get("beats_per_measure", DEFAULT_BEATS_PER_MEASURE)),
                key=str(data.get("key", DEFAULT_KEY)),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed analysis document: {e}") from e

    def export(self, result: AnalysisResult, output_path: Union[str, Path]) -> None:
        """
        Write analysis to a JSON file.

        Args:
            result: Analysis to save
            output_path: Path to output JSON file
        """
        path = Path(output_path)
        # Ensure output directory exists
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(result), indent=self.indent), encoding="utf-8")

    def load(self, input_path: Union[str, Path]) -> AnalysisResult:
        """Read analysis from a JSON file."""
        path = Path(input_path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Not a JSON analysis file: {path}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Not a JSON analysis file: {path}")
        return self.from_dict(data)
