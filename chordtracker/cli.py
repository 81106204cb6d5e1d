"""Command-line interface for Chord Tracker.

Provides commands for:
- analyze: Detect tempo and chords, print the chord chart
- grid: Rebuild the chart from a saved analysis (offset, transpose, meter)
- position: Locate a playback time on the grid
- follow: Live playhead over a saved analysis
- info: Show audio file information
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import typer
from rich.console import Console
from rich.live import Live
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

app = typer.Typer(
    name="chord-tracker",
    help="On-device chord and beat grid extraction",
    rich_markup_mode="markdown",
)
console = Console()


@dataclass
class PipelineTimer:
    """Seconds spent in each pipeline state, fed from the progress callback."""

    stages: Dict[str, float] = field(default_factory=dict)
    _state: Optional[str] = field(default=None, repr=False)
    _since: float = field(default=0.0, repr=False)

    def enter(self, state: str) -> None:
        if state == self._state:
            return
        self.finish()
        self._state = state
        self._since = time.perf_counter()

    def finish(self) -> None:
        if self._state is not None:
            self.stages[self._state] = time.perf_counter() - self._since
            self._state = None


def _load_analysis(path: Path):
    from .output import AnalysisExporter

    if not path.exists():
        console.print(f"[red]Error: File not found: {path}[/red]")
        raise typer.Exit(1)
    try:
        return AnalysisExporter().load(path)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def _grid_settings(beats: int, offset_ms: float, transpose: int):
    from .processing import GridSettings

    if beats < 0:
        console.print("[red]Error: --beats must be positive[/red]")
        raise typer.Exit(1)
    return GridSettings(
        beats_per_measure=beats or None,
        offset_ms=offset_ms,
        transpose=transpose,
    )


@app.command()
def analyze(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write the analysis as JSON"
    ),
    midi: Optional[Path] = typer.Option(
        None, "--midi", help="Also export the chord track as MIDI"
    ),
    beats: int = typer.Option(
        4, "-b", "--beats", help="Beats per measure"
    ),
    max_duration: float = typer.Option(
        600.0, "--max-duration", help="Analyse at most this many seconds (0 = whole track)"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
    verbose: bool = typer.Option(
        False, "-v", "--verbose", help="Verbose output"
    ),
):
    """Detect tempo, downbeat and one chord per beat.

    **Examples:**

        chord-tracker analyze song.mp3

        chord-tracker analyze song.wav -o song.json --midi song.mid
    """
    from .core import AnalysisError
    from .inference import HarmonyConfig
    from .output import AnalysisExporter, ChordMidiExporter
    from .pipeline import AnalysisPipeline, AnalysisState, PipelineConfig
    from .processing import GridBuilder, GridSettings

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)
    if beats <= 0:
        console.print("[red]Error: --beats must be positive[/red]")
        raise typer.Exit(1)

    config = PipelineConfig(
        beats_per_measure=beats,
        harmony=HarmonyConfig(max_duration=max_duration or None),
    )
    timer = PipelineTimer()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
        disable=json_output,
    ) as progress:
        task = progress.add_task("Starting...", total=1.0)

        def on_progress(state: AnalysisState, fraction: float, message: str) -> None:
            if not state.is_terminal:
                timer.enter(state.value)
            progress.update(task, completed=fraction, description=message)

        pipeline = AnalysisPipeline(config, on_progress=on_progress)
        try:
            result = pipeline.run(input_file)
        except AnalysisError as e:
            console.print(f"[red]Analysis failed: {e}[/red]")
            raise typer.Exit(1)
        finally:
            timer.finish()

    if output:
        AnalysisExporter().export(result, output)
    if midi:
        ChordMidiExporter().export(result, str(midi))

    if json_output:
        data = AnalysisExporter().to_dict(result)
        data["input"] = str(input_file)
        data["timings"] = dict(timer.stages)
        console.print_json(data=data)
        return

    console.print(f"\n[bold blue]Chord Analysis: {input_file.name}[/bold blue]")
    console.print(f"  Tempo: {result.bpm:.1f} BPM ({result.time_signature})")
    console.print(f"  First beat: {result.offset:.3f}s")
    console.print(f"  Key (root): {result.key}")
    console.print(f"  Beats analysed: {len(result.chord_events)}")

    measures = GridBuilder().build(result, GridSettings())
    _show_grid_table(measures)

    if output:
        console.print(f"[green]Saved analysis to {output}[/green]")
    if midi:
        console.print(f"[green]Saved MIDI chord track to {midi}[/green]")
    if verbose:
        console.print("\n[bold]Timing:[/bold]")
        for stage, seconds in timer.stages.items():
            console.print(f"  {stage}: {seconds:.2f}s")
        console.print(f"  [bold]Total: {sum(timer.stages.values()):.2f}s[/bold]")


@app.command()
def grid(
    analysis_file: Path = typer.Argument(..., help="Analysis JSON written by 'analyze -o'"),
    beats: int = typer.Option(0, "-b", "--beats", help="Beats per measure (0 = as analysed)"),
    offset_ms: float = typer.Option(0.0, "--offset-ms", help="Shift the grid by milliseconds"),
    transpose: int = typer.Option(0, "-t", "--transpose", help="Transpose by semitones"),
):
    """Rebuild the chord chart from a saved analysis without re-analysing audio."""
    from .processing import GridBuilder

    result = _load_analysis(analysis_file)
    settings = _grid_settings(beats, offset_ms, transpose)
    measures = GridBuilder().build(result, settings)

    console.print(
        f"\n[bold]{analysis_file.stem}[/bold]  {result.bpm:.1f} BPM, "
        f"{settings.resolve_beats(result)} beats/measure, transpose {transpose:+d}"
    )
    _show_grid_table(measures)


@app.command()
def position(
    analysis_file: Path = typer.Argument(..., help="Analysis JSON written by 'analyze -o'"),
    current_time: float = typer.Argument(..., help="Playback time in seconds"),
    beats: int = typer.Option(0, "-b", "--beats", help="Beats per measure (0 = as analysed)"),
    offset_ms: float = typer.Option(0.0, "--offset-ms", help="Shift the grid by milliseconds"),
    transpose: int = typer.Option(0, "-t", "--transpose", help="Transpose by semitones"),
):
    """Show the measure, beat and chord under the playhead at a given time."""
    from .processing import GridCache, PlaybackSynchronizer

    result = _load_analysis(analysis_file)
    settings = _grid_settings(beats, offset_ms, transpose)
    sync = PlaybackSynchronizer.from_result(result, settings)
    pos = sync.position(current_time)
    measures = GridCache().get_grid(result, settings)

    console.print(f"  Measure: {pos.active_measure_index + 1}")
    console.print(f"  Beat: {pos.beat_index + 1}")
    console.print(f"  Progress in measure: {pos.fraction_within_measure:.0%}")
    console.print(f"  Chord: {_chord_at(measures, pos)}")


@app.command()
def follow(
    analysis_file: Path = typer.Argument(..., help="Analysis JSON written by 'analyze -o'"),
    rate: float = typer.Option(1.0, "-r", "--rate", help="Playback rate"),
    start: float = typer.Option(0.0, "-s", "--start", help="Start time in seconds"),
    beats: int = typer.Option(0, "-b", "--beats", help="Beats per measure (0 = as analysed)"),
    offset_ms: float = typer.Option(0.0, "--offset-ms", help="Shift the grid by milliseconds"),
    transpose: int = typer.Option(0, "-t", "--transpose", help="Transpose by semitones"),
    fps: int = typer.Option(20, "--fps", help="Refresh rate of the display"),
):
    """Play a silent playhead over a saved analysis (Ctrl+C to stop)."""
    from .processing import GridCache, PlaybackClock, PlaybackSynchronizer

    if rate <= 0 or fps <= 0:
        console.print("[red]Error: --rate and --fps must be positive[/red]")
        raise typer.Exit(1)

    result = _load_analysis(analysis_file)
    settings = _grid_settings(beats, offset_ms, transpose)
    measures = GridCache().get_grid(result, settings)
    sync = PlaybackSynchronizer.from_result(result, settings)

    clock = PlaybackClock(rate=rate)
    clock.seek(start)
    clock.start()

    try:
        with Live(console=console, refresh_per_second=fps) as live:
            while clock.now() < result.duration:
                pos = sync.position(clock.now())
                live.update(_render_playhead(measures, pos, clock.now()))
                time.sleep(1.0 / fps)
    except KeyboardInterrupt:
        clock.pause()
        console.print(f"[yellow]Stopped at {clock.now():.2f}s[/yellow]")


@app.command()
def info(
    input_file: Path = typer.Argument(..., help="Input audio file"),
):
    """Show information about an audio file."""
    from .analysis import RhythmDetector
    from .core import DecodeError
    from .input import AudioLoader

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    try:
        buffer = AudioLoader().load(input_file)
    except DecodeError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"\n[bold]Audio Info:[/bold] {input_file.name}")
    console.print(f"  Duration: {buffer.duration:.2f} seconds")
    console.print(f"  Sample rate: {buffer.sample_rate} Hz")
    console.print(f"  Samples: {len(buffer):,}")

    tempo = RhythmDetector().detect(buffer)
    note = " (default, signal too weak)" if tempo.is_fallback else ""
    console.print(f"  Estimated tempo: {tempo.bpm:.1f} BPM{note}")
    console.print(f"  First strong beat: {tempo.offset:.3f}s")


def _chord_at(measures, pos) -> str:
    if not measures or pos.active_measure_index >= len(measures):
        return "N.C."
    return measures[pos.active_measure_index].beats[pos.beat_index].symbol


def _beat_cells(beats) -> List[str]:
    """Show a chord only where it changes; sustained beats become dots."""
    cells = []
    for i, label in enumerate(beats):
        cells.append("." if i > 0 and beats[i - 1] == label else label.symbol)
    return cells


def _show_grid_table(measures):
    """Display the chord grid in a table."""
    if not measures:
        console.print("[yellow]No measures to show.[/yellow]")
        return

    n_beats = len(measures[0].beats)
    table = Table(title="Chord Grid")
    table.add_column("Bar", style="cyan", justify="right")
    table.add_column("Time", style="yellow")
    for b in range(n_beats):
        table.add_column(str(b + 1), style="green")

    for measure in measures:
        table.add_row(
            str(measure.index + 1),
            f"{measure.start_time:.2f}s",
            *_beat_cells(measure.beats),
        )

    console.print(table)


def _render_playhead(measures, pos, now: float) -> Table:
    """Table of the active measure with the current beat highlighted."""
    table = Table(title=f"{now:6.2f}s  bar {pos.active_measure_index + 1}")
    if not measures:
        return table
    index = min(pos.active_measure_index, len(measures) - 1)
    measure = measures[index]
    for b in range(len(measure.beats)):
        table.add_column(str(b + 1), justify="center")
    cells = [
        f"[bold black on yellow]{label.symbol}[/]" if b == pos.beat_index else label.symbol
        for b, label in enumerate(measure.beats)
    ]
    table.add_row(*cells)
    filled = int(pos.fraction_within_measure * 20)
    table.caption = "[" + "#" * filled + "-" * (20 - filled) + "]"
    return table


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
