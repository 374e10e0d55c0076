"""CLI entrypoint for the shadowing-grader command."""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import numpy as np
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .analytics import LearningAnalyticsEngine, SessionStore
from .analyzer import ShadowingAnalyzer
from .assessment import AssessmentAggregator, AssessmentResult, score_grade
from .audio import load_audio
from .config import load_config
from .errors import ShadowingGraderError
from .pitch import extract_pitch

app = typer.Typer(help="Analyse Mandarin shadowing practice recordings")
console = Console()


def _load_partials(path: Path) -> list[dict]:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return data if isinstance(data, list) else [data]


def _print_assessment(result: AssessmentResult) -> None:
    table = Table(title="Assessment")
    table.add_column("Score")
    table.add_column("Value", justify="right")
    table.add_column("Grade")
    rows = [
        ("Accuracy", result.accuracy_score),
        ("Fluency", result.fluency_score),
        ("Completeness", result.completeness_score),
        ("Pronunciation", result.pron_score),
    ]
    if result.prosody_score is not None:
        rows.append(("Prosody", result.prosody_score))
    for name, value in rows:
        table.add_row(name, f"{value:.1f}", score_grade(value))
    console.print(table)

    stats = result.error_statistics
    console.print(
        f"Words: {stats.total_words} ({stats.correct_words} correct, "
        f"{stats.mispronunciations} mispronounced, {stats.omissions} omitted)"
    )
    for label, items in (
        ("Strengths", result.strengths),
        ("Improve", result.improvements),
        ("Next", result.next_steps),
    ):
        for item in items:
            console.print(f"[bold]{label}:[/bold] {item}")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Analyse Mandarin shadowing practice recordings."""
    config = load_config()
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.command()
def pitch(
    audio_file: Annotated[Path, typer.Argument(help="Audio file to analyse")],
    method: Annotated[str, typer.Option(help="yin or autocorrelation")] = "yin",
) -> None:
    """Extract and summarize the pitch contour of a recording."""
    config = load_config()
    buffer = load_audio(audio_file)
    try:
        contour = extract_pitch(buffer, method=method, config=config.pitch)
    except ShadowingGraderError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    voiced = contour.voiced_frequencies
    console.print(f"[bold]{audio_file.name}[/bold]: {buffer.duration_sec:.2f}s, {len(contour)} frames")
    if len(voiced) == 0:
        console.print("[yellow]No voiced frames detected[/yellow]")
        return
    console.print(
        f"Voiced {len(voiced)}/{len(contour)} frames, "
        f"mean {np.mean(voiced):.1f} Hz, range {np.min(voiced):.1f}-{np.max(voiced):.1f} Hz"
    )


@app.command()
def analyze(
    audio_file: Annotated[Path, typer.Argument(help="Recording of the shadowing attempt")],
    text: Annotated[str, typer.Option(help="Sentence being shadowed")],
    partials: Annotated[Optional[Path], typer.Option(help="JSON file of partial assessment results")] = None,
    recognized: Annotated[Optional[str], typer.Option(help="Recognized text")] = None,
    sessions: Annotated[Optional[Path], typer.Option(help="Append the attempt to this session log")] = None,
) -> None:
    """Analyse one shadowing attempt: tones, voice, emotion and assessment."""
    config = load_config()
    try:
        analyzer = ShadowingAnalyzer(config)
    except ShadowingGraderError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    buffer = load_audio(audio_file)

    partial_results = _load_partials(partials) if partials else None
    report = analyzer.analyze(buffer, text, partials=partial_results, recognized_text=recognized)

    if report.tones:
        table = Table(title="Tones")
        table.add_column("Char")
        table.add_column("Expected", justify="right")
        table.add_column("Detected", justify="right")
        table.add_column("Accuracy", justify="right")
        for segment in report.tones:
            style = "green" if segment.is_correct else "red"
            table.add_row(
                segment.character,
                str(segment.expected_tone),
                f"[{style}]{segment.detected_tone}[/{style}]",
                f"{segment.accuracy:.0f}",
            )
        console.print(table)

    features = report.features
    console.print(
        f"Pitch {features.average_pitch:.1f} Hz, volume {features.volume:.2f}, "
        f"rate {features.speech_rate_syllables_per_sec:.1f} syl/s, "
        f"{len(features.pauses)} pauses"
    )
    emotion = report.emotion
    console.print(
        "Emotion: " + ", ".join(f"{k} {v:.0f}" for k, v in emotion.as_dict().items()) + f" ({emotion.label})"
    )

    if isinstance(report.assessment, AssessmentResult):
        _print_assessment(report.assessment)

    if sessions:
        store = SessionStore(sessions)
        log = store.append(report.to_session())
        console.print(f"[green]Saved session {len(log)} to {sessions}[/green]")


@app.command()
def aggregate(
    input_file: Annotated[Path, typer.Argument(help="JSON file of partial assessment results")],
    recognized: Annotated[str, typer.Option(help="Recognized text")] = "",
    expected: Annotated[str, typer.Option(help="Expected text")] = "",
    as_json: Annotated[bool, typer.Option("--json", help="Print the result as JSON")] = False,
) -> None:
    """Merge partial assessment results into one assessment."""
    config = load_config()
    result = AssessmentAggregator(config.assessment).aggregate(
        _load_partials(input_file), recognized, expected
    )
    if not isinstance(result, AssessmentResult):
        console.print(f"[red]No data: {result.reason}[/red]")
        raise typer.Exit(1)

    if as_json:
        console.print_json(result.to_json())
    else:
        _print_assessment(result)


@app.command()
def profile(
    sessions_file: Annotated[Path, typer.Argument(help="Session log JSON")],
    top: Annotated[int, typer.Option(help="Number of advice items to show")] = 5,
) -> None:
    """Show the learning profile and top advice for a session log."""
    config = load_config()
    try:
        sessions = SessionStore(sessions_file).load()
    except ShadowingGraderError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    engine = LearningAnalyticsEngine(sessions, config.analytics)
    learner = engine.get_profile()
    if learner is None:
        console.print("[yellow]No sessions yet[/yellow]")
        return

    table = Table(title=f"Profile ({learner.session_count} sessions)")
    table.add_column("Category")
    table.add_column("Average", justify="right")
    table.add_column("Trend", justify="right")
    for category, value in learner.average_scores.items():
        trend = learner.trends.get(category)
        table.add_row(category, f"{value:.1f}", f"{trend:+.1f}" if trend is not None else "")
    console.print(table)
    console.print(
        f"Style: {learner.learning_style}, streak {learner.streak_days} days, "
        f"improvement {learner.improvement_percent:+.0f}%"
    )

    for item in engine.generate_advice(limit=top):
        console.print(f"[bold]{item.priority:.1f}[/bold] ({item.category}) {item.message}")


if __name__ == "__main__":
    app()
