from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from histeval import __version__
from histeval.config import EvaluationConfig
from histeval.errors import HistevalError
from histeval.evaluator import Evaluator
from histeval.report import load_report, run_plotting_script, summarize, write_report
from histeval.strategies import default_strategies
from histeval.synthetic import generate_synthetic_history
from histeval.types import StrategyResult
from histeval.utils import configure_logging, git_revision

app = typer.Typer(help="Evaluate shell command prediction strategies on recorded history")
console = Console()

HISTORY_FILE = ".shell_history.json"
BATCH_HISTORY_FILE = "shell_history.json"
SANITIZED_HISTORY_FILE = "shell_history_sanitized.json"


def _default_input(sanitized_input: bool, batch_mode: bool) -> Path:
    if sanitized_input:
        return Path.home() / SANITIZED_HISTORY_FILE
    if batch_mode:
        return Path(BATCH_HISTORY_FILE)
    return Path.home() / HISTORY_FILE


def _print_summary(results: list[StrategyResult], ks: list[int]) -> None:
    table = Table(title="Strategy Summary")
    table.add_column("strategy")
    table.add_column("queries", justify="right")
    for k in ks:
        table.add_column(f"hit@{k}", justify="right")
    table.add_column(f"chars@{ks[-1]}", justify="right")

    for result in results:
        summary = summarize(result, ks)
        table.add_row(
            summary.title,
            str(summary.queries),
            *(f"{summary.hit_rate_at[k]:.3f}" for k in ks),
            f"{summary.chars_recalled_at[ks[-1]]:.2f}",
        )
    console.print(table)


def _version_callback(value: bool) -> None:
    if value:
        console.print(__version__)
        raise typer.Exit()


def _revision_callback(value: bool) -> None:
    if value:
        console.print(git_revision())
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version and exit"),
    ] = False,
    revision: Annotated[
        bool,
        typer.Option("--revision", callback=_revision_callback, is_eager=True, help="Show git revision and exit"),
    ] = False,
) -> None:
    """Evaluate shell command prediction strategies on recorded history."""


@app.command("evaluate")
def evaluate(
    input_path: Annotated[
        Path | None,
        typer.Option(
            "--input",
            "-i",
            help="History file; in batch mode the file name looked up in every device directory",
        ),
    ] = None,
    sanitized_input: Annotated[
        bool, typer.Option("--sanitized-input", help="Handle input as sanitized")
    ] = False,
    input_data_root: Annotated[
        Path | None,
        typer.Option("--input-data-root", help="Data root with <user>/<device>/<file> layout; enables batch mode"),
    ] = None,
    slow: Annotated[bool, typer.Option("--slow", help="Also evaluate slow markov chain strategies")] = False,
    baselines: Annotated[
        bool, typer.Option("--baselines", help="Also evaluate frequency and random baselines")
    ] = False,
    skip_failed_cmds: Annotated[
        bool, typer.Option("--skip-failed-cmds", help="Skip records with non-zero exit status")
    ] = False,
    debug: Annotated[
        float, typer.Option("--debug", help="Share of records (0-1) to inspect verbosely")
    ] = 0.0,
    scan_limit: Annotated[
        int | None, typer.Option("--scan-limit", help="Inspect at most this many candidates per query")
    ] = None,
    seed: Annotated[int | None, typer.Option("--seed", help="Random seed for sampling")] = None,
    plotting_script: Annotated[
        str | None, typer.Option("--plotting-script", help="Command that reads the report on stdin")
    ] = None,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write the JSON report to this file")
    ] = None,
    progress: Annotated[bool, typer.Option("--progress/--no-progress", help="Show progress bars")] = True,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Replay recorded history through every strategy and score the predictions."""
    configure_logging(verbose)
    try:
        config = EvaluationConfig(
            sanitized_input=sanitized_input,
            skip_failed_cmds=skip_failed_cmds,
            debug_records=debug,
            scan_limit=scan_limit,
            seed=seed,
            show_progress=progress,
        )
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    batch_mode = input_data_root is not None
    source = input_path or _default_input(sanitized_input, batch_mode)
    try:
        if input_data_root is not None:
            evaluator = Evaluator.from_data_root(input_data_root, source.name, config)
        else:
            evaluator = Evaluator.from_file(source, config)
    except (HistevalError, OSError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    strategies = default_strategies(
        slow=slow,
        baselines=baselines,
        max_candidates=config.max_candidates,
        seed=seed,
    )
    results = evaluator.run(strategies)
    _print_summary(results, config.summary_ks())

    report = evaluator.report()
    if output is not None:
        write_report(report, output)
    if plotting_script:
        run_plotting_script(report, plotting_script)


@app.command("summary")
def summary(
    report_path: Annotated[Path, typer.Argument(help="JSON report written by 'evaluate --output'")],
    max_candidates: Annotated[int, typer.Option("--max-candidates", help="Largest k to report")] = 50,
) -> None:
    """Print hit rates for a saved evaluation report."""
    try:
        config = EvaluationConfig(max_candidates=max_candidates)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc
    try:
        report = load_report(report_path)
    except (OSError, ValidationError) as exc:
        console.print(f"[red]Error:[/red] cannot read report {report_path}: {exc}")
        raise typer.Exit(code=1) from exc
    _print_summary(report.strategies, config.summary_ks())


@app.command("generate")
def generate(
    out: Annotated[Path, typer.Option("--out", "-o", help="Output JSONL history path")],
    sessions: Annotated[int, typer.Option("--sessions", "-n", help="Number of shell sessions")] = 20,
    seed: Annotated[int, typer.Option("--seed", help="Random seed")] = 42,
) -> None:
    """Generate a synthetic raw history file for trying out strategies."""
    count = generate_synthetic_history(output_path=out, sessions=sessions, seed=seed)
    console.print(f"Generated {count} records in {sessions} sessions at {out}")


if __name__ == "__main__":
    app()
