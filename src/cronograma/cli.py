"""Command-line interface for Cronograma."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer

from . import context
from .calendar import WorkingCalendar
from .exceptions import CronogramaError
from .graph import detect_cycles
from .logger import setup_logger
from .models import ScheduleSnapshot
from .parser import load_snapshot, write_snapshot
from .scheduler import ScheduleOutcome, ScheduleService
from .unified_config import UnifiedConfig

app = typer.Typer(
    name="cronograma",
    help="Resolve task dependencies of a project schedule over a working calendar",
    add_completion=False,
)
calendar_app = typer.Typer(help="Working calendar arithmetic")
app.add_typer(calendar_app, name="calendar")


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to unified config file (default: cronograma_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for cronograma commands."""
    setup_logger(verbose)
    context.set_config_path(config)


def _load_config() -> UnifiedConfig:
    try:
        return context.get_config()
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


def _load(file: Path, config: UnifiedConfig) -> ScheduleSnapshot:
    try:
        return load_snapshot(file, config)
    except CronogramaError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


def _display_outcome(outcome: ScheduleOutcome) -> None:
    """Display resolution results to stdout and warnings to stderr."""
    typer.echo(f"Status: {outcome.status.value}")

    for title, lines in (
        ("Corrections", outcome.corrections),
        ("Milestones", outcome.milestones),
        ("Hierarchy", outcome.rollup_changes),
    ):
        if lines:
            typer.echo(f"\n{title}:")
            for line in lines:
                typer.echo(f"  - {line}")

    if outcome.cycle_warnings:
        typer.echo("\nCycles:", err=True)
        for warning in outcome.cycle_warnings:
            typer.echo(f"  - {warning}", err=True)

    if outcome.diagnostics:
        typer.echo("\nWarnings:", err=True)
        for diagnostic in outcome.diagnostics:
            typer.echo(f"  - {diagnostic}", err=True)


@app.command()
def resolve(
    file: Annotated[Path, typer.Argument(help="Path to the schedule snapshot YAML file")],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the corrected snapshot to this file"),
    ] = None,
    max_iterations: Annotated[
        int | None,
        typer.Option(
            "--max-iterations",
            help="Maximum propagation sweeps (default: number of tasks + 1)",
            min=1,
        ),
    ] = None,
) -> None:
    """Resolve dependencies, identify milestones and roll up the hierarchy."""
    config = _load_config()
    snapshot = _load(file, config)

    engine_config = config.engine
    if max_iterations is not None:
        engine_config = engine_config.model_copy(update={"max_iterations": max_iterations})

    outcome = ScheduleService(snapshot, engine_config).run()
    _display_outcome(outcome)

    if not outcome.ok:
        typer.echo(f"Error: {outcome.error}", err=True)
        raise typer.Exit(1)

    if output:
        write_snapshot(output, snapshot, outcome)
        typer.echo(f"\nCorrected schedule written to {output}")


@app.command()
def cycles(
    file: Annotated[Path, typer.Argument(help="Path to the schedule snapshot YAML file")],
) -> None:
    """List dependency cycles without resolving anything."""
    snapshot = _load(file, _load_config())
    found = detect_cycles(snapshot)
    if not found:
        typer.echo("No dependency cycles found")
        return

    typer.echo(f"Found {len(found)} dependency cycle(s):")
    for cycle in found:
        typer.echo(f"  - {cycle}")


@calendar_app.command("add")
def calendar_add(
    start: Annotated[
        str, typer.Argument(help="Start datetime (ISO format, e.g. 2025-01-06T08:00)")
    ],
    minutes: Annotated[
        int, typer.Argument(help="Working minutes to add (use '--' before negative values)")
    ],
) -> None:
    """Add working minutes to a datetime using the configured calendar."""
    try:
        start_dt = datetime.fromisoformat(start)
    except ValueError:
        typer.echo(
            f"Error: Invalid datetime '{start}'. Use ISO format (YYYY-MM-DDTHH:MM)", err=True
        )
        raise typer.Exit(1) from None

    config = _load_config()
    try:
        calendar = WorkingCalendar(config.calendar)
        result = calendar.add_duration(start_dt, minutes)
    except CronogramaError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    typer.echo(result.isoformat())


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
