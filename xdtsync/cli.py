"""
xdtsync.cli - Typer CLI entry point.

Provides the subcommands for synchronizing XDTS timesheets into a project
document.
"""

from __future__ import annotations

import math
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from xdtsync import __version__
from xdtsync.config import (
    SETTINGS_FILE_NAMES,
    create_default_settings,
    load_settings,
    write_settings,
)
from xdtsync.exceptions import XdtsSyncError
from xdtsync.logging import configure_logging

app = typer.Typer(
    name="xdtsync",
    help="XDTS timesheet synchronizer.\n\n"
    "Retimes cel layers in a compositing project from XDTS exposure sheets "
    "using stepped time-remap and opacity keyframes.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"xdtsync {__version__}")
        raise typer.Exit()


def fail(error: Exception) -> None:
    console.print(f"[red]Error: {escape(str(error))}[/red]")
    raise typer.Exit(1)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """xdtsync - XDTS timesheet synchronizer."""
    pass


@app.command("init")
def init_settings(
    path: str = typer.Argument(".", help="Project directory to write the settings file to"),
) -> None:
    """Write a default xdts-sync.yaml settings file."""
    project_dir = Path(path)
    existing = [name for name in SETTINGS_FILE_NAMES if (project_dir / name).exists()]
    if existing:
        console.print(f"[red]Error: '{existing[0]}' already exists in {project_dir}[/red]")
        raise typer.Exit(1)

    settings_path = project_dir / SETTINGS_FILE_NAMES[0]
    write_settings(create_default_settings(), settings_path)
    console.print(f"[green]✓[/green] Created {settings_path}")


@app.command("check")
def check_project(
    project_file: Path = typer.Argument(..., help="Project document (JSON)"),
) -> None:
    """Run the load phase and list the columns that would be retimed.

    Reads and decodes every timesheet and locates its sync folder without
    modifying the project.
    """
    from xdtsync.host import load_project
    from xdtsync.sync import load_tasks

    project_dir = project_file.resolve().parent
    try:
        settings = load_settings(project_dir)
        project = load_project(project_file)
        tasks = load_tasks(project, project_dir, settings)
    except XdtsSyncError as e:
        fail(e)

    table = Table(title="Synchronization Tasks")
    table.add_column("Timesheet", style="cyan")
    table.add_column("Duration", justify="right")
    table.add_column("Columns", style="green")
    table.add_column("Skipped", style="yellow")

    for task in tasks:
        skipped = [c for c in task.timesheet.columns if c not in task.columns]
        table.add_row(
            escape(task.name),
            str(task.timesheet.duration),
            escape(", ".join(task.columns)) or "-",
            escape(", ".join(skipped)) or "-",
        )

    console.print(table)
    console.print(f"\n[green]✓[/green] {len(tasks)} timesheet(s) ready to synchronize")


@app.command("sync")
def sync_project(
    project_file: Path = typer.Argument(..., help="Project document (JSON)"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write the result here instead of in place"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Do not save the project"),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable debug logging"),
) -> None:
    """Synchronize all timesheets into the project.

    Creates missing comps, matches them to their cels and writes stepped
    Timewarp source frame and opacity keys for every timesheet column.
    """
    from xdtsync.host import load_project, save_project
    from xdtsync.sync import synchronize

    configure_logging(verbose)

    project_dir = project_file.resolve().parent
    try:
        settings = load_settings(project_dir)
        project = load_project(project_file)
        report = synchronize(project, project_dir, settings)
    except XdtsSyncError as e:
        fail(e)

    table = Table(title="Retimed Columns")
    table.add_column("Timesheet", style="cyan")
    table.add_column("Column", style="green")
    table.add_column("Order", justify="right")
    table.add_column("Source Keys", justify="right")
    table.add_column("Opacity Keys", justify="right")

    for result in report.columns:
        table.add_row(
            escape(result.task),
            escape(result.column),
            str(result.index),
            str(result.source_frame_keys),
            str(result.opacity_keys),
        )
    console.print(table)

    for name in report.created_comps:
        console.print(f"[dim]  Created comp {escape(name)}[/dim]")

    if dry_run:
        console.print("[yellow]Dry run, project not saved[/yellow]")
        return

    output_path = output or project_file
    save_project(project, output_path)
    console.print(
        f"\n[green]✓[/green] Synchronized {len(report.columns)} column(s) "
        f"from {len(report.tasks)} timesheet(s) → {output_path}"
    )


@app.command("inspect")
def inspect_timesheet(
    xdts_file: Path = typer.Argument(..., help="XDTS timesheet file"),
    column: str | None = typer.Option(None, "--column", "-c", help="Only show this column"),
    start_frame: int | None = typer.Option(
        None,
        "--start-frame",
        "-s",
        help="First frame number (0 or 1), from settings if omitted",
    ),
    project: Path = typer.Option(
        Path("."), "--project", "-p", help="Project directory holding the settings file"
    ),
    fps: float = typer.Option(24.0, "--fps", "-r", help="Frame rate used for timecode"),
) -> None:
    """Decode a timesheet and print its exposures per column."""
    from xdtsync.io import read_xdts
    from xdtsync.timecode import display_frame, format_cel, frames_to_timecode
    from xdtsync.timesheet.decoder import decode_raw_timesheet

    if start_frame is not None and start_frame not in (0, 1):
        console.print("[red]Error: --start-frame must be 0 or 1[/red]")
        raise typer.Exit(1)

    if not math.isfinite(fps) or round(fps) < 1:
        console.print("[red]Error: --fps must be at least 1[/red]")
        raise typer.Exit(1)

    try:
        if start_frame is None:
            start_frame = load_settings(project).start_frame
        timesheet = decode_raw_timesheet(read_xdts(xdts_file))
    except FileNotFoundError:
        console.print(f"[red]Error: File not found: {escape(str(xdts_file))}[/red]")
        raise typer.Exit(1)
    except XdtsSyncError as e:
        fail(e)

    columns = timesheet.columns
    if column is not None:
        if column not in timesheet.exposures:
            console.print(f"[red]Error: No column '{escape(column)}' in {timesheet.name}[/red]")
            raise typer.Exit(1)
        columns = (column,)

    console.print(
        f"[cyan]{escape(timesheet.name)}[/cyan]: {timesheet.duration} frame(s), "
        f"{len(timesheet.columns)} column(s)"
    )

    for name in columns:
        table = Table(title=escape(name))
        table.add_column("Frame", justify="right")
        table.add_column("Timecode", style="dim")
        table.add_column("Cel", style="green")
        for event in timesheet.exposures[name]:
            table.add_row(
                str(display_frame(event.frame, start_frame)),
                frames_to_timecode(event.frame, fps),
                format_cel(event.value),
            )
        console.print(table)


if __name__ == "__main__":
    app()
