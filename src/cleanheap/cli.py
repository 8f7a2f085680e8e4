"""cleanheap CLI - typer application entry point."""

from __future__ import annotations

import atexit
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from cleanheap.config import CleanerConfig, ConfigError, default_output_path, load_config
from cleanheap.observability import close_file_logging, configure_logging, get_logger
from cleanheap.snapshot import (
    CleanReport,
    HeapSnapshot,
    SnapshotError,
    load_snapshot,
    write_snapshot,
)

app = typer.Typer(
    name="cleanheap",
    help="cleanheap: remove weak-retainer edges from V8 heap snapshots.",
    no_args_is_help=True,
)
console = Console()

STEP = "[dim]·[/dim]"
DONE = "[green]▶[/green]"


@app.callback()
def main(
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity: -v for INFO, -vv for DEBUG.",
        ),
    ] = 0,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Append all log events to this file as JSONL.",
        ),
    ] = None,
) -> None:
    """cleanheap: remove weak-retainer edges from V8 heap snapshots."""
    configure_logging(verbosity=verbose, log_file=log_file)
    if log_file is not None:
        atexit.register(close_file_logging)


def _load_cleaner_config(config_path: Path | None) -> CleanerConfig:
    """Load --config or fall back to defaults.

    Raises:
        typer.Exit: If the config file can't be loaded.
    """
    if config_path is None:
        return CleanerConfig()
    try:
        return load_config(config_path)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None


def _print_banner(input_path: Path, output_path: Path | None) -> None:
    from cleanheap import __version__

    console.print()
    console.print(f"[bold]✨ CleanHeap[/bold] [green]v{__version__}[/green]")
    console.print("[dim]====================[/dim]")
    console.print()
    console.print(f"Reading {DONE} [yellow]{input_path}[/yellow]")
    if output_path is not None:
        console.print(f"Writing {DONE} [yellow]{output_path}[/yellow]")
    console.print()


def _open_snapshot(input_path: Path, config: CleanerConfig) -> HeapSnapshot:
    """Load and wrap the input snapshot.

    Raises:
        typer.Exit: If the input is missing or not a heap snapshot.
    """
    try:
        with console.status("...loading Snapshot"):
            data = load_snapshot(input_path)
        console.print(f"  {STEP} {DONE} Snapshot loaded")

        with console.status("...parsing Snapshot"):
            snapshot = HeapSnapshot(data, weak_retainer_names=config.weak_retainer_names)
        console.print(f"  {STEP} {DONE} Snapshot parsed")
    except SnapshotError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None
    return snapshot


def _print_report(report: CleanReport) -> None:
    if not report.retainers_by_name:
        return
    table = Table(title="Weak retainers")
    table.add_column("Constructor", style="cyan")
    table.add_column("Nodes", justify="right", style="magenta")
    for name, count in sorted(report.retainers_by_name.items()):
        table.add_row(name, f"{count:,}")
    console.print(table)


@app.command()
def clean(
    input_path: Annotated[
        Path,
        typer.Argument(help="Heap snapshot to clean."),
    ],
    output_path: Annotated[
        Path | None,
        typer.Argument(help="Destination file (default: INPUT with .clean before the extension)."),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="YAML file overriding the weak-retainer names or output suffix.",
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Report weak retainers without modifying or writing anything.",
        ),
    ] = False,
) -> None:
    """Remove the outgoing edges of weak-retainer nodes from a snapshot."""
    log = get_logger(__name__)
    config = _load_cleaner_config(config_path)
    destination = output_path or default_output_path(input_path, config.output_suffix)

    _print_banner(input_path, None if dry_run else destination)

    if not input_path.is_file():
        console.print(f"[red]The file [white]{input_path}[/white] does not exist![/red]")
        raise typer.Exit(1)

    if not dry_run and destination.exists():
        console.print(f"[yellow]⚠️  Overwriting existing file [white]{destination}[/white]![/yellow]")

    console.print("[magenta]🧹 Cleaning HeapSnapshot edges of Weak Retainers[/magenta]")
    console.print()

    snapshot = _open_snapshot(input_path, config)

    if dry_run:
        report = snapshot.count_weak_retainers()
        console.print(
            f"  {STEP} {DONE} Would remove [magenta]{report.weak_retainers:,}[/magenta] of "
            f"[magenta]{report.nodes_traversed:,}[/magenta] total traversed "
            f"([magenta]{report.edges_removed:,}[/magenta] edges)."
        )
        _print_report(report)
        return

    with console.status("...cleaning Snapshot"):
        report = snapshot.clean()

    if not report:
        console.print(f"  {STEP} {DONE} Snapshot Was Already Clean")
        console.print()
        console.print("[magenta]✨ Sparkling Clean[/magenta]")
        return

    console.print(
        f"  {STEP} {DONE} Removed [magenta]{report.weak_retainers:,}[/magenta] of "
        f"[magenta]{report.nodes_traversed:,}[/magenta] total traversed."
    )
    console.print(f"  {STEP} {DONE} Snapshot cleaned")
    _print_report(report)

    try:
        with console.status("...writing Snapshot"):
            write_snapshot(
                snapshot.data,
                destination,
                collect=config.collect_between_fields,
            )
    except SnapshotError as e:
        log.error("snapshot_write_failed", path=str(destination), error=str(e))
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1) from None
    console.print(f"  {STEP} {DONE} Snapshot written")

    console.print()
    console.print("[magenta]✨ Sparkling Clean[/magenta]")


@app.command()
def check(
    input_path: Annotated[
        Path,
        typer.Argument(help="Heap snapshot to check."),
    ],
) -> None:
    """Check that a snapshot's edge counts are consistent."""
    snapshot = _open_snapshot(input_path, CleanerConfig())
    violations = snapshot.check_edge_counts()
    report = snapshot.count_weak_retainers()

    console.print()
    if violations:
        console.print("[red]✗[/red] Edge counts are inconsistent:")
        for violation in violations:
            console.print(f"  [red]•[/red] {violation}")
    else:
        console.print("[green]✓[/green] Edge counts are consistent")

    if report:
        console.print(
            f"[yellow]○[/yellow] {report.weak_retainers:,} weak retainer(s) "
            f"still own {report.edges_removed:,} edge(s)"
        )
        _print_report(report)
    else:
        console.print("[green]✓[/green] No weak retainers own edges")

    if violations:
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from cleanheap import __version__

    console.print(f"CleanHeap v{__version__}")
