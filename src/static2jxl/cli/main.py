"""Command line entry point."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

import typer
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from static2jxl.core.config import DEFAULT_EFFORT, DEFAULT_WORKERS, RunConfig, clamp_workers
from static2jxl.core.exceptions import Static2JxlError
from static2jxl.core.progress import ProgressUpdate
from static2jxl.core.report import dry_run_lines, summary_lines
from static2jxl.core.stats import RunStats
from static2jxl.processing.pipeline import process_batch
from static2jxl.processing.toolset import Toolset
from static2jxl.utils.logging import setup_logging
from static2jxl.utils.signals import cancel_on_signals

LOGGER = logging.getLogger(__name__)

app = typer.Typer(
    help=(
        "Convert static images to JPEG XL. JPEG is transcoded reversibly; "
        "PNG/BMP/TIFF/TGA/PPM of 2 MB or more are re-encoded losslessly; RAW is skipped."
    ),
    add_completion=False,
)

NAME_WIDTH = 40


def _short_name(path: Optional[Path]) -> str:
    if path is None:
        return ""
    name = path.name
    if len(name) > NAME_WIDTH:
        return name[: NAME_WIDTH - 3] + "..."
    return name


def _build_progress_callback(progress: Progress):
    task_id: Optional[int] = None

    def callback(update: ProgressUpdate) -> None:
        nonlocal task_id
        if update.total == 0:
            return
        if task_id is None:
            task_id = progress.add_task("Converting", total=update.total)
        progress.update(task_id, completed=update.completed, description=_short_name(update.current))

    return callback


@app.command()
def run_cli(  # noqa: PLR0913
    target: Path = typer.Argument(..., help="Directory containing the images"),
    in_place: bool = typer.Option(False, "--in-place", "-i", help="Replace original files"),
    skip_health_check: bool = typer.Option(False, "--skip-health-check", help="Skip health validation"),
    recursive: bool = typer.Option(True, "--recursive/--no-recursive", help="Process subdirectories"),
    force_lossless: bool = typer.Option(False, "--force-lossless", help="Force lossless for all formats"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without converting"),
    jobs: int = typer.Option(DEFAULT_WORKERS, "--jobs", "-j", help="Parallel workers"),
    distance: Optional[float] = typer.Option(None, "--distance", "-d", help="Override JXL distance for re-encodes"),
    effort: int = typer.Option(DEFAULT_EFFORT, "--effort", "-e", help="JXL effort 1-9"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Per-command timeout in seconds (default: none)"),
) -> None:
    """Convert every eligible image under TARGET."""

    setup_logging(verbose)

    try:
        config = RunConfig(
            target_dir=target.expanduser(),
            in_place=in_place,
            recursive=recursive,
            verbose=verbose,
            dry_run=dry_run,
            force_lossless=force_lossless,
            health_check=not skip_health_check,
            workers=clamp_workers(jobs),
            effort=effort,
            distance=distance,
            tool_timeout=timeout,
        )
    except Static2JxlError as exc:
        raise typer.BadParameter(str(exc)) from exc

    LOGGER.info("target: %s", config.target_dir)
    LOGGER.info("workers: %d, effort: %d", config.workers, config.effort)
    if config.in_place:
        LOGGER.warning("in-place mode: originals will be replaced")
    if config.dry_run:
        LOGGER.warning("dry-run mode: no files will be modified")

    tools = Toolset.discover(timeout=config.tool_timeout)
    stats = RunStats()
    cancel = threading.Event()

    progress = Progress(
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
    )

    try:
        with cancel_on_signals(cancel), progress:
            result = process_batch(
                config,
                tools,
                stats=stats,
                cancel=cancel,
                progress_callback=_build_progress_callback(progress),
            )
    except Static2JxlError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if not result.items:
        typer.echo("No suitable files found.")
        return

    if config.dry_run:
        for line in dry_run_lines(result.items):
            typer.echo(line)
        return

    for line in summary_lines(stats.snapshot(), health_check=config.health_check, cancelled=result.cancelled):
        typer.echo(line)

    if result.failed:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
