"""Batch pipeline: preflight, collection, then conversion on worker threads."""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Callable, Optional, Sequence, TypeVar

from static2jxl.core.config import RunConfig
from static2jxl.core.exceptions import UnsafeTargetError
from static2jxl.core.models import BatchResult, ItemOutcome, WorkItem
from static2jxl.core.progress import ProgressUpdate
from static2jxl.core.scanner import collect_work_items
from static2jxl.core.stats import RunStats
from static2jxl.processing.toolset import Toolset
from static2jxl.processing.worker import convert_item

LOGGER = logging.getLogger(__name__)

ProgressCallback = Optional[Callable[[ProgressUpdate], None]]

T = TypeVar("T")

PROTECTED_DIRS = (
    "/",
    "/etc",
    "/bin",
    "/sbin",
    "/usr",
    "/var",
    "/System",
    "/Library",
    "/Applications",
    "/private",
)


def is_protected_directory(path: Path) -> bool:
    """Return True for system directories and the home directory itself."""

    try:
        resolved = path.resolve(strict=True)
    except (OSError, RuntimeError):
        return True

    if str(resolved) in PROTECTED_DIRS:
        return True

    home = os.environ.get("HOME")
    return bool(home) and resolved == Path(home).resolve()


def preflight(config: RunConfig, tools: Toolset) -> None:
    """Refuse to start on a bad target or without the required tools."""

    target = config.target_dir
    if not target.is_dir():
        raise UnsafeTargetError(f"directory does not exist: {target}")
    if config.in_place and is_protected_directory(target):
        raise UnsafeTargetError(f"cannot operate in place on protected directory: {target}")
    tools.check_dependencies(health_check=config.health_check)


def partition(items: Sequence[T], workers: int) -> list[list[T]]:
    """Split ``items`` into ``workers`` contiguous, near-equal slices.

    The first ``len(items) % workers`` slices get one extra item.
    """

    if workers <= 0:
        raise ValueError("workers must be positive")

    per_slice, remainder = divmod(len(items), workers)
    slices: list[list[T]] = []
    start = 0
    for index in range(workers):
        end = start + per_slice + (1 if index < remainder else 0)
        slices.append(list(items[start:end]))
        start = end
    return slices


def _run_slice(
    index: int,
    items: list[WorkItem],
    outcomes: list[ItemOutcome],
    config: RunConfig,
    tools: Toolset,
    stats: RunStats,
    cancel: threading.Event,
    progress_callback: ProgressCallback,
) -> None:
    """Process one slice in order, stopping between items once cancelled.

    Only slice 0 reports progress. This keeps a single writer on the
    terminal; it still reads the shared totals, so the numbers cover all
    workers.
    """

    for item in items:
        if cancel.is_set():
            break
        try:
            outcomes.append(convert_item(item, config, tools, stats))
        finally:
            processed = stats.mark_processed()
        if index == 0 and progress_callback is not None:
            progress_callback(ProgressUpdate(total=stats.total, completed=processed, current=item.path))


def run_workers(
    items: Sequence[WorkItem],
    config: RunConfig,
    tools: Toolset,
    stats: RunStats,
    *,
    cancel: Optional[threading.Event] = None,
    progress_callback: ProgressCallback = None,
) -> list[ItemOutcome]:
    """Convert ``items`` on ``min(config.workers, len(items))`` threads.

    Each thread owns one slice of the list; nothing is shared between them
    except ``stats`` and the cancellation flag.
    """

    if not items:
        return []

    cancel = cancel or threading.Event()
    slices = partition(items, min(config.workers, len(items)))
    stats.start(len(items))

    results: list[list[ItemOutcome]] = [[] for _ in slices]
    errors: list[BaseException] = []

    def work(index: int) -> None:
        try:
            _run_slice(index, slices[index], results[index], config, tools, stats, cancel, progress_callback)
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("worker %d stopped: %s", index, exc)
            errors.append(exc)

    threads = [threading.Thread(target=work, args=(index,), name=f"worker-{index}") for index in range(len(slices))]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    if errors:
        raise errors[0]
    return [outcome for chunk in results for outcome in chunk]


def process_batch(
    config: RunConfig,
    tools: Toolset,
    *,
    stats: Optional[RunStats] = None,
    cancel: Optional[threading.Event] = None,
    progress_callback: ProgressCallback = None,
) -> BatchResult:
    """Preflight, collect and (unless dry-run) convert everything under the target."""

    preflight(config, tools)
    stats = stats if stats is not None else RunStats()
    cancel = cancel or threading.Event()

    LOGGER.info("scanning %s", config.target_dir)
    items = collect_work_items(config, stats)
    LOGGER.info("found %d files to convert", len(items))

    result = BatchResult(items=items)
    if not items or config.dry_run:
        return result

    result.outcomes = run_workers(
        items,
        config,
        tools,
        stats,
        cancel=cancel,
        progress_callback=progress_callback,
    )
    result.cancelled = cancel.is_set() and len(result.outcomes) < len(items)
    return result
