"""Converts one work item: encode, size guard, health check, metadata, commit."""

from __future__ import annotations

import logging
from pathlib import Path

from static2jxl.core.config import RunConfig
from static2jxl.core.models import ItemOutcome, ItemStatus, Mode, SkipReason, WorkItem
from static2jxl.core.output_manager import CommitError, commit, decide_destination, remove_quietly
from static2jxl.core.stats import RunStats
from static2jxl.processing.toolset import Toolset

LOGGER = logging.getLogger(__name__)


def _file_size(path: Path) -> int:
    try:
        return path.stat().st_size
    except OSError:
        return 0


def _skipped(item: WorkItem, reason: SkipReason, stats: RunStats, **extra) -> ItemOutcome:
    stats.record_skip(reason)
    return ItemOutcome(item=item, status=ItemStatus.SKIPPED, reason=reason.value, **extra)


def _failed(item: WorkItem, reason: str, stats: RunStats, message: str, *, health: bool = False) -> ItemOutcome:
    LOGGER.error("%s: %s", message, item.path)
    stats.record_failure(health=health)
    return ItemOutcome(item=item, status=ItemStatus.FAILED, reason=reason, message=message)


def convert_item(item: WorkItem, config: RunConfig, tools: Toolset, stats: RunStats) -> ItemOutcome:
    """Run the full conversion for ``item`` and record the result in ``stats``."""

    decision = decide_destination(item.path, config.in_place)
    if decision.action == "skip":
        LOGGER.debug("skip: %s", decision.note)
        return _skipped(item, SkipReason.EXISTS, stats, output_path=decision.destination, message=decision.note)

    destination, temp = decision.destination, decision.temp
    if item.mode is Mode.TRANSCODE_REVERSIBLE:
        LOGGER.debug("converting [JPEG -> reversible transcode]: %s", item.path)
    else:
        LOGGER.debug("converting [%s -> lossless -d %g]: %s", item.format.display_name, config.lossless_distance, item.path)

    result = tools.encoder.encode(item.path, temp, item.mode, item.format, config)
    if not result.ok or not temp.exists():
        remove_quietly(temp)
        message = "conversion failed" if not result.ok else "encoder produced no output"
        return _failed(item, "encode", stats, message)

    out_size = _file_size(temp)
    if out_size > item.size:
        growth = (out_size / item.size - 1.0) * 100 if item.size else float("inf")
        LOGGER.debug("rollback: JXL larger than original (+%.1f%%): %s", growth, item.path)
        remove_quietly(temp)
        return _skipped(item, SkipReason.WOULD_GROW, stats, bytes_out=out_size)

    if config.health_check:
        if not tools.health.check(temp):
            remove_quietly(temp)
            return _failed(item, "health", stats, "health check failed", health=True)
        stats.record_health_pass()

    report = tools.metadata.transfer(item.path, temp, verify=config.verbose)
    stats.record_metadata(complete=report.tags_copied, degraded=report.degraded)

    try:
        commit(temp, destination, item.path, in_place=config.in_place)
    except CommitError as exc:
        return _failed(item, "commit", stats, str(exc))

    # Metadata writes change the size, so measure the committed file.
    final_size = _file_size(destination)
    stats.record_success(item.size, final_size)
    if item.size:
        LOGGER.debug("done: %s (%.1f%% smaller)", destination, (1.0 - final_size / item.size) * 100)

    return ItemOutcome(
        item=item,
        status=ItemStatus.SUCCESS,
        output_path=destination,
        bytes_out=final_size,
        degraded=report.degraded,
    )
