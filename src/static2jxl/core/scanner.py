"""Directory walking and work list collection."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, Optional

from static2jxl.core import config as run_limits
from static2jxl.core.config import RunConfig
from static2jxl.core.models import CompressionCode, FormatTag, SkipReason, WorkItem
from static2jxl.core.output_manager import output_path_for
from static2jxl.core.stats import RunStats
from static2jxl.processing.policy import decide
from static2jxl.processing.sniffer import detect_format
from static2jxl.processing.tiff import detect_tiff_compression

LOGGER = logging.getLogger(__name__)

HIDDEN_PREFIX = "."


def _iter_candidate_files(directory: Path, recursive: bool) -> Iterator[tuple[Path, Optional[int]]]:
    """Yield ``(path, size)`` for regular files, skipping hidden entries.

    Entries are visited in name order. Symlinked directories are not
    followed; symlinked files are. ``size`` is None when the entry could
    not be inspected.
    """

    try:
        with os.scandir(directory) as scanner:
            entries = sorted(scanner, key=lambda entry: entry.name)
    except OSError as exc:
        LOGGER.error("cannot open directory %s: %s", directory, exc)
        return

    for entry in entries:
        if entry.name.startswith(HIDDEN_PREFIX):
            continue
        try:
            if entry.is_dir(follow_symlinks=False):
                if recursive:
                    yield from _iter_candidate_files(Path(entry.path), recursive)
                continue
            if not entry.is_file():
                continue
            size = entry.stat().st_size
        except OSError as exc:
            LOGGER.debug("cannot stat %s: %s", entry.path, exc)
            yield Path(entry.path), None
            continue
        yield Path(entry.path), size


def _destination_key(path: Path) -> str:
    # Case-folded so that clashes are caught on case-insensitive filesystems too.
    return os.path.normpath(str(output_path_for(path))).casefold()


def collect_work_items(config: RunConfig, stats: RunStats) -> list[WorkItem]:
    """Walk ``config.target_dir`` and return the files worth converting.

    Every walked file is either returned or counted under a discard reason
    in ``stats``. Two files that would write the same output (``a.png`` and
    ``a.bmp``) never both make the list: the first in walk order wins. Once
    ``MAX_WORK_ITEMS`` files have been accepted the rest are counted as over
    the limit.
    """

    collected: list[WorkItem] = []
    destinations: set[str] = set()
    limit = run_limits.MAX_WORK_ITEMS
    capped = False

    def discard(path: Path, reason: SkipReason, detail: str = "") -> None:
        stats.record_discard(reason)
        LOGGER.debug("skip (%s): %s%s", reason.value, path, detail)

    for path, size in _iter_candidate_files(config.target_dir, config.recursive):
        if capped:
            discard(path, SkipReason.OVER_LIMIT)
            continue
        if size is None:
            discard(path, SkipReason.UNREADABLE)
            continue

        fmt = detect_format(path)
        compression = detect_tiff_compression(path) if fmt is FormatTag.TIFF else CompressionCode.UNKNOWN
        decision = decide(fmt, compression, size, config)

        if not decision.eligible:
            assert decision.reason is not None
            discard(path, decision.reason, f" ({size / (1024 * 1024):.2f} MB)")
            continue

        if len(collected) >= limit:
            LOGGER.warning("maximum file limit reached (%d), ignoring the rest", limit)
            capped = True
            discard(path, SkipReason.OVER_LIMIT)
            continue

        key = _destination_key(path)
        if key in destinations:
            LOGGER.warning("skipping %s: %s is already the output of another file", path, output_path_for(path).name)
            discard(path, SkipReason.COLLISION)
            continue
        destinations.add(key)

        collected.append(WorkItem(path=path, size=size, format=fmt, mode=decision.mode))
        stats.record_enqueued(fmt)

    return collected
