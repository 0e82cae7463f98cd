"""Output path resolution and committing converted files."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from static2jxl.core.config import TARGET_SUFFIX
from static2jxl.core.exceptions import Static2JxlError

LOGGER = logging.getLogger(__name__)

TEMP_SUFFIX = ".tmp"


class CommitError(Static2JxlError):
    """The converted file could not be moved into place."""


def output_path_for(source: Path) -> Path:
    """``photo.png`` becomes ``photo.jxl``; names without a suffix get one appended."""

    if source.suffix:
        return source.with_suffix(TARGET_SUFFIX)
    return source.with_name(source.name + TARGET_SUFFIX)


def temp_path_for(output: Path) -> Path:
    return output.with_name(output.name + TEMP_SUFFIX)


@dataclass(slots=True)
class DestinationDecision:
    """Where one item is written and whether that is allowed."""

    destination: Path
    temp: Path
    action: str  # write | skip
    note: Optional[str] = None


def decide_destination(source: Path, in_place: bool) -> DestinationDecision:
    """Resolve the output path before any work is done.

    Outside in-place mode an existing output means the file was converted
    already.
    """

    destination = output_path_for(source)
    temp = temp_path_for(destination)

    if destination.exists():
        note = f"output exists: {destination.name}"
        if not in_place:
            return DestinationDecision(destination, temp, action="skip", note=note)
        LOGGER.warning("%s, replacing it", note)

    return DestinationDecision(destination, temp, action="write")


def remove_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        LOGGER.warning("cannot remove %s: %s", path, exc)


def commit(temp: Path, destination: Path, source: Path, *, in_place: bool) -> None:
    """Move ``temp`` onto ``destination``, then drop ``source`` if in place.

    The source is only removed after the rename succeeded. On rename
    failure the temporary file is removed and ``CommitError`` raised.
    """

    try:
        os.replace(temp, destination)
    except OSError as exc:
        remove_quietly(temp)
        raise CommitError(f"rename failed: {temp} -> {destination}: {exc}") from exc

    if in_place and source != destination:
        try:
            source.unlink()
        except OSError as exc:
            LOGGER.warning("cannot delete original %s: %s", source, exc)
