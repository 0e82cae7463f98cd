"""Run configuration and conversion constants."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from static2jxl.core.exceptions import InvalidConfigurationError

TARGET_SUFFIX = ".jxl"

# Lossless sources below this size are left alone.
MIN_LOSSLESS_SIZE = 2 * 1024 * 1024

MAX_WORK_ITEMS = 100_000
MAX_WORKERS = 32
DEFAULT_WORKERS = 4

DEFAULT_EFFORT = 7
EFFORT_RANGE = (1, 9)
DISTANCE_RANGE = (0.0, 25.0)
LOSSLESS_DISTANCE = 0.0

# Threads handed to each encoder process.
ENCODER_THREADS = 2


def clamp_workers(value: int) -> int:
    """Clamp a requested worker count into ``[1, MAX_WORKERS]``."""

    return max(1, min(value, MAX_WORKERS))


@dataclass(slots=True, frozen=True)
class RunConfig:
    """Options for a single conversion run. Shared read-only by all workers."""

    target_dir: Path
    in_place: bool = False
    recursive: bool = True
    verbose: bool = False
    dry_run: bool = False
    force_lossless: bool = False
    health_check: bool = True
    workers: int = DEFAULT_WORKERS
    effort: int = DEFAULT_EFFORT
    distance: Optional[float] = None
    tool_timeout: Optional[float] = None  # None keeps external tools unbounded

    def __post_init__(self) -> None:
        if not 1 <= self.workers <= MAX_WORKERS:
            raise InvalidConfigurationError(f"workers must be between 1 and {MAX_WORKERS}: {self.workers}")

        low, high = EFFORT_RANGE
        if not low <= self.effort <= high:
            raise InvalidConfigurationError(f"effort must be between {low} and {high}: {self.effort}")

        if self.distance is not None:
            d_low, d_high = DISTANCE_RANGE
            if not d_low <= self.distance <= d_high:
                raise InvalidConfigurationError(f"distance must be between {d_low:g} and {d_high:g}: {self.distance}")

        if self.tool_timeout is not None and self.tool_timeout <= 0:
            raise InvalidConfigurationError(f"timeout must be positive: {self.tool_timeout}")

    @property
    def lossless_distance(self) -> float:
        """Distance passed to the encoder for lossless re-encodes."""

        return LOSSLESS_DISTANCE if self.distance is None else self.distance
