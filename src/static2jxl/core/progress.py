"""Progress updates sent from the reporting worker."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(slots=True, frozen=True)
class ProgressUpdate:
    """Live totals across all workers after one item finished."""

    total: int
    completed: int
    current: Optional[Path] = None

    @property
    def percent(self) -> int:
        if self.total <= 0:
            return 100
        return self.completed * 100 // self.total
