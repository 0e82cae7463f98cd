"""Run statistics shared between the collector and the worker threads."""

from __future__ import annotations

import threading
import time
from collections import Counter
from dataclasses import dataclass, field

from static2jxl.core.models import FormatTag, SkipReason


@dataclass(slots=True, frozen=True)
class StatsSnapshot:
    """Consistent copy of the counters, taken under the lock."""

    total: int
    processed: int
    success: int
    failed: int
    skipped: int
    health_passed: int
    health_failed: int
    bytes_input: int
    bytes_output: int
    metadata_full: int
    metadata_partial: int
    degraded: int
    by_format: dict[FormatTag, int]
    discarded: dict[SkipReason, int]
    skipped_by_reason: dict[SkipReason, int]
    elapsed: float

    @property
    def reduction_percent(self) -> float:
        if self.bytes_input == 0:
            return 0.0
        return (1.0 - self.bytes_output / self.bytes_input) * 100

    @property
    def health_rate(self) -> int | None:
        checked = self.health_passed + self.health_failed
        if checked == 0:
            return None
        return self.health_passed * 100 // checked

    def skip_count(self, reason: SkipReason) -> int:
        """Files skipped for ``reason`` during collection or processing."""

        return self.discarded.get(reason, 0) + self.skipped_by_reason.get(reason, 0)


@dataclass
class RunStats:
    """Counters for one run, all guarded by a single lock.

    Every mutation goes through a method that holds ``_lock`` for the
    shortest possible span. Readers either call :meth:`snapshot` or read
    fields directly once all workers have been joined.
    """

    total: int = 0
    processed: int = 0
    success: int = 0
    failed: int = 0
    skipped: int = 0
    health_passed: int = 0
    health_failed: int = 0
    bytes_input: int = 0
    bytes_output: int = 0
    metadata_full: int = 0
    metadata_partial: int = 0
    degraded: int = 0
    by_format: Counter = field(default_factory=Counter)
    discarded: Counter = field(default_factory=Counter)
    skipped_by_reason: Counter = field(default_factory=Counter)
    started_at: float = field(default_factory=time.monotonic)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    # Collection phase

    def record_discard(self, reason: SkipReason) -> None:
        with self._lock:
            self.discarded[reason] += 1

    def record_enqueued(self, fmt: FormatTag) -> None:
        with self._lock:
            self.by_format[fmt] += 1

    def start(self, total: int) -> None:
        with self._lock:
            self.total = total
            self.started_at = time.monotonic()

    # Processing phase

    def record_success(self, bytes_in: int, bytes_out: int) -> None:
        with self._lock:
            self.success += 1
            self.bytes_input += bytes_in
            self.bytes_output += bytes_out

    def record_failure(self, *, health: bool = False) -> None:
        with self._lock:
            self.failed += 1
            if health:
                self.health_failed += 1

    def record_skip(self, reason: SkipReason) -> None:
        with self._lock:
            self.skipped += 1
            self.skipped_by_reason[reason] += 1

    def record_health_pass(self) -> None:
        with self._lock:
            self.health_passed += 1

    def record_metadata(self, *, complete: bool, degraded: bool) -> None:
        with self._lock:
            if complete:
                self.metadata_full += 1
            else:
                self.metadata_partial += 1
            if degraded:
                self.degraded += 1

    def mark_processed(self) -> int:
        """Count one finished item and return the running total."""

        with self._lock:
            self.processed += 1
            return self.processed

    def snapshot(self) -> StatsSnapshot:
        with self._lock:
            return StatsSnapshot(
                total=self.total,
                processed=self.processed,
                success=self.success,
                failed=self.failed,
                skipped=self.skipped,
                health_passed=self.health_passed,
                health_failed=self.health_failed,
                bytes_input=self.bytes_input,
                bytes_output=self.bytes_output,
                metadata_full=self.metadata_full,
                metadata_partial=self.metadata_partial,
                degraded=self.degraded,
                by_format=dict(self.by_format),
                discarded=dict(self.discarded),
                skipped_by_reason=dict(self.skipped_by_reason),
                elapsed=time.monotonic() - self.started_at,
            )
