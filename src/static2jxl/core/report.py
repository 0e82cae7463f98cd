"""End-of-run summary text."""

from __future__ import annotations

from static2jxl.core.models import CONVERTIBLE_FORMATS, FormatTag, SkipReason, WorkItem
from static2jxl.core.stats import StatsSnapshot

MB = 1024 * 1024

_FORMAT_LABELS = {
    FormatTag.JPEG: "reversible",
    FormatTag.PNG: "lossless",
    FormatTag.BMP: "lossless",
    FormatTag.TIFF: "lossless",
    FormatTag.TGA: "lossless",
    FormatTag.PPM: "lossless",
}

_SKIP_LABELS = (
    (SkipReason.RAW, "RAW files", "preserve flexibility"),
    (SkipReason.TOO_SMALL, "Small files", "< 2MB threshold"),
    (SkipReason.TIFF_INCOMPATIBLE, "TIFF (JPEG)", "already lossy or unreadable"),
    (SkipReason.WOULD_GROW, "JXL larger", "rolled back"),
    (SkipReason.EXISTS, "Output exists", "already converted"),
    (SkipReason.ALREADY_TARGET, "Already JXL", "nothing to do"),
    (SkipReason.UNSUPPORTED, "Unsupported", "unknown format"),
    (SkipReason.COLLISION, "Name clash", "same output as another file"),
    (SkipReason.UNREADABLE, "Unreadable", "stat failed"),
    (SkipReason.OVER_LIMIT, "Over limit", "file cap reached"),
)


def _format_elapsed(seconds: float) -> str:
    whole = int(seconds)
    return f"{whole // 60}m {whole % 60}s"


def dry_run_lines(items: list[WorkItem]) -> list[str]:
    lines = ["Files that would be converted:"]
    lines.extend(f"   [{item.format.display_name}] {item.path}" for item in items)
    return lines


def summary_lines(snapshot: StatsSnapshot, *, health_check: bool, cancelled: bool = False) -> list[str]:
    """Render the final statistics as plain text lines."""

    lines = ["", "Conversion interrupted" if cancelled else "Conversion complete", ""]
    lines += [
        "Statistics:",
        f"   Total files:    {snapshot.total}",
        f"   Processed:      {snapshot.processed}",
        f"   Success:        {snapshot.success}",
        f"   Failed:         {snapshot.failed}",
        f"   Skipped:        {snapshot.skipped}",
        f"   Time:           {_format_elapsed(snapshot.elapsed)}",
    ]

    if snapshot.bytes_input > 0:
        lines += [
            f"   Input:          {snapshot.bytes_input / MB:.2f} MB",
            f"   Output:         {snapshot.bytes_output / MB:.2f} MB",
            f"   Reduction:      {snapshot.reduction_percent:.1f}%",
        ]

    formats = [fmt for fmt in CONVERTIBLE_FORMATS if snapshot.by_format.get(fmt)]
    if formats:
        lines += ["", "By format:"]
        for fmt in formats:
            label = f"{fmt.display_name} ({_FORMAT_LABELS[fmt]}):"
            lines.append(f"   {label:<20}{snapshot.by_format[fmt]}")

    skipped = [(label, note, snapshot.skip_count(reason)) for reason, label, note in _SKIP_LABELS]
    skipped = [entry for entry in skipped if entry[2] > 0]
    if skipped:
        lines += ["", "Skipped details:"]
        for label, note, count in skipped:
            lines.append(f"   {label + ':':<16}{count} ({note})")

    if snapshot.success > 0:
        lines += [
            "",
            "Metadata:",
            f"   Full copy:      {snapshot.metadata_full}",
            f"   Partial copy:   {snapshot.metadata_partial}",
            f"   Degraded:       {snapshot.degraded} (timestamps not preserved)",
        ]

    if health_check:
        lines += [
            "",
            "Health report:",
            f"   Passed:         {snapshot.health_passed}",
            f"   Failed:         {snapshot.health_failed}",
        ]
        if snapshot.health_rate is not None:
            lines.append(f"   Rate:           {snapshot.health_rate}%")

    return lines
