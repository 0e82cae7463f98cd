"""Decides whether a file gets converted and in which mode."""

from __future__ import annotations

from static2jxl.core.config import MIN_LOSSLESS_SIZE, RunConfig
from static2jxl.core.models import CompressionCode, Decision, FormatTag, Mode, SkipReason
from static2jxl.processing.tiff import is_tiff_suitable

_FORMAT_SKIPS = {
    FormatTag.UNKNOWN: SkipReason.UNSUPPORTED,
    FormatTag.RAW: SkipReason.RAW,
    FormatTag.JXL: SkipReason.ALREADY_TARGET,
}


def decide(
    fmt: FormatTag,
    compression: CompressionCode,
    size: int,
    config: RunConfig,
) -> Decision:
    """Apply the eligibility rules in order and return the outcome.

    RAW files are always skipped so they stay available for raw development,
    even with ``force_lossless``. ``compression`` is only consulted for TIFF.
    """

    reason = _FORMAT_SKIPS.get(fmt)
    if reason is not None:
        return Decision(Mode.SKIP, reason)

    if fmt is FormatTag.TIFF and not is_tiff_suitable(compression):
        return Decision(Mode.SKIP, SkipReason.TIFF_INCOMPATIBLE)

    if config.force_lossless:
        return Decision(Mode.REENCODE_LOSSLESS)

    if fmt is FormatTag.JPEG:
        return Decision(Mode.TRANSCODE_REVERSIBLE)

    if size >= MIN_LOSSLESS_SIZE:
        return Decision(Mode.REENCODE_LOSSLESS)
    return Decision(Mode.SKIP, SkipReason.TOO_SMALL)


def classify(fmt: FormatTag, compression: CompressionCode, size: int, config: RunConfig) -> Mode:
    return decide(fmt, compression, size, config).mode
