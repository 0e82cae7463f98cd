"""Core data model definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


class FormatTag(str, Enum):
    """File format detected from content (or extension as a fallback)."""

    UNKNOWN = "unknown"
    JPEG = "jpeg"
    PNG = "png"
    BMP = "bmp"
    TIFF = "tiff"
    TGA = "tga"
    PPM = "ppm"
    RAW = "raw"
    JXL = "jxl"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def is_lossless_source(self) -> bool:
        return self in LOSSLESS_SOURCES


_DISPLAY_NAMES = {
    FormatTag.UNKNOWN: "Unknown",
    FormatTag.JPEG: "JPEG",
    FormatTag.PNG: "PNG",
    FormatTag.BMP: "BMP",
    FormatTag.TIFF: "TIFF",
    FormatTag.TGA: "TGA",
    FormatTag.PPM: "PPM/PBM/PGM",
    FormatTag.RAW: "RAW",
    FormatTag.JXL: "JXL",
}

LOSSLESS_SOURCES = frozenset({FormatTag.PNG, FormatTag.BMP, FormatTag.TIFF, FormatTag.TGA, FormatTag.PPM})

# Formats that can end up in the work list, in summary order.
CONVERTIBLE_FORMATS = (
    FormatTag.JPEG,
    FormatTag.PNG,
    FormatTag.BMP,
    FormatTag.TIFF,
    FormatTag.TGA,
    FormatTag.PPM,
)


class CompressionCode(str, Enum):
    """Compression method stored in a TIFF image directory."""

    UNKNOWN = "unknown"
    NONE = "none"
    LZW = "lzw"
    JPEG = "jpeg"
    DEFLATE = "deflate"
    OTHER = "other"


class Mode(str, Enum):
    """How a file gets converted, if at all."""

    SKIP = "skip"
    TRANSCODE_REVERSIBLE = "transcode-reversible"
    REENCODE_LOSSLESS = "reencode-lossless"


class SkipReason(str, Enum):
    """Why a file was left alone. None of these count as failures."""

    UNSUPPORTED = "unsupported"
    RAW = "raw"
    ALREADY_TARGET = "already-jxl"
    TIFF_INCOMPATIBLE = "tiff-incompatible"
    TOO_SMALL = "too-small"
    EXISTS = "exists"
    WOULD_GROW = "would-grow"
    COLLISION = "collision"
    UNREADABLE = "unreadable"
    OVER_LIMIT = "over-limit"


class ItemStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(slots=True, frozen=True)
class Decision:
    """Result of the eligibility policy."""

    mode: Mode
    reason: Optional[SkipReason] = None

    @property
    def eligible(self) -> bool:
        return self.mode is not Mode.SKIP


@dataclass(slots=True, frozen=True)
class WorkItem:
    """A file accepted by the collector. Each item is owned by one worker."""

    path: Path
    size: int
    format: FormatTag
    mode: Mode


@dataclass(slots=True)
class ItemOutcome:
    """Terminal state of one work item."""

    item: WorkItem
    status: ItemStatus
    reason: Optional[str] = None
    output_path: Optional[Path] = None
    bytes_out: int = 0
    degraded: bool = False
    message: Optional[str] = None

    @property
    def path(self) -> Path:
        return self.item.path


@dataclass(slots=True)
class BatchResult:
    """Everything a run produced."""

    items: list[WorkItem] = field(default_factory=list)
    outcomes: list[ItemOutcome] = field(default_factory=list)
    cancelled: bool = False

    def _by_status(self, status: ItemStatus) -> list[ItemOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status is status]

    @property
    def succeeded(self) -> list[ItemOutcome]:
        return self._by_status(ItemStatus.SUCCESS)

    @property
    def failed(self) -> list[ItemOutcome]:
        return self._by_status(ItemStatus.FAILED)

    @property
    def skipped(self) -> list[ItemOutcome]:
        return self._by_status(ItemStatus.SKIPPED)
