"""Content-based file type detection."""

from __future__ import annotations

import logging
from pathlib import Path

from static2jxl.core.models import FormatTag

LOGGER = logging.getLogger(__name__)

SNIFF_LENGTH = 12

JPEG_MAGIC = b"\xff\xd8\xff"
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
BMP_MAGIC = b"BM"
TIFF_MAGICS = (b"II*\x00", b"MM\x00*")
JXL_CODESTREAM_MAGIC = b"\xff\x0a"

# TGA carries no reliable signature.
TGA_EXTENSIONS = frozenset({".tga"})
RAW_EXTENSIONS = frozenset({".dng", ".cr2", ".cr3", ".nef", ".arw", ".orf", ".rw2", ".raf"})


def read_prefix(path: Path, length: int = SNIFF_LENGTH) -> bytes:
    """Return up to ``length`` leading bytes of ``path`` (empty on error)."""

    try:
        with path.open("rb") as handle:
            return handle.read(length)
    except OSError as exc:
        LOGGER.debug("cannot read %s: %s", path, exc)
        return b""


def is_jxl_signature(head: bytes) -> bool:
    """Return True for a bare JXL codestream or an ISOBMFF JXL container."""

    if head.startswith(JXL_CODESTREAM_MAGIC):
        return True
    return len(head) >= 12 and head[0] == 0 and head[4:7] == b"JXL"


def detect_format_from_bytes(head: bytes, suffix: str = "") -> FormatTag:
    """Classify a byte prefix, falling back to the file suffix."""

    if len(head) >= 2:
        if head.startswith(JPEG_MAGIC):
            return FormatTag.JPEG
        if head.startswith(PNG_MAGIC):
            return FormatTag.PNG
        if head.startswith(BMP_MAGIC):
            return FormatTag.BMP
        if head[:4] in TIFF_MAGICS:
            return FormatTag.TIFF
        if is_jxl_signature(head):
            return FormatTag.JXL
        if head[0:1] == b"P" and b"1" <= head[1:2] <= b"6":
            return FormatTag.PPM

        suffix = suffix.lower()
        if suffix in TGA_EXTENSIONS:
            return FormatTag.TGA
        if suffix in RAW_EXTENSIONS:
            return FormatTag.RAW

    return FormatTag.UNKNOWN


def detect_format(path: Path) -> FormatTag:
    """Sniff the format of ``path``. Never raises."""

    return detect_format_from_bytes(read_prefix(path), path.suffix)
