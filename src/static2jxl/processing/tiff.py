"""Reads the compression method out of a TIFF image file directory."""

from __future__ import annotations

import logging
import struct
from pathlib import Path

from static2jxl.core.models import CompressionCode

LOGGER = logging.getLogger(__name__)

COMPRESSION_TAG = 259
MAX_SCANNED_ENTRIES = 100
ENTRY_SIZE = 12

COMPRESSION_CODES = {
    1: CompressionCode.NONE,
    5: CompressionCode.LZW,
    7: CompressionCode.JPEG,
    8: CompressionCode.DEFLATE,
    32946: CompressionCode.DEFLATE,
}

# JPEG data is already lossy; an unreadable directory cannot be trusted.
UNSUITABLE = frozenset({CompressionCode.JPEG, CompressionCode.UNKNOWN})


class _Truncated(Exception):
    pass


def _read_exact(handle, size: int) -> bytes:
    data = handle.read(size)
    if len(data) < size:
        raise _Truncated
    return data


def detect_tiff_compression(path: Path) -> CompressionCode:
    """Return the compression code of the first image directory.

    A missing compression tag means uncompressed data. Any short read or I/O
    error yields ``CompressionCode.UNKNOWN`` instead of raising.
    """

    try:
        with path.open("rb") as handle:
            header = _read_exact(handle, 8)
            order = "<" if header[0:1] == b"I" else ">"
            (ifd_offset,) = struct.unpack(order + "I", header[4:8])

            handle.seek(ifd_offset)
            (count,) = struct.unpack(order + "H", _read_exact(handle, 2))

            for _ in range(min(count, MAX_SCANNED_ENTRIES)):
                entry = _read_exact(handle, ENTRY_SIZE)
                (tag,) = struct.unpack(order + "H", entry[0:2])
                if tag == COMPRESSION_TAG:
                    (value,) = struct.unpack(order + "H", entry[8:10])
                    return COMPRESSION_CODES.get(value, CompressionCode.OTHER)
    except _Truncated:
        LOGGER.debug("truncated TIFF directory: %s", path)
        return CompressionCode.UNKNOWN
    except (OSError, ValueError) as exc:
        LOGGER.debug("cannot inspect TIFF %s: %s", path, exc)
        return CompressionCode.UNKNOWN

    return CompressionCode.NONE


def is_tiff_suitable(code: CompressionCode) -> bool:
    return code not in UNSUITABLE
