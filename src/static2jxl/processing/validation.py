"""Health checks for freshly encoded JPEG XL files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from static2jxl.processing.sniffer import JXL_CODESTREAM_MAGIC, read_prefix
from static2jxl.processing.tools import ExternalTool

LOGGER = logging.getLogger(__name__)

CONTAINER_PREFIX = b"\x00\x00\x00"


def has_jxl_signature(path: Path) -> bool:
    """Check the leading bytes for a codestream or container signature."""

    head = read_prefix(path)
    if len(head) < 2:
        return False
    return head.startswith(JXL_CODESTREAM_MAGIC) or head.startswith(CONTAINER_PREFIX)


class HealthChecker:
    """Signature check plus an optional full decode through ``djxl``."""

    def __init__(self, decoder: Optional[ExternalTool] = None) -> None:
        self.decoder = decoder if decoder is not None and decoder.available else None

    @property
    def can_decode(self) -> bool:
        return self.decoder is not None

    def check(self, path: Path) -> bool:
        try:
            if path.stat().st_size == 0:
                return False
        except OSError:
            return False

        if not has_jxl_signature(path):
            LOGGER.debug("bad JXL signature: %s", path)
            return False

        if self.decoder is not None:
            result = self.decoder.run(str(path), "--disable_output")
            if not result.ok:
                LOGGER.debug("decode failed for %s: %s", path, result.stderr.strip())
                return False
        return True
