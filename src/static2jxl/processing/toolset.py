"""Bundles the external collaborators a run needs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from static2jxl.core.exceptions import MissingDependencyError
from static2jxl.processing.encoder import JxlEncoder
from static2jxl.processing.metadata import MetadataTransfer
from static2jxl.processing.tools import DECODER, ENCODER, METADATA, ExternalTool
from static2jxl.processing.validation import HealthChecker

LOGGER = logging.getLogger(__name__)

INSTALL_HINTS = {
    ENCODER: "install libjxl (e.g. brew install jpeg-xl)",
    METADATA: "install exiftool (e.g. brew install exiftool)",
}


@dataclass(slots=True)
class Toolset:
    encoder: JxlEncoder
    metadata: MetadataTransfer
    health: HealthChecker

    @classmethod
    def discover(cls, *, timeout: Optional[float] = None) -> "Toolset":
        """Locate cjxl, djxl and exiftool on ``PATH``."""

        exiftool = ExternalTool.discover(METADATA, timeout=timeout)
        return cls(
            encoder=JxlEncoder(ExternalTool.discover(ENCODER, timeout=timeout)),
            metadata=MetadataTransfer.discover(exiftool, timeout=timeout),
            health=HealthChecker(ExternalTool.discover(DECODER, timeout=timeout)),
        )

    def check_dependencies(self, *, health_check: bool = True) -> None:
        """Raise ``MissingDependencyError`` unless the required tools exist.

        A missing decoder only weakens the health check to a signature test.
        """

        missing = [tool.name for tool in (self.encoder.tool, self.metadata.exiftool) if not tool.available]
        for name in missing:
            LOGGER.error("%s not found: %s", name, INSTALL_HINTS.get(name, "install it and retry"))
        if missing:
            raise MissingDependencyError(missing)

        if health_check and not self.health.can_decode:
            LOGGER.warning("%s not found, health check will be limited", DECODER)
