"""JPEG XL encoder invocation."""

from __future__ import annotations

import logging
from pathlib import Path

from static2jxl.core.config import ENCODER_THREADS, RunConfig
from static2jxl.core.models import FormatTag, Mode
from static2jxl.processing.tools import ExternalTool, ToolResult

LOGGER = logging.getLogger(__name__)


def build_encoder_arguments(
    source: Path,
    output: Path,
    mode: Mode,
    source_format: FormatTag,
    config: RunConfig,
) -> list[str]:
    """Return the cjxl argument list for one conversion."""

    args = [str(source), str(output)]
    if mode is Mode.TRANSCODE_REVERSIBLE:
        # Keeps the DCT coefficients so the original JPEG can be rebuilt.
        args.append("--lossless_jpeg=1")
    elif mode is Mode.REENCODE_LOSSLESS:
        args.extend(["-d", f"{config.lossless_distance:g}", "-e", str(config.effort)])
        if source_format is FormatTag.JPEG:
            args.append("--lossless_jpeg=0")
    else:
        raise ValueError(f"nothing to encode for mode {mode.value}")
    args.append(f"--num_threads={ENCODER_THREADS}")
    return args


class JxlEncoder:
    """Runs ``cjxl`` for a work item."""

    def __init__(self, tool: ExternalTool) -> None:
        self.tool = tool

    def encode(
        self,
        source: Path,
        output: Path,
        mode: Mode,
        source_format: FormatTag,
        config: RunConfig,
    ) -> ToolResult:
        args = build_encoder_arguments(source, output, mode, source_format, config)
        result = self.tool.run(*args)
        if not result.ok:
            LOGGER.debug("%s exited with %d: %s", self.tool.name, result.returncode, result.stderr.strip())
        return result
