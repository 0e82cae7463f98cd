"""Fake external tools shared by the tests."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Optional

import pytest

from static2jxl.core.config import RunConfig
from static2jxl.processing.encoder import JxlEncoder
from static2jxl.processing.metadata import MetadataTransfer
from static2jxl.processing.tools import ExternalTool, ToolResult
from static2jxl.processing.toolset import Toolset
from static2jxl.processing.validation import HealthChecker

JXL_MAGIC = b"\xff\x0a"


class FakeEncoder:
    """Stands in for cjxl: writes a JXL-looking file sized ``ratio`` x input."""

    def __init__(
        self,
        ratio: float = 0.5,
        *,
        returncode: int = 0,
        write: bool = True,
        prefix: bytes = JXL_MAGIC,
        ratios: Optional[dict[str, float]] = None,
        on_call: Optional[Callable[[Path], None]] = None,
    ) -> None:
        self.ratio = ratio
        self.ratios = ratios or {}
        self.returncode = returncode
        self.write = write
        self.prefix = prefix
        self.on_call = on_call
        self.calls: list[list[str]] = []
        self._lock = threading.Lock()

    def __call__(self, argv, timeout) -> ToolResult:
        with self._lock:
            self.calls.append(list(argv))
        source, output = Path(argv[1]), Path(argv[2])
        if self.on_call is not None:
            self.on_call(source)
        if self.write:
            ratio = self.ratios.get(source.name, self.ratio)
            size = max(len(self.prefix), int(source.stat().st_size * ratio))
            output.write_bytes(self.prefix + b"\x00" * (size - len(self.prefix)))
        return ToolResult(self.returncode, stderr="" if self.returncode == 0 else "encode error")

    @property
    def sources(self) -> list[str]:
        return [Path(call[1]).name for call in self.calls]


class FakeCommand:
    """Generic fake: fixed exit code and stdout, records argv."""

    def __init__(self, returncode: int = 0, stdout: str = "") -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.calls: list[list[str]] = []

    def __call__(self, argv, timeout) -> ToolResult:
        self.calls.append(list(argv))
        return ToolResult(self.returncode, stdout=self.stdout)


def build_toolset(
    encoder: Optional[FakeEncoder] = None,
    *,
    decoder: Optional[FakeCommand] = None,
    exiftool: Optional[FakeCommand] = None,
    decoder_installed: bool = True,
    encoder_installed: bool = True,
    exiftool_installed: bool = True,
) -> Toolset:
    encoder = encoder or FakeEncoder()
    decoder = decoder or FakeCommand()
    exiftool = exiftool or FakeCommand(stdout="Make\nModel\n")
    return Toolset(
        encoder=JxlEncoder(ExternalTool("cjxl", "/fake/cjxl" if encoder_installed else None, runner=encoder)),
        metadata=MetadataTransfer(
            ExternalTool("exiftool", "/fake/exiftool" if exiftool_installed else None, runner=exiftool)
        ),
        health=HealthChecker(ExternalTool("djxl", "/fake/djxl" if decoder_installed else None, runner=decoder)),
    )


def write_file(path: Path, head: bytes, size: int) -> Path:
    """Write ``head`` padded with zeros up to ``size`` bytes."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(head + b"\x00" * max(0, size - len(head)))
    return path


@pytest.fixture
def make_config(tmp_path: Path):
    def factory(**overrides) -> RunConfig:
        overrides.setdefault("target_dir", tmp_path)
        return RunConfig(**overrides)

    return factory
