"""Thin wrappers around the external command line tools."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

LOGGER = logging.getLogger(__name__)

ENCODER = "cjxl"
DECODER = "djxl"
METADATA = "exiftool"

# Exit codes used when the process never ran to completion.
NOT_FOUND_CODE = 127
CANNOT_EXECUTE_CODE = 126
TIMEOUT_CODE = 124


@dataclass(slots=True)
class ToolResult:
    """Exit status and captured output of one external command."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


CommandRunner = Callable[[Sequence[str], Optional[float]], ToolResult]


def run_command(argv: Sequence[str], timeout: Optional[float] = None) -> ToolResult:
    """Run ``argv`` to completion and capture its output."""

    try:
        completed = subprocess.run(
            list(argv),
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as exc:
        return ToolResult(NOT_FOUND_CODE, stderr=str(exc))
    except OSError as exc:
        LOGGER.error("cannot execute %s: %s", argv[0], exc)
        return ToolResult(CANNOT_EXECUTE_CODE, stderr=str(exc))
    except subprocess.TimeoutExpired:
        LOGGER.error("command timed out after %ss: %s", timeout, argv[0])
        return ToolResult(TIMEOUT_CODE, stderr=f"timed out after {timeout}s")
    return ToolResult(completed.returncode, completed.stdout, completed.stderr)


@dataclass(slots=True)
class ExternalTool:
    """A named executable plus the runner used to invoke it.

    ``executable`` is None when the tool is not installed. Tests swap
    ``runner`` for a fake so no process is spawned.
    """

    name: str
    executable: Optional[str]
    runner: CommandRunner = field(default=run_command)
    timeout: Optional[float] = None

    @classmethod
    def discover(cls, name: str, *, timeout: Optional[float] = None) -> "ExternalTool":
        return cls(name=name, executable=shutil.which(name), timeout=timeout)

    @property
    def available(self) -> bool:
        return self.executable is not None

    def run(self, *args: str) -> ToolResult:
        if self.executable is None:
            return ToolResult(NOT_FOUND_CODE, stderr=f"{self.name} not found")
        argv = [self.executable, *args]
        LOGGER.debug("run: %s", " ".join(argv))
        return self.runner(argv, self.timeout)
