"""
Process Runner

Thin seam around spawning external programs so the probe and the voice loader
can be exercised with a fake runner instead of real binaries.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Protocol


logger = logging.getLogger(__name__)


class ProcessTimeoutError(TimeoutError):
    """Raised when a spawned process does not exit within its timeout."""

    def __init__(self, args: Sequence[str], timeout: float):
        self.command = list(args)
        self.timeout = timeout
        super().__init__(f"Command '{' '.join(self.command)}' timed out after {timeout}s")


@dataclass(frozen=True)
class ProcessResult:
    """Exit status and captured output of a finished process."""
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ProcessRunner(Protocol):
    """Anything that can run a command to completion."""

    async def run(self, args: Sequence[str], timeout: float) -> ProcessResult:
        """
        Run a command and capture its output.

        Raises:
            ProcessTimeoutError: If the process outlives ``timeout``
            OSError: If the program cannot be started (missing, not executable)
        """
        ...


class AsyncProcessRunner:
    """ProcessRunner backed by ``asyncio.create_subprocess_exec``."""

    def __init__(self, encoding: str = "utf-8", env: Optional[dict] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.encoding = encoding
        self.env = env

    async def run(self, args: Sequence[str], timeout: float) -> ProcessResult:
        if not args:
            raise ValueError("Command must not be empty")

        self.logger.debug(f"Running {list(args)} (timeout {timeout}s)")
        process = await asyncio.create_subprocess_exec(
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=self.env
        )

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            self.logger.warning(f"Killing {args[0]} after {timeout}s timeout")
            try:
                process.kill()
            except ProcessLookupError:
                pass
            await process.wait()
            raise ProcessTimeoutError(args, timeout) from None

        return ProcessResult(
            returncode=process.returncode,
            stdout=stdout.decode(self.encoding, errors="replace"),
            stderr=stderr.decode(self.encoding, errors="replace")
        )
