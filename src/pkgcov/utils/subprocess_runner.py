"""Asynchronous subprocess execution with timeout and output capture.

Used to drive the toolchain (``swift test``) that produces coverage exports.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


@dataclass
class SubprocessResult:
    """Result of subprocess execution."""

    returncode: int
    """Exit code of the process."""

    stdout: str
    """Standard output captured from the process."""

    stderr: str
    """Standard error captured from the process."""

    command: list[str] = field(default_factory=list)
    """The command that was executed."""

    timed_out: bool = False
    """True if the process was killed after exceeding its timeout."""

    duration_ms: float = 0.0
    """Wall-clock duration of the execution in milliseconds."""

    @property
    def success(self) -> bool:
        """True when the process exited with 0 before its timeout."""
        return self.returncode == 0 and not self.timed_out

    @property
    def output(self) -> str:
        """Captured stdout and stderr, joined for display."""
        return "\n".join(part for part in (self.stdout.rstrip(), self.stderr.rstrip()) if part)


async def run_subprocess(
    command: Sequence[str],
    *,
    cwd: Path | None = None,
    timeout: float = 120.0,
    env: dict[str, str] | None = None,
    check: bool = False,
) -> SubprocessResult:
    """Execute a command in a subprocess with a timeout.

    Args:
        command: Command and arguments (e.g. ``['swift', 'test']``).
        cwd: Working directory. Defaults to the current directory.
        timeout: Maximum seconds to wait for completion.
        env: Extra environment variables, layered over ``os.environ``.
        check: If True, raise SubprocessError when the command does not succeed.

    Returns:
        SubprocessResult with exit code, output, and timing.

    Raises:
        SubprocessError: The command could not be started, or ``check`` is set
            and the command failed or timed out.
        ValueError: The command is empty, the timeout is not positive, or the
            working directory does not exist.
    """
    if not command:
        raise ValueError("Command cannot be empty")

    if timeout <= 0:
        raise ValueError(f"Timeout must be positive, got {timeout}")

    work_dir = cwd.resolve() if cwd else Path.cwd()
    if not work_dir.is_dir():
        raise ValueError(f"Working directory does not exist: {work_dir}")

    full_env = {**os.environ, **env} if env else None
    argv = [str(part) for part in command]
    display = " ".join(argv)

    logger.debug("Running subprocess: %s (cwd=%s, timeout=%s)", display, work_dir, timeout)

    start_time = time.perf_counter()
    timed_out = False

    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=work_dir,
            env=full_env,
        )
    except FileNotFoundError as exc:
        logger.error("Command not found: %s", argv[0])
        raise SubprocessError(
            f"Command not found: {argv[0]}",
            result=SubprocessResult(returncode=-1, stdout="", stderr=str(exc), command=argv),
        ) from exc

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except TimeoutError:
        logger.warning("Subprocess timed out after %s seconds: %s", timeout, display)
        timed_out = True
        try:
            process.kill()
            await process.wait()
        except ProcessLookupError:
            pass
        stdout_bytes = b""
        stderr_bytes = b"Process timed out and was killed"

    duration_ms = (time.perf_counter() - start_time) * 1000
    returncode = -1 if timed_out else (process.returncode or 0)

    result = SubprocessResult(
        returncode=returncode,
        stdout=stdout_bytes.decode("utf-8", errors="replace"),
        stderr=stderr_bytes.decode("utf-8", errors="replace"),
        command=argv,
        timed_out=timed_out,
        duration_ms=duration_ms,
    )

    logger.debug(
        "Subprocess completed: returncode=%d, duration=%.2fms, success=%s",
        returncode,
        duration_ms,
        result.success,
    )

    if check and not result.success:
        reason = "timed out" if timed_out else f"failed with exit code {returncode}"
        raise SubprocessError(f"Command {reason}: {display}", result=result)

    return result


class SubprocessError(Exception):
    """Exception raised when subprocess execution fails."""

    def __init__(self, message: str, result: SubprocessResult) -> None:
        """Initialize with error message and result.

        Args:
            message: Error description.
            result: The SubprocessResult from the failed execution.
        """
        super().__init__(message)
        self.result = result
