"""Async command execution utilities."""

import asyncio
import logging
import shutil
from pathlib import Path
from typing import Sequence, Tuple

from .errors import MissingCommandError

DEFAULT_TIMEOUT = 30
DOWNLOAD_TIMEOUT = 600
BUILD_TIMEOUT = 3600

_logging = logging.getLogger(__name__)


async def run_command_async(
    args: Sequence[str],
    timeout: int = DEFAULT_TIMEOUT,
    cwd: Path | None = None,
    merge_stderr: bool = False,
) -> Tuple[str, int]:
    """Run a command asynchronously and return output and return code.

    The command is executed directly (no shell), so arguments never need
    quoting. stdout is returned; stderr is only logged unless
    ``merge_stderr`` folds it into the returned output.
    """
    process = None
    command = " ".join(str(a) for a in args)
    try:
        _logging.debug(f"Running command: {command}")
        process = await asyncio.create_subprocess_exec(
            *[str(a) for a in args],
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT if merge_stderr else asyncio.subprocess.PIPE,
            cwd=str(cwd) if cwd else None,
        )
        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=timeout
            )
            output = stdout.decode(errors="replace").strip()
            if stderr:
                _logging.debug(f"stderr: {stderr.decode(errors='replace').strip()}")
            return output, process.returncode if process.returncode is not None else 1
        except asyncio.TimeoutError:
            process.kill()
            _ = await process.wait()
            _logging.error(f"Command timed out after {timeout} seconds: {command}")
            return f"Command timed out after {timeout} seconds", 1
    except OSError as e:
        _logging.error(f"Command execution failed: {type(e).__name__}: {e} | Command: {command}")
        return f"Error: {str(e)}", 1
    finally:
        if process:
            transport = getattr(process, "_transport", None)
            if transport:
                transport.close()


def has_command(name: str) -> bool:
    return shutil.which(name) is not None


def require_command(name: str) -> None:
    """Fail before any mutation if ``name`` is not on PATH."""
    if not has_command(name):
        raise MissingCommandError(name)


__all__ = [
    "DEFAULT_TIMEOUT",
    "DOWNLOAD_TIMEOUT",
    "BUILD_TIMEOUT",
    "run_command_async",
    "has_command",
    "require_command",
]
