"""Child process helpers.

Installs and the init script run with the parent's stdio so the user sees
npm and yarn progress as it happens. Version probes capture stdout instead.
"""

import asyncio
import contextlib
from collections.abc import Sequence
from pathlib import Path

from create_react_app.constants import (
    CHILD_TERMINATE_TIMEOUT_SECONDS,
    NODE_EXECUTABLE,
)
from create_react_app.exceptions import FatalInstallError
from create_react_app.logger import get_logger

logger = get_logger(__name__)


def format_command(command: Sequence[str]) -> str:
    """Join a command for display in error messages."""
    return " ".join(command)


async def _stop(process: asyncio.subprocess.Process) -> None:
    """Terminate ``process`` and wait until it has exited.

    The child gets ``CHILD_TERMINATE_TIMEOUT_SECONDS`` to exit after
    SIGTERM before it is killed. Rollback must not start while it can
    still write to the project.
    """
    with contextlib.suppress(ProcessLookupError):
        process.terminate()
    try:
        await asyncio.wait_for(
            asyncio.shield(process.wait()),
            CHILD_TERMINATE_TIMEOUT_SECONDS,
        )
    except TimeoutError:
        logger.warning(
            "Child process %s did not exit, killing it", process.pid
        )
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        await asyncio.shield(process.wait())


async def run_command(command: Sequence[str], cwd: Path | None = None) -> None:
    """Run ``command`` with inherited stdio and wait for it to exit.

    If the awaiting task is cancelled, the child is stopped and has exited
    before the cancellation propagates.

    Args:
        command: Executable and arguments
        cwd: Working directory for the child

    Raises:
        FatalInstallError: If the child cannot start or exits non-zero

    """
    command_line = format_command(command)
    logger.debug("Running: %s (cwd=%s)", command_line, cwd)

    try:
        process = await asyncio.create_subprocess_exec(*command, cwd=cwd)
    except OSError as e:
        msg = f"Could not start {command[0]}: {e}"
        raise FatalInstallError(msg, command=command_line) from e

    try:
        returncode = await process.wait()
    except asyncio.CancelledError:
        await _stop(process)
        raise

    if returncode != 0:
        msg = f"{command[0]} exited with code {returncode}"
        raise FatalInstallError(
            msg, command=command_line, returncode=returncode
        )


async def capture_output(command: Sequence[str]) -> str | None:
    """Run ``command`` and return its stripped stdout.

    Returns:
        Output text, or None if the command is missing or fails

    """
    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, _ = await process.communicate()
    except OSError as e:
        logger.debug("Could not run %s: %s", format_command(command), e)
        return None

    if process.returncode != 0:
        logger.debug(
            "%s exited with code %s",
            format_command(command),
            process.returncode,
        )
        return None
    return stdout.decode("utf-8", errors="ignore").strip()


async def get_node_version() -> str | None:
    """Return the running node version (``v18.17.1``), if node is present."""
    return await capture_output([NODE_EXECUTABLE, "--version"])
