"""Tests for child process helpers."""

import asyncio
import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from create_react_app.core.process import (
    capture_output,
    format_command,
    get_node_version,
    run_command,
)
from create_react_app.core.workspace import ProjectWorkspace
from create_react_app.exceptions import FatalInstallError


def _process(returncode=0, stdout=b""):
    process = MagicMock()
    process.returncode = returncode
    process.wait = AsyncMock(return_value=returncode)
    process.communicate = AsyncMock(return_value=(stdout, b""))
    return process


def test_format_command():
    """Test that commands are joined with spaces."""
    assert format_command(["npm", "install", "react"]) == "npm install react"


class TestRunCommand:
    """Test inherited-stdio child processes."""

    @pytest.mark.asyncio
    async def test_success(self, tmp_path):
        """Test that the child runs in the given directory."""
        with patch(
            "asyncio.create_subprocess_exec",
            AsyncMock(return_value=_process(0)),
        ) as mock_exec:
            await run_command(["npm", "install"], cwd=tmp_path)

        mock_exec.assert_awaited_once_with("npm", "install", cwd=tmp_path)

    @pytest.mark.asyncio
    async def test_non_zero_exit(self):
        """Test that a failing child raises with its command line."""
        with patch(
            "asyncio.create_subprocess_exec",
            AsyncMock(return_value=_process(1)),
        ):
            with pytest.raises(FatalInstallError) as exc_info:
                await run_command(["yarnpkg", "add", "react"])

        assert exc_info.value.command == "yarnpkg add react"
        assert exc_info.value.returncode == 1

    @pytest.mark.asyncio
    async def test_missing_executable(self):
        """Test that a child that cannot start is a fatal install error."""
        with patch(
            "asyncio.create_subprocess_exec",
            AsyncMock(side_effect=FileNotFoundError("npm")),
        ):
            with pytest.raises(FatalInstallError, match="Could not start"):
                await run_command(["npm", "install"])

    @pytest.mark.asyncio
    async def test_cancel_terminates_child(self):
        """Test that cancellation waits for the terminated child."""
        process = _process(0)
        process.wait = AsyncMock(side_effect=[asyncio.CancelledError, -15])

        with patch(
            "asyncio.create_subprocess_exec",
            AsyncMock(return_value=process),
        ):
            with pytest.raises(asyncio.CancelledError):
                await run_command(["npm", "install"])

        process.terminate.assert_called_once()
        assert process.wait.await_count == 2
        process.kill.assert_not_called()

    @pytest.mark.asyncio
    async def test_cancel_kills_stuck_child(self):
        """Test that a child ignoring SIGTERM is killed."""
        process = _process(0)
        calls = 0

        async def wait():
            nonlocal calls
            calls += 1
            if calls == 1:
                raise asyncio.CancelledError
            if calls == 2:
                await asyncio.sleep(1)
            return -9

        process.wait = wait

        with (
            patch(
                "asyncio.create_subprocess_exec",
                AsyncMock(return_value=process),
            ),
            patch(
                "create_react_app.core.process."
                "CHILD_TERMINATE_TIMEOUT_SECONDS",
                0.01,
            ),
        ):
            with pytest.raises(asyncio.CancelledError):
                await run_command(["npm", "install"])

        process.terminate.assert_called_once()
        process.kill.assert_called_once()
        assert calls == 3

    @pytest.mark.asyncio
    @pytest.mark.skipif(
        sys.platform == "win32", reason="relies on SIGTERM handlers"
    )
    async def test_cancel_returns_after_child_exits(self, tmp_path):
        """Test that a child writing on SIGTERM is done before rollback."""
        root = tmp_path / "my-app"
        root.mkdir()
        (root / "README.md").write_text("# mine")
        ready = tmp_path / "ready"
        script = (
            "import pathlib, signal, sys, time\n"
            "def stop(signum, frame):\n"
            "    time.sleep(0.5)\n"
            "    pathlib.Path('node_modules').mkdir()\n"
            "    sys.exit(0)\n"
            "signal.signal(signal.SIGTERM, stop)\n"
            "pathlib.Path(sys.argv[1]).touch()\n"
            "time.sleep(30)\n"
        )

        task = asyncio.create_task(
            run_command(
                [sys.executable, "-c", script, str(ready)], cwd=root
            )
        )
        for _ in range(200):
            if ready.exists():
                break
            await asyncio.sleep(0.05)
        assert ready.exists()

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        # The child finished its SIGTERM handler before cancel surfaced
        assert (root / "node_modules").is_dir()
        ProjectWorkspace(root).rollback()
        await asyncio.sleep(0.2)
        assert sorted(p.name for p in root.iterdir()) == ["README.md"]


class TestCaptureOutput:
    """Test stdout capture for version probes."""

    @pytest.mark.asyncio
    async def test_returns_stripped_stdout(self):
        """Test that trailing newlines are removed."""
        with patch(
            "asyncio.create_subprocess_exec",
            AsyncMock(return_value=_process(0, b"v18.17.1\n")),
        ):
            assert await get_node_version() == "v18.17.1"

    @pytest.mark.asyncio
    async def test_failure_returns_none(self):
        """Test that a non-zero exit gives None."""
        with patch(
            "asyncio.create_subprocess_exec",
            AsyncMock(return_value=_process(1, b"oops")),
        ):
            assert await capture_output(["npm", "--version"]) is None

    @pytest.mark.asyncio
    async def test_missing_executable_returns_none(self):
        """Test that a missing executable gives None."""
        with patch(
            "asyncio.create_subprocess_exec",
            AsyncMock(side_effect=FileNotFoundError("yarnpkg")),
        ):
            assert await capture_output(["yarnpkg", "--version"]) is None
