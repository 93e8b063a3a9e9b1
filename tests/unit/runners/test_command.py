"""Tests for CommandRunner class.

CommandRunner executes argument lists with asyncio subprocesses, validates
the working directory, merges environments and handles timeouts.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from dmno_action.exceptions import WorkingDirectoryError
from dmno_action.runners.command import CommandRunner
from dmno_action.runners.models import CommandResult


class TestCommandRunner:
    """Tests for CommandRunner class."""

    @pytest.mark.asyncio
    async def test_run_simple_command(self, mock_process: MagicMock) -> None:
        """A simple command returns a populated CommandResult."""
        with patch(
            "asyncio.create_subprocess_exec", AsyncMock(return_value=mock_process)
        ):
            runner = CommandRunner()
            result = await runner.run(["echo", "hello"])

            assert isinstance(result, CommandResult)
            assert result.returncode == 0
            assert result.stdout == "stdout output"
            assert result.stderr == ""
            assert result.success is True
            assert result.timed_out is False
            assert result.duration_ms >= 0

    @pytest.mark.asyncio
    async def test_arguments_are_passed_without_shell(
        self, mock_process: MagicMock
    ) -> None:
        """Each argument reaches exec as its own element, unquoted."""
        create = AsyncMock(return_value=mock_process)
        with patch("asyncio.create_subprocess_exec", create):
            runner = CommandRunner()
            await runner.run(["npm", "exec", "dmno", "--service", "a; rm -rf /"])

        args = create.call_args.args
        assert args == ("npm", "exec", "dmno", "--service", "a; rm -rf /")

    @pytest.mark.asyncio
    async def test_run_command_with_stderr(self, mock_process: MagicMock) -> None:
        """stderr is captured separately from stdout."""
        mock_process.communicate = AsyncMock(return_value=(b"out", b"err"))

        with patch(
            "asyncio.create_subprocess_exec", AsyncMock(return_value=mock_process)
        ):
            runner = CommandRunner()
            result = await runner.run(["some", "command"])

            assert result.stdout == "out"
            assert result.stderr == "err"

    @pytest.mark.asyncio
    async def test_non_zero_exit(self, mock_process: MagicMock) -> None:
        """A non-zero exit code is reported, not raised."""
        mock_process.returncode = 2
        mock_process.communicate = AsyncMock(return_value=(b"", b"boom"))

        with patch(
            "asyncio.create_subprocess_exec", AsyncMock(return_value=mock_process)
        ):
            result = await CommandRunner().run(["false"])

        assert result.returncode == 2
        assert result.success is False

    @pytest.mark.asyncio
    async def test_run_command_timeout(self, mock_process: MagicMock) -> None:
        """A timed-out command is terminated and flagged."""
        mock_process.communicate = AsyncMock(side_effect=TimeoutError())
        mock_process.wait = AsyncMock()

        with patch(
            "asyncio.create_subprocess_exec", AsyncMock(return_value=mock_process)
        ):
            runner = CommandRunner(timeout=0.1)
            result = await runner.run(["sleep", "10"])

            assert result.timed_out is True
            assert result.returncode == -1
            assert result.success is False
            mock_process.terminate.assert_called_once()

    @pytest.mark.asyncio
    async def test_command_not_found(self) -> None:
        """A missing executable yields returncode 127 and a stderr message."""
        with patch(
            "asyncio.create_subprocess_exec",
            AsyncMock(side_effect=FileNotFoundError()),
        ):
            result = await CommandRunner().run(["pnpm", "exec", "dmno"])

        assert result.returncode == 127
        assert result.stderr == "Command not found: pnpm"

    @pytest.mark.asyncio
    async def test_permission_denied(self) -> None:
        """An unexecutable file yields returncode 126."""
        with patch(
            "asyncio.create_subprocess_exec",
            AsyncMock(side_effect=PermissionError()),
        ):
            result = await CommandRunner().run(["./dmno"])

        assert result.returncode == 126
        assert "Permission denied" in result.stderr

    @pytest.mark.asyncio
    async def test_working_directory_validation(self) -> None:
        """WorkingDirectoryError is raised for a missing directory."""
        runner = CommandRunner(cwd=Path("/nonexistent/path/xyz"))

        with pytest.raises(WorkingDirectoryError) as exc_info:
            await runner.run(["echo", "test"])

        assert "/nonexistent/path/xyz" in str(exc_info.value.path)

    @pytest.mark.asyncio
    async def test_cwd_override(self, mock_process: MagicMock, tmp_path: Path) -> None:
        """A per-call cwd replaces the runner default."""
        create = AsyncMock(return_value=mock_process)
        with patch("asyncio.create_subprocess_exec", create):
            runner = CommandRunner(cwd=Path("/nonexistent/default"))
            await runner.run(["ls"], cwd=tmp_path)

        assert create.call_args.kwargs["cwd"] == tmp_path

    @pytest.mark.asyncio
    async def test_environment_merge(self, mock_process: MagicMock) -> None:
        """Custom variables are merged over the parent environment."""
        captured_env = None

        async def capture_env(*args, **kwargs):
            nonlocal captured_env
            captured_env = kwargs.get("env")
            return mock_process

        with patch(
            "asyncio.create_subprocess_exec", AsyncMock(side_effect=capture_env)
        ):
            runner = CommandRunner(env={"CUSTOM_VAR": "custom_value"})
            await runner.run(["echo", "test"], env={"OTHER": "1"})

            assert captured_env is not None
            assert captured_env["CUSTOM_VAR"] == "custom_value"
            assert captured_env["OTHER"] == "1"
            assert "PATH" in captured_env

    def test_properties(self, tmp_path: Path) -> None:
        """cwd and timeout are exposed read-only."""
        runner = CommandRunner(cwd=tmp_path, timeout=30.0)

        assert runner.cwd == tmp_path
        assert runner.timeout == 30.0
