"""Unit tests for subprocess runner models."""

from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from dmno_action.runners.models import CommandResult


class TestCommandResult:
    """Tests for CommandResult dataclass."""

    def test_success_when_returncode_zero_and_not_timed_out(self) -> None:
        result = CommandResult(
            returncode=0, stdout="0.0.9\n", stderr="", duration_ms=40
        )
        assert result.success is True

    def test_success_false_when_returncode_nonzero(self) -> None:
        result = CommandResult(returncode=1, stdout="", stderr="err", duration_ms=40)
        assert result.success is False

    def test_success_false_when_timed_out(self) -> None:
        """A timed-out run is a failure even if the code looks clean."""
        result = CommandResult(
            returncode=0,
            stdout="partial output",
            stderr="",
            duration_ms=5000,
            timed_out=True,
        )
        assert result.success is False

    def test_is_frozen(self) -> None:
        result = CommandResult(returncode=0, stdout="", stderr="", duration_ms=1)

        with pytest.raises(FrozenInstanceError):
            result.returncode = 1  # type: ignore[misc]
