"""Command-line plumbing for dmno-action."""

from __future__ import annotations

from dmno_action.cli.context import ExitCode, async_command

__all__ = ["ExitCode", "async_command"]
