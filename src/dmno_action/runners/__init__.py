"""Subprocess execution and precondition checks."""

from __future__ import annotations

from dmno_action.runners.command import CommandRunner
from dmno_action.runners.models import CommandResult
from dmno_action.runners.preflight import PreflightChecker, parse_package_manager

__all__ = [
    # Models
    "CommandResult",
    # Runners
    "CommandRunner",
    # Preflight
    "PreflightChecker",
    "parse_package_manager",
]
