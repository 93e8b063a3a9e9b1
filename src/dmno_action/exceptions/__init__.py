"""dmno-action exception hierarchy.

All exceptions can be imported from this package:
    from dmno_action.exceptions import DmnoActionError, PreflightError
"""

from __future__ import annotations

# Base exception
from dmno_action.exceptions.base import DmnoActionError

# Configuration exceptions
from dmno_action.exceptions.config import ConfigError

# Runner host exceptions
from dmno_action.exceptions.host import HostCommandError

# Precondition exceptions
from dmno_action.exceptions.preflight import (
    ManifestParseError,
    MissingInstalledDepsError,
    MissingManifestError,
    NoPackageManagerDeclaredError,
    PreflightError,
    ToolUnavailableError,
    UnsupportedPlatformError,
)

# Resolution exceptions
from dmno_action.exceptions.resolve import (
    EmptyResolutionError,
    ResolveCommandError,
    ResolveError,
    ResolveOutputParseError,
    SubprocessStderrError,
)

# Subprocess runner exceptions
from dmno_action.exceptions.runner import (
    RunnerError,
    WorkingDirectoryError,
)

__all__ = [
    # Base
    "DmnoActionError",
    # Config
    "ConfigError",
    # Host
    "HostCommandError",
    # Preflight
    "ManifestParseError",
    "MissingInstalledDepsError",
    "MissingManifestError",
    "NoPackageManagerDeclaredError",
    "PreflightError",
    "ToolUnavailableError",
    "UnsupportedPlatformError",
    # Resolve
    "EmptyResolutionError",
    "ResolveCommandError",
    "ResolveError",
    "ResolveOutputParseError",
    "SubprocessStderrError",
    # Runner
    "RunnerError",
    "WorkingDirectoryError",
]
