"""Precondition exceptions.

This module provides exception classes for the checks that gate a run:
workspace layout, operating system, package manager and CLI availability.
"""

from __future__ import annotations

from pathlib import Path

from dmno_action.exceptions.base import DmnoActionError

__all__ = [
    "PreflightError",
    "MissingManifestError",
    "MissingInstalledDepsError",
    "UnsupportedPlatformError",
    "ToolUnavailableError",
    "ManifestParseError",
    "NoPackageManagerDeclaredError",
]


class PreflightError(DmnoActionError):
    """Base exception for failed precondition checks.

    Attributes:
        message: Human-readable error message.
    """

    pass


class MissingManifestError(PreflightError):
    """No package.json at the workspace root.

    Attributes:
        message: Human-readable error message.
        path: The manifest path that was checked.
    """

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)


class MissingInstalledDepsError(PreflightError):
    """No node_modules directory at the workspace root.

    Usually means the workflow forgot an ``npm ci`` (or equivalent) step
    before this action.

    Attributes:
        message: Human-readable error message.
        path: The directory path that was checked.
    """

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)


class UnsupportedPlatformError(PreflightError):
    """The runner's operating system is not supported.

    Attributes:
        message: Human-readable error message.
        platform: The ``sys.platform`` value that was rejected.
    """

    def __init__(self, message: str, platform: str | None = None) -> None:
        self.platform = platform
        super().__init__(message)


class ToolUnavailableError(PreflightError):
    """The dmno CLI could not be run through the package manager.

    Attributes:
        message: Human-readable error message.
        package_manager: The package manager used for the probe.
    """

    def __init__(self, message: str, package_manager: str | None = None) -> None:
        self.package_manager = package_manager
        super().__init__(message)


class ManifestParseError(PreflightError):
    """package.json could not be read or is not a JSON object.

    Attributes:
        message: Human-readable error message.
        path: The manifest path.
    """

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)


class NoPackageManagerDeclaredError(PreflightError):
    """package.json has no ``packageManager`` field.

    Attributes:
        message: Human-readable error message.
        path: The manifest path.
    """

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)
