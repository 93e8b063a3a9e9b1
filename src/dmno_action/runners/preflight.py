"""Precondition checks run before resolving configuration.

This module provides:
- PreflightChecker: workspace, operating system and CLI availability checks
- parse_package_manager: reduce a ``packageManager`` declaration to its name

The OS and dependency checks raise on failure. The CLI availability check
logs and returns a boolean instead, leaving it to the caller to decide
whether an unavailable CLI is fatal.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from dmno_action.constants import (
    DMNO_TOOL,
    INSTALLED_DEPS_DIRNAME,
    MANIFEST_FILENAME,
    PACKAGE_MANAGER_FIELD,
    SUPPORTED_PLATFORMS,
)
from dmno_action.exceptions import (
    DmnoActionError,
    ManifestParseError,
    MissingInstalledDepsError,
    MissingManifestError,
    NoPackageManagerDeclaredError,
    UnsupportedPlatformError,
)
from dmno_action.logging import get_logger
from dmno_action.runners.command import CommandRunner

if TYPE_CHECKING:
    from pathlib import Path

    from dmno_action.config import RunnerEnvironment

__all__ = ["PreflightChecker", "parse_package_manager"]

logger = get_logger(__name__)


def parse_package_manager(declared: str) -> str:
    """Return the package manager name from a ``packageManager`` value.

    Corepack declarations carry a version and optionally an integrity
    hash (``pnpm@9.1.0+sha512.abc``); only the name is used to build the
    invocation.

    Args:
        declared: The raw field value.

    Returns:
        The package manager name, e.g. ``"pnpm"``.

    Raises:
        ManifestParseError: If no name can be extracted.

    Example:
        >>> parse_package_manager("yarn@3.0.0")
        'yarn'
    """
    name = declared.strip().split("@", 1)[0].split("+", 1)[0].strip()
    if not name:
        raise ManifestParseError(
            f"Invalid {PACKAGE_MANAGER_FIELD} value in {MANIFEST_FILENAME}: "
            f"{declared!r}"
        )
    return name


class PreflightChecker:
    """Checks that gate a resolve run.

    Example:
        checker = PreflightChecker(environment)
        if not await checker.run_all_checks():
            raise ToolUnavailableError(checker.tool_failure or "dmno unavailable")
    """

    def __init__(
        self,
        environment: RunnerEnvironment,
        runner: CommandRunner | None = None,
    ) -> None:
        """Initialize the checker.

        Args:
            environment: Runner context; provides the workspace and platform.
            runner: Command runner for the CLI probe. A runner rooted at the
                workspace is created when omitted.
        """
        self._workspace = environment.workspace
        self._platform = environment.platform
        self._runner = runner or CommandRunner(
            cwd=environment.workspace, timeout=environment.timeout
        )
        self._tool_failure: str | None = None

    @property
    def manifest_path(self) -> Path:
        """Path of package.json at the workspace root."""
        return self._workspace / MANIFEST_FILENAME

    @property
    def tool_failure(self) -> str | None:
        """Reason the last CLI availability check failed, if it did."""
        return self._tool_failure

    def deps_check(self) -> bool:
        """Check that a previous step installed the workspace dependencies.

        Returns:
            True when package.json and node_modules are present.

        Raises:
            MissingManifestError: If package.json does not exist.
            MissingInstalledDepsError: If node_modules does not exist.
        """
        logger.debug("deps_check_started", workspace=str(self._workspace))
        if not self.manifest_path.exists():
            raise MissingManifestError(
                f"{MANIFEST_FILENAME} does not exist in repository",
                path=self.manifest_path,
            )
        deps_path = self._workspace / INSTALLED_DEPS_DIRNAME
        if not deps_path.is_dir():
            raise MissingInstalledDepsError(
                f"{INSTALLED_DEPS_DIRNAME} does not exist in repository",
                path=deps_path,
            )
        return True

    def os_check(self) -> bool:
        """Check that the operating system is supported.

        Returns:
            True on Linux and macOS.

        Raises:
            UnsupportedPlatformError: On any other platform.
        """
        logger.debug("os_check_started", platform=self._platform)
        if not self._platform.startswith(SUPPORTED_PLATFORMS):
            raise UnsupportedPlatformError(
                "Unsupported operating system - only Linux and macOS are supported",
                platform=self._platform,
            )
        return True

    def get_package_manager(self) -> str:
        """Detect the package manager declared in package.json.

        Returns:
            Package manager name without version, e.g. ``"yarn"``.

        Raises:
            ManifestParseError: If package.json cannot be read, is not valid
                JSON, is not an object, or declares a non-string value.
            NoPackageManagerDeclaredError: If no package manager is declared.
        """
        path = self.manifest_path
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ManifestParseError(
                f"Unable to read {MANIFEST_FILENAME}: {e}", path=path
            ) from e

        try:
            manifest = json.loads(text)
        except json.JSONDecodeError as e:
            raise ManifestParseError(
                f"Invalid JSON in {MANIFEST_FILENAME}: {e}", path=path
            ) from e

        if not isinstance(manifest, dict):
            raise ManifestParseError(
                f"{MANIFEST_FILENAME} must contain a JSON object", path=path
            )

        declared = manifest.get(PACKAGE_MANAGER_FIELD)
        if declared is None or (isinstance(declared, str) and not declared.strip()):
            raise NoPackageManagerDeclaredError(
                f"No package manager specified in {MANIFEST_FILENAME}", path=path
            )
        if not isinstance(declared, str):
            raise ManifestParseError(
                f"{PACKAGE_MANAGER_FIELD} in {MANIFEST_FILENAME} must be a string",
                path=path,
            )

        package_manager = parse_package_manager(declared)
        logger.debug(
            "package_manager_detected",
            package_manager=package_manager,
            declared=declared,
        )
        return package_manager

    async def tool_availability_check(self) -> bool:
        """Check that dmno runs through the workspace's package manager.

        Failures are logged and recorded in ``tool_failure``, never raised.

        Returns:
            True if ``<pm> exec dmno --version`` succeeds, False otherwise.
        """
        self._tool_failure = None
        logger.debug("tool_check_started", tool=DMNO_TOOL)

        try:
            package_manager = self.get_package_manager()
            result = await self._runner.run(
                [package_manager, "exec", DMNO_TOOL, "--version"],
                cwd=self._workspace,
            )
        except DmnoActionError as e:
            self._tool_failure = (
                f"{DMNO_TOOL} is not installed or not available in the current "
                f"working directory, error: {e.message}"
            )
            logger.error("tool_unavailable", error=e.message)
            return False

        if not result.success:
            detail = result.stderr.strip() or f"exit code {result.returncode}"
            self._tool_failure = (
                f"{DMNO_TOOL} is not installed or not available in the current "
                f"working directory, error: {detail}"
            )
            logger.error(
                "tool_unavailable",
                package_manager=package_manager,
                returncode=result.returncode,
                stderr=result.stderr.strip(),
            )
            return False

        logger.debug("tool_available", version=result.stdout.strip())
        return True

    async def run_all_checks(self) -> bool:
        """Run the OS, dependency and CLI checks in that order.

        Returns:
            The result of the CLI availability check.

        Raises:
            UnsupportedPlatformError: From os_check().
            MissingManifestError: From deps_check().
            MissingInstalledDepsError: From deps_check().
        """
        self.os_check()
        self.deps_check()
        return await self.tool_availability_check()
