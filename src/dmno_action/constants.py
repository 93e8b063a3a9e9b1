"""Constants shared across dmno-action.

This module is the single source of truth for the names the action relies
on: the external CLI, the Node.js workspace layout, the runner's
environment variables, and the step output.
"""

from __future__ import annotations

# =============================================================================
# External CLI
# =============================================================================

#: Executable name of the configuration-resolution CLI
DMNO_TOOL: str = "dmno"

#: Service resolved when no service-name input is given
DEFAULT_SERVICE_NAME: str = "root"

#: Output format requested from ``dmno resolve`` (includes metadata)
RESOLVE_OUTPUT_FORMAT: str = "json-full"

# =============================================================================
# Workspace layout
# =============================================================================

#: Dependency manifest expected at the workspace root
MANIFEST_FILENAME: str = "package.json"

#: Directory created by a previous dependency-install step
INSTALLED_DEPS_DIRNAME: str = "node_modules"

#: Manifest field declaring the package manager (corepack convention)
PACKAGE_MANAGER_FIELD: str = "packageManager"

# =============================================================================
# Platforms
# =============================================================================

#: ``sys.platform`` prefixes the action runs on (Linux and macOS)
SUPPORTED_PLATFORMS: tuple[str, ...] = ("linux", "darwin")

# =============================================================================
# Runner integration
# =============================================================================

#: Name of the aggregate step output
OUTPUT_NAME: str = "dmno"

#: Failure message for an empty or absent resolution
EMPTY_RESOLUTION_MESSAGE: str = "dmno resolve failed or empty output"

#: Failure message for errors that carry no text
UNEXPECTED_ERROR_MESSAGE: str = "An unexpected error occurred"

#: Prefix of step-input environment variables
INPUT_ENV_PREFIX: str = "INPUT_"
