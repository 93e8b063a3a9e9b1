"""Unit tests for exception classes.

Tests the dmno-action exception hierarchy:
- DmnoActionError and its message attribute
- ConfigError
- Precondition errors (PreflightError subclasses)
- Resolve errors (ResolveError subclasses)
- Runner and host errors
"""

from __future__ import annotations

from pathlib import Path

import pytest

from dmno_action.exceptions import (
    ConfigError,
    DmnoActionError,
    EmptyResolutionError,
    HostCommandError,
    ManifestParseError,
    MissingInstalledDepsError,
    MissingManifestError,
    NoPackageManagerDeclaredError,
    PreflightError,
    ResolveCommandError,
    ResolveError,
    ResolveOutputParseError,
    RunnerError,
    SubprocessStderrError,
    ToolUnavailableError,
    UnsupportedPlatformError,
    WorkingDirectoryError,
)

# =============================================================================
# Hierarchy Tests
# =============================================================================


@pytest.mark.parametrize(
    ("error_cls", "parent"),
    [
        (ConfigError, DmnoActionError),
        (HostCommandError, DmnoActionError),
        (PreflightError, DmnoActionError),
        (MissingManifestError, PreflightError),
        (MissingInstalledDepsError, PreflightError),
        (UnsupportedPlatformError, PreflightError),
        (ToolUnavailableError, PreflightError),
        (ManifestParseError, PreflightError),
        (NoPackageManagerDeclaredError, PreflightError),
        (ResolveError, DmnoActionError),
        (SubprocessStderrError, ResolveError),
        (ResolveCommandError, ResolveError),
        (ResolveOutputParseError, ResolveError),
        (EmptyResolutionError, ResolveError),
        (RunnerError, DmnoActionError),
        (WorkingDirectoryError, RunnerError),
    ],
)
def test_hierarchy(error_cls: type[Exception], parent: type[Exception]) -> None:
    """Every error is catchable through its area base and DmnoActionError."""
    assert issubclass(error_cls, parent)
    assert issubclass(error_cls, DmnoActionError)


class TestDmnoActionError:
    """Tests for the base exception."""

    def test_message_attribute(self) -> None:
        error = DmnoActionError("something broke")

        assert error.message == "something broke"
        assert str(error) == "something broke"

    def test_catchable_as_exception(self) -> None:
        with pytest.raises(Exception, match="boom"):
            raise DmnoActionError("boom")


# =============================================================================
# ConfigError Tests
# =============================================================================


class TestConfigError:
    """Tests for ConfigError."""

    def test_message_only(self) -> None:
        error = ConfigError("bad input")

        assert error.message == "bad input"
        assert error.field is None
        assert error.value is None

    def test_with_field_and_value(self) -> None:
        error = ConfigError("bad input", field="emit-env-vars", value="yes")

        assert error.field == "emit-env-vars"
        assert error.value == "yes"


# =============================================================================
# Precondition Error Tests
# =============================================================================


class TestPreflightErrors:
    """Tests for precondition error attributes."""

    def test_missing_manifest_path(self) -> None:
        error = MissingManifestError(
            "package.json does not exist in repository",
            path=Path("/w/package.json"),
        )

        assert error.path == Path("/w/package.json")
        assert error.message == "package.json does not exist in repository"

    def test_missing_deps_path_defaults_to_none(self) -> None:
        assert MissingInstalledDepsError("missing").path is None

    def test_unsupported_platform(self) -> None:
        error = UnsupportedPlatformError("unsupported", platform="win32")

        assert error.platform == "win32"

    def test_tool_unavailable(self) -> None:
        error = ToolUnavailableError("dmno missing", package_manager="pnpm")

        assert error.package_manager == "pnpm"
        assert str(error) == "dmno missing"

    def test_no_package_manager(self) -> None:
        error = NoPackageManagerDeclaredError(
            "No package manager specified in package.json"
        )

        assert error.path is None
        assert "No package manager" in error.message


# =============================================================================
# Resolve Error Tests
# =============================================================================


class TestResolveErrors:
    """Tests for resolve error attributes."""

    def test_stderr_error_keeps_stderr(self) -> None:
        error = SubprocessStderrError("dmno resolve failed: oops", stderr="oops")

        assert error.stderr == "oops"
        assert error.message == "dmno resolve failed: oops"

    def test_command_error(self) -> None:
        error = ResolveCommandError(
            "exited with code 2",
            returncode=2,
            command=["npm", "exec", "dmno", "resolve"],
        )

        assert error.returncode == 2
        assert error.command == ["npm", "exec", "dmno", "resolve"]

    def test_empty_resolution_default_message(self) -> None:
        error = EmptyResolutionError()

        assert error.message == "dmno resolve failed or empty output"

    def test_empty_resolution_custom_message(self) -> None:
        assert EmptyResolutionError("nothing").message == "nothing"


# =============================================================================
# Runner / Host Error Tests
# =============================================================================


class TestRunnerErrors:
    """Tests for runner and host error attributes."""

    def test_working_directory_path(self) -> None:
        error = WorkingDirectoryError("does not exist", path=Path("/missing"))

        assert error.path == Path("/missing")

    def test_host_command_name(self) -> None:
        error = HostCommandError("Missing file at path: /x", name="API_KEY")

        assert error.name == "API_KEY"
        assert error.message == "Missing file at path: /x"
