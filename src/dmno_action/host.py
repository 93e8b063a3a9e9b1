"""Runner host facilities for GitHub Actions.

This module speaks the two protocols the Actions runner reads from a step:

- Workflow commands printed to stdout (``::add-mask::``, ``::error::``,
  and the legacy ``::set-env::`` / ``::set-output::`` fallbacks).
- File commands appended to the files named by ``GITHUB_ENV`` and
  ``GITHUB_OUTPUT``, using a random heredoc delimiter per entry.

Escaping rules and the delimiter format match the runner toolkit so the
runner parses our commands the same way it parses JavaScript actions.
"""

from __future__ import annotations

import os
import sys
import uuid
from collections.abc import Mapping, MutableMapping
from typing import TYPE_CHECKING, TextIO

from dmno_action.exceptions import HostCommandError
from dmno_action.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from dmno_action.config import RunnerEnvironment

__all__ = [
    "ActionsHost",
    "escape_data",
    "escape_property",
    "format_command",
    "prepare_key_value_message",
]

logger = get_logger(__name__)

DELIMITER_PREFIX = "ghadelimiter_"


def escape_data(value: str) -> str:
    """Escape a workflow command message."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_property(value: str) -> str:
    """Escape a workflow command property value."""
    return escape_data(value).replace(":", "%3A").replace(",", "%2C")


def format_command(
    command: str,
    properties: Mapping[str, str] | None = None,
    message: str = "",
) -> str:
    """Render a workflow command line.

    Args:
        command: Command name (e.g. ``add-mask``).
        properties: Optional ``key=value`` properties.
        message: Command payload.

    Returns:
        The command, without trailing newline.

    Example:
        >>> format_command("set-output", {"name": "dmno"}, "{}")
        '::set-output name=dmno::{}'
    """
    line = f"::{command}"
    if properties:
        rendered = ",".join(
            f"{key}={escape_property(value)}" for key, value in properties.items()
        )
        line += f" {rendered}"
    return f"{line}::{escape_data(message)}"


def prepare_key_value_message(key: str, value: str) -> str:
    """Build a heredoc-style file command entry.

    Args:
        key: Variable or output name.
        value: Value, may span lines.

    Returns:
        ``key<<delimiter``, the value and the delimiter on separate lines.

    Raises:
        HostCommandError: If the key or value contains the delimiter.
    """
    delimiter = f"{DELIMITER_PREFIX}{uuid.uuid4()}"
    if delimiter in key:
        raise HostCommandError(
            f"Unexpected input: name should not contain the delimiter \"{delimiter}\"",
            name=key,
        )
    if delimiter in value:
        raise HostCommandError(
            f"Unexpected input: value should not contain the delimiter \"{delimiter}\"",
            name=key,
        )
    return f"{key}<<{delimiter}{os.linesep}{value}{os.linesep}{delimiter}"


class ActionsHost:
    """Step-level interface to the Actions runner.

    Holds no state besides the failure flag; every call is written through
    immediately.

    Attributes:
        failed: True once set_failed() has been called.

    Example:
        host = ActionsHost(environment)
        host.set_secret(token)
        host.export_variable("API_TOKEN", token)
    """

    def __init__(
        self,
        environment: RunnerEnvironment,
        *,
        stdout: TextIO | None = None,
        environ: MutableMapping[str, str] | None = None,
    ) -> None:
        """Initialize the host.

        Args:
            environment: Runner context with the file command paths.
            stdout: Stream for workflow commands. Defaults to sys.stdout.
            environ: Process environment to update on export. Defaults to
                os.environ.
        """
        self._env_file = environment.env_file
        self._output_file = environment.output_file
        self._stdout = stdout
        self._environ = os.environ if environ is None else environ
        self.failed = False

    @property
    def stdout(self) -> TextIO:
        """Stream workflow commands are written to."""
        # Resolved late so pytest's capsys replacement is honored.
        return self._stdout if self._stdout is not None else sys.stdout

    def issue_command(
        self,
        command: str,
        properties: Mapping[str, str] | None = None,
        message: str = "",
    ) -> None:
        """Write a workflow command to stdout."""
        self.stdout.write(format_command(command, properties, message) + os.linesep)
        self.stdout.flush()

    def _issue_file_command(self, path: Path, message: str) -> None:
        if not path.exists():
            raise HostCommandError(f"Missing file at path: {path}")
        with path.open("a", encoding="utf-8") as handle:
            handle.write(f"{message}{os.linesep}")

    def set_secret(self, value: str) -> None:
        """Register a value for redaction in the step log.

        The runner matches masks per line, so each line of a multi-line
        value is registered too.

        Args:
            value: Secret value.
        """
        if not value:
            return
        self.issue_command("add-mask", message=value)
        lines = value.splitlines()
        if len(lines) > 1:
            for line in lines:
                if line.strip():
                    self.issue_command("add-mask", message=line)

    def export_variable(self, name: str, value: str) -> None:
        """Export an environment variable for this and all following steps.

        Args:
            name: Variable name.
            value: Variable value.

        Raises:
            HostCommandError: If the file command cannot be written.
        """
        self._environ[name] = value
        if self._env_file is not None:
            self._issue_file_command(
                self._env_file, prepare_key_value_message(name, value)
            )
            return
        self.issue_command("set-env", {"name": name}, value)

    def set_output(self, name: str, value: str) -> None:
        """Set a step output.

        Args:
            name: Output name.
            value: Output value.

        Raises:
            HostCommandError: If the file command cannot be written.
        """
        if self._output_file is not None:
            self._issue_file_command(
                self._output_file, prepare_key_value_message(name, value)
            )
            return
        self.stdout.write(os.linesep)
        self.issue_command("set-output", {"name": name}, value)

    def error(self, message: str) -> None:
        """Add an error annotation to the step."""
        self.issue_command("error", message=message)

    def set_failed(self, message: str) -> None:
        """Mark the step as failed and annotate it with a message.

        The process exit code is left to the caller; see ``failed``.

        Args:
            message: Human-readable failure reason.
        """
        self.failed = True
        logger.debug("step_failed", reason=message)
        self.error(message)
