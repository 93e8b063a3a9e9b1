"""Resolution exceptions.

Raised while running ``dmno resolve`` and interpreting what it printed.
"""

from __future__ import annotations

from dmno_action.constants import EMPTY_RESOLUTION_MESSAGE
from dmno_action.exceptions.base import DmnoActionError

__all__ = [
    "ResolveError",
    "SubprocessStderrError",
    "ResolveCommandError",
    "ResolveOutputParseError",
    "EmptyResolutionError",
]


class ResolveError(DmnoActionError):
    """Base exception for resolve failures.

    Attributes:
        message: Human-readable error message.
    """

    pass


class SubprocessStderrError(ResolveError):
    """``dmno resolve`` wrote to standard error.

    Attributes:
        message: Human-readable error message.
        stderr: The captured standard error text.
    """

    def __init__(self, message: str, stderr: str = "") -> None:
        self.stderr = stderr
        super().__init__(message)


class ResolveCommandError(ResolveError):
    """``dmno resolve`` exited with a non-zero status.

    Attributes:
        message: Human-readable error message.
        returncode: Exit status of the process.
        command: The command that was run.
    """

    def __init__(
        self,
        message: str,
        returncode: int | None = None,
        command: list[str] | None = None,
    ) -> None:
        self.returncode = returncode
        self.command = command
        super().__init__(message)


class ResolveOutputParseError(ResolveError):
    """Standard output was not JSON of the expected shape.

    Attributes:
        message: Human-readable error message.
    """

    pass


class EmptyResolutionError(ResolveError):
    """The resolution produced no configuration entries."""

    def __init__(self, message: str = EMPTY_RESOLUTION_MESSAGE) -> None:
        super().__init__(message)
