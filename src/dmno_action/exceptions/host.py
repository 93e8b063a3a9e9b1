from __future__ import annotations

from dmno_action.exceptions.base import DmnoActionError


class HostCommandError(DmnoActionError):
    """A runner file command could not be written safely.

    Attributes:
        message: Human-readable error message.
        name: The variable or output name involved.
    """

    def __init__(self, message: str, name: str | None = None) -> None:
        """Initialize the HostCommandError.

        Args:
            message: Human-readable error message.
            name: The variable or output name involved.
        """
        self.name = name
        super().__init__(message)
