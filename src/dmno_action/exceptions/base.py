from __future__ import annotations


class DmnoActionError(Exception):
    """Base exception class for all dmno-action errors.

    This is the root of the dmno-action exception hierarchy. Every failure
    the action knows how to describe inherits from this class, so the
    orchestrator can turn any of them into a single failed-step report while
    letting system exceptions propagate naturally until that boundary.

    Attributes:
        message: Human-readable error message describing what went wrong.

    Example:
        ```python
        try:
            checker.deps_check()
        except DmnoActionError as e:
            host.set_failed(e.message)
        ```
    """

    def __init__(self, message: str) -> None:
        """Initialize the DmnoActionError.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)
