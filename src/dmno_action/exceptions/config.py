from __future__ import annotations

from typing import Any

from dmno_action.exceptions.base import DmnoActionError


class ConfigError(DmnoActionError):
    """Exception for step-input and runner-environment errors.

    Raised when the action's inputs or the runner environment cannot be
    read or validated: a boolean input outside the YAML 1.2 core schema, a
    skip pattern that is not a valid regular expression, and so on.

    Attributes:
        message: Human-readable error message describing the configuration issue.
        field: Optional input or variable name that caused the error.
        value: Optional value that failed validation (for debugging).

    Examples:
        ```python
        raise ConfigError(
            "Input does not meet YAML 1.2 Core Schema specification",
            field="emit-env-vars",
            value="yes",
        )
        ```
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        """Initialize the ConfigError.

        Args:
            message: Human-readable error message.
            field: Optional field name that caused the error.
            value: Optional value that failed validation.
        """
        self.field = field
        self.value = value
        super().__init__(message)
