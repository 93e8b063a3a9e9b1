"""Models for ``dmno resolve --format json-full`` output.

The CLI prints one JSON document. Only the ``configNodes`` mapping is read;
every node is validated before any key is iterated, so a malformed document
fails as a whole instead of half-exporting.

Models:
- ConfigNode: one resolved configuration item
- ResolvedConfig: the parsed document
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dmno_action.exceptions import ResolveOutputParseError

__all__ = ["ConfigNode", "ResolvedConfig", "ResolvedValue"]

#: JSON value a node may resolve to
ResolvedValue = str | bool | int | float | list[Any] | dict[str, Any] | None


class ConfigNode(BaseModel):
    """A single resolved configuration item.

    Attributes:
        resolved_value: Final value after dmno applied overrides (None when
            the item resolved to nothing).
        is_sensitive: Value must be masked before it can appear in logs.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    resolved_value: ResolvedValue = Field(default=None, alias="resolvedValue")
    is_sensitive: bool = Field(default=False, alias="isSensitive")

    @field_validator("is_sensitive", mode="before")
    @classmethod
    def null_is_not_sensitive(cls, v: Any) -> Any:
        return False if v is None else v

    @property
    def export_value(self) -> str | None:
        """Value as an environment variable string.

        Strings are used verbatim. Other JSON values use their compact JSON
        text, so ``true`` stays ``true`` and ``3000`` stays ``3000``.
        """
        if self.resolved_value is None:
            return None
        if isinstance(self.resolved_value, str):
            return self.resolved_value
        return json.dumps(
            self.resolved_value, separators=(",", ":"), ensure_ascii=False
        )


class ResolvedConfig(BaseModel):
    """Parsed resolve output.

    Attributes:
        config_nodes: Key to node mapping, None when the CLI omitted it.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    config_nodes: dict[str, ConfigNode] | None = Field(
        default=None, alias="configNodes"
    )

    @classmethod
    def from_output(cls, stdout: str) -> ResolvedConfig:
        """Parse the CLI's standard output.

        Args:
            stdout: Captured standard output.

        Returns:
            Validated ResolvedConfig.

        Raises:
            ResolveOutputParseError: If the output is not JSON or does not
                have the expected shape.
        """
        try:
            data = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise ResolveOutputParseError(
                f"Failed to parse dmno resolve output as JSON: {e}"
            ) from e

        if not isinstance(data, dict):
            raise ResolveOutputParseError(
                "Unexpected dmno resolve output: expected a JSON object, "
                f"got {type(data).__name__}"
            )

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            first_error = e.errors()[0]
            location = ".".join(str(loc) for loc in first_error["loc"])
            raise ResolveOutputParseError(
                f"Unexpected dmno resolve output at '{location}': {first_error['msg']}"
            ) from e

    @property
    def nodes(self) -> dict[str, ConfigNode]:
        """Configuration nodes in output order (empty when absent)."""
        return dict(self.config_nodes or {})

    def is_empty(self) -> bool:
        """True if there is nothing to publish."""
        return not self.config_nodes

    def without_keys_matching(self, pattern: re.Pattern[str]) -> ResolvedConfig:
        """Return a copy without the keys ``pattern`` matches anywhere in.

        Args:
            pattern: Compiled skip pattern.

        Returns:
            New ResolvedConfig with the remaining nodes.
        """
        kept = {
            key: node for key, node in self.nodes.items() if not pattern.search(key)
        }
        return self.model_copy(update={"config_nodes": kept})

    def to_output_mapping(self) -> dict[str, str]:
        """Key to value mapping for the step output, nulls left out."""
        return {
            key: value
            for key, node in self.nodes.items()
            if (value := node.export_value) is not None
        }
