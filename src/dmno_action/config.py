from __future__ import annotations

import os
import re
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from dmno_action.constants import INPUT_ENV_PREFIX
from dmno_action.exceptions import ConfigError
from dmno_action.logging import get_logger

__all__ = [
    "ActionInputs",
    "RunnerEnvironment",
    "ActionInputSource",
    "input_env_var",
    "load_inputs",
    "load_runner_environment",
]

logger = get_logger(__name__)

# YAML 1.2 core schema booleans, as accepted by the runner toolkit
TRUE_VALUES: frozenset[str] = frozenset({"true", "True", "TRUE"})
FALSE_VALUES: frozenset[str] = frozenset({"false", "False", "FALSE"})


def input_name(field_name: str) -> str:
    """Map a field name to its action input name (``skip_cache`` -> ``skip-cache``)."""
    return field_name.replace("_", "-")


def input_env_var(name: str) -> str:
    """Return the environment variable the runner uses for an input.

    The runner upper-cases the input name and replaces spaces with
    underscores; hyphens are kept, so ``service-name`` arrives as
    ``INPUT_SERVICE-NAME``.

    Args:
        name: Input name as declared in action.yml.

    Returns:
        Environment variable name.
    """
    return f"{INPUT_ENV_PREFIX}{name.replace(' ', '_').upper()}"


class ActionInputSource(PydanticBaseSettingsSource):
    """Settings source that reads step inputs from ``INPUT_*`` variables.

    Values are trimmed. Empty or missing inputs are left out so the field
    default applies.
    """

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        environ: Mapping[str, str] | None = None,
    ):
        super().__init__(settings_cls)
        env = os.environ if environ is None else environ
        self._inputs: dict[str, Any] = {}
        for field_name in settings_cls.model_fields:
            raw = env.get(input_env_var(input_name(field_name)))
            if raw is None:
                continue
            value = raw.strip()
            if value:
                self._inputs[field_name] = value

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        """Get value for a specific field from the step inputs."""
        if field_name in self._inputs:
            return self._inputs[field_name], field_name, False
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all inputs that were provided."""
        return self._inputs


class ActionInputs(BaseSettings):
    """Step inputs for one run, read once and never mutated.

    Attributes:
        service_name: dmno service to resolve (empty means the root service).
        base_directory: Directory to run ``dmno resolve`` in; relative paths
            are taken from the workspace root.
        phase: Optional dmno phase (for example ``build`` or ``boot``).
        emit_env_vars: Export every resolved value as an environment variable.
        output_vars: Publish the resolved key/value map as the ``dmno`` output.
        skip_regex: Keys matching this pattern are neither exported nor output.
        skip_cache: Pass ``--skip-cache`` to dmno.
        clear_cache: Pass ``--clear-cache`` to dmno.
    """

    model_config = SettingsConfigDict(frozen=True, extra="ignore")

    service_name: str = ""
    base_directory: str = ""
    phase: str = ""
    emit_env_vars: bool = True
    output_vars: bool = False
    skip_regex: str = ""
    skip_cache: bool = False
    clear_cache: bool = False

    @field_validator(
        "emit_env_vars", "output_vars", "skip_cache", "clear_cache", mode="before"
    )
    @classmethod
    def parse_core_schema_bool(cls, v: Any) -> Any:
        """Accept only YAML 1.2 core schema spellings for boolean inputs."""
        if isinstance(v, str):
            if v in TRUE_VALUES:
                return True
            if v in FALSE_VALUES:
                return False
            raise ValueError(
                "Input does not meet YAML 1.2 \"Core Schema\" specification. "
                "Support boolean input list: "
                "`true | True | TRUE | false | False | FALSE`"
            )
        return v

    @field_validator("skip_regex")
    @classmethod
    def check_skip_regex_compiles(cls, v: str) -> str:
        """Reject skip patterns that are not valid regular expressions."""
        if v:
            try:
                re.compile(v)
            except re.error as e:
                raise ValueError(f"Invalid regular expression: {e}") from e
        return v

    @property
    def skip_pattern(self) -> re.Pattern[str] | None:
        """Compiled skip pattern, or None when no pattern is configured."""
        return re.compile(self.skip_regex) if self.skip_regex else None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Read inputs from init kwargs first, then ``INPUT_*`` variables.

        The default env source is left out: it would match unprefixed
        variables such as ``PHASE``.
        """
        return (
            init_settings,
            ActionInputSource(settings_cls),
        )


class RunnerEnvironment(BaseSettings):
    """Runner context the action operates in.

    Read once at startup and passed explicitly to every component that
    needs a path, so nothing else consults ``GITHUB_WORKSPACE`` directly.

    Attributes:
        workspace: Repository checkout (``GITHUB_WORKSPACE``).
        env_file: File command path for exported variables (``GITHUB_ENV``).
        output_file: File command path for step outputs (``GITHUB_OUTPUT``).
        debug: Runner debug logging is enabled (``RUNNER_DEBUG=1``).
        platform: Operating system identifier, as in ``sys.platform``.
        timeout: Optional limit in seconds for each dmno invocation.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    workspace: Path = Field(
        default_factory=Path.cwd, validation_alias="GITHUB_WORKSPACE"
    )
    env_file: Path | None = Field(default=None, validation_alias="GITHUB_ENV")
    output_file: Path | None = Field(default=None, validation_alias="GITHUB_OUTPUT")
    debug: bool = Field(default=False, validation_alias="RUNNER_DEBUG")
    platform: str = Field(
        default_factory=lambda: sys.platform, validation_alias="DMNO_ACTION_PLATFORM"
    )
    timeout: float | None = Field(
        default=None, gt=0, validation_alias="DMNO_ACTION_TIMEOUT"
    )

    @field_validator("debug", mode="before")
    @classmethod
    def debug_only_when_one(cls, v: Any) -> Any:
        """The runner sets ``RUNNER_DEBUG=1``; any other text means off."""
        if isinstance(v, str):
            return v == "1"
        return v

    @field_validator("workspace")
    @classmethod
    def check_workspace_exists(cls, v: Path) -> Path:
        """Warn if the workspace path doesn't exist."""
        if not v.exists():
            logger.warning("workspace_missing", workspace=str(v))
        return v


def _by_alias(
    settings_cls: type[BaseSettings], values: Mapping[str, Any]
) -> dict[str, Any]:
    """Re-key field-name overrides by their environment variable alias."""
    keyed: dict[str, Any] = {}
    for name, value in values.items():
        alias = settings_cls.model_fields[name].validation_alias
        keyed[alias if isinstance(alias, str) else name] = value
    return keyed


def _first_error(e: ValidationError) -> tuple[str, str, Any]:
    first_error = e.errors()[0]
    field = ".".join(str(loc) for loc in first_error["loc"])
    return first_error["msg"], field, first_error.get("input")


def load_inputs(**overrides: Any) -> ActionInputs:
    """Load the step inputs from ``INPUT_*`` environment variables.

    Args:
        **overrides: Field values that take precedence over the inputs.

    Returns:
        Validated ActionInputs.

    Raises:
        ConfigError: If an input has an invalid value.
    """
    try:
        return ActionInputs(**overrides)
    except ValidationError as e:
        msg, field, value = _first_error(e)
        name = input_name(field)
        raise ConfigError(
            message=f"Invalid value for input '{name}': {msg}",
            field=name,
            value=value,
        ) from e


def load_runner_environment(**overrides: Any) -> RunnerEnvironment:
    """Load the runner context from ``GITHUB_*`` and ``RUNNER_*`` variables.

    Args:
        **overrides: Field values that take precedence over the environment.

    Returns:
        RunnerEnvironment instance.

    Raises:
        ConfigError: If a variable has an invalid value.
    """
    try:
        return RunnerEnvironment(**_by_alias(RunnerEnvironment, overrides))
    except ValidationError as e:
        msg, field, value = _first_error(e)
        raise ConfigError(
            message=f"Invalid runner environment: {msg}",
            field=field,
            value=value,
        ) from e
