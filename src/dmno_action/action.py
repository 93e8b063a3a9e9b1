"""Resolve configuration with dmno and publish it to the workflow.

A run moves through ``IDLE -> CHECKING -> RESOLVING -> PUBLISHING -> DONE``.
Any error sends it straight to ``FAILED``: the step is marked failed with
the error's message and ``run()`` returns normally. Nothing is retried.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from dmno_action.config import ActionInputs, load_inputs
from dmno_action.constants import (
    DEFAULT_SERVICE_NAME,
    DMNO_TOOL,
    OUTPUT_NAME,
    RESOLVE_OUTPUT_FORMAT,
    UNEXPECTED_ERROR_MESSAGE,
)
from dmno_action.exceptions import (
    DmnoActionError,
    EmptyResolutionError,
    ResolveCommandError,
    SubprocessStderrError,
    ToolUnavailableError,
)
from dmno_action.logging import bind_context, clear_context, get_logger
from dmno_action.models import ResolvedConfig
from dmno_action.runners.command import CommandRunner
from dmno_action.runners.preflight import PreflightChecker

if TYPE_CHECKING:
    from dmno_action.config import RunnerEnvironment
    from dmno_action.host import ActionsHost
    from dmno_action.runners.models import CommandResult

__all__ = [
    "ActionOutcome",
    "ResolveAction",
    "RunState",
    "build_command",
    "build_invocation_arguments",
]

logger = get_logger(__name__)


class RunState(str, Enum):
    """Lifecycle of a single run.

    Attributes:
        IDLE: Not started.
        CHECKING: Running precondition checks.
        RESOLVING: Running dmno and parsing its output.
        PUBLISHING: Writing outputs and environment variables.
        DONE: Finished successfully.
        FAILED: Stopped on an error (terminal).
    """

    IDLE = "idle"
    CHECKING = "checking"
    RESOLVING = "resolving"
    PUBLISHING = "publishing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ActionOutcome:
    """Result of one run.

    Attributes:
        state: Final state, DONE or FAILED.
        exported: Keys exported as environment variables, in output order.
        skipped: Keys left out by the skip pattern or for having no value.
        output: JSON published as the step output, if any.
        error: Failure message when state is FAILED.
    """

    state: RunState
    exported: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()
    output: str | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        """True if the run finished without error."""
        return self.state is RunState.DONE


def build_invocation_arguments(inputs: ActionInputs) -> list[str]:
    """Build the ``dmno resolve`` arguments for the given inputs.

    Order is fixed: service, phase, cache flags, output format, prompt flag.
    Every flag and value is a separate element, so input text is never
    interpreted by a shell.

    Args:
        inputs: Step inputs.

    Returns:
        Argument list, without the executable and subcommand.

    Example:
        >>> build_invocation_arguments(ActionInputs(service_name="api"))
        ['--service', 'api', '--format', 'json-full', '--no-prompt']
    """
    args = ["--service", inputs.service_name or DEFAULT_SERVICE_NAME]
    if inputs.phase:
        args.extend(["--phase", inputs.phase])
    if inputs.skip_cache:
        args.append("--skip-cache")
    if inputs.clear_cache:
        args.append("--clear-cache")
    args.extend(["--format", RESOLVE_OUTPUT_FORMAT])
    args.append("--no-prompt")
    return args


def build_command(package_manager: str, inputs: ActionInputs) -> list[str]:
    """Full ``<pm> exec dmno resolve ...`` command line."""
    return [
        package_manager,
        "exec",
        DMNO_TOOL,
        "resolve",
        *build_invocation_arguments(inputs),
    ]


class ResolveAction:
    """Runs dmno resolve and republishes its result.

    Example:
        environment = load_runner_environment()
        action = ResolveAction(environment, ActionsHost(environment))
        outcome = await action.run()
        sys.exit(0 if outcome.success else 1)
    """

    def __init__(
        self,
        environment: RunnerEnvironment,
        host: ActionsHost,
        *,
        runner: CommandRunner | None = None,
        checker: PreflightChecker | None = None,
    ) -> None:
        """Initialize the action.

        Args:
            environment: Runner context.
            host: Runner facilities for outputs, variables, masks and status.
            runner: Command runner for dmno. Created from the environment
                when omitted.
            checker: Precondition checker. Created from the environment
                and runner when omitted.
        """
        self._environment = environment
        self._host = host
        self._runner = runner or CommandRunner(
            cwd=environment.workspace, timeout=environment.timeout
        )
        self._checker = checker or PreflightChecker(environment, self._runner)
        self._state = RunState.IDLE

    @property
    def state(self) -> RunState:
        """Current run state."""
        return self._state

    def _transition(self, state: RunState) -> None:
        self._state = state
        bind_context(state=state.value)
        logger.debug("state_changed", state=state.value)

    def read_inputs(self) -> ActionInputs:
        """Read the step inputs.

        Raises:
            ConfigError: If an input has an invalid value.
        """
        return load_inputs()

    def working_directory(self, inputs: ActionInputs) -> Path:
        """Directory dmno resolve runs in.

        Relative base directories are taken from the workspace root.
        """
        if not inputs.base_directory:
            return self._environment.workspace
        return self._environment.workspace / Path(inputs.base_directory)

    async def run(self) -> ActionOutcome:
        """Execute the whole run.

        Never raises: failures are reported through the host and returned
        as a FAILED outcome.

        Returns:
            ActionOutcome describing what was published.
        """
        try:
            outcome = await self._execute()
        except DmnoActionError as e:
            outcome = self._fail(e.message)
        except Exception as e:
            logger.exception("unexpected_error")
            outcome = self._fail(str(e) or UNEXPECTED_ERROR_MESSAGE)
        finally:
            clear_context()
        return outcome

    def _fail(self, message: str) -> ActionOutcome:
        self._transition(RunState.FAILED)
        logger.error("run_failed", error=message)
        self._host.set_failed(message)
        return ActionOutcome(state=RunState.FAILED, error=message)

    async def _execute(self) -> ActionOutcome:
        self._transition(RunState.CHECKING)
        if not await self._checker.run_all_checks():
            raise ToolUnavailableError(
                self._checker.tool_failure
                or f"{DMNO_TOOL} is not installed or not available",
            )

        self._transition(RunState.RESOLVING)
        package_manager = self._checker.get_package_manager()
        inputs = self.read_inputs()
        bind_context(service=inputs.service_name or DEFAULT_SERVICE_NAME)

        command = build_command(package_manager, inputs)
        logger.info("resolve_started", package_manager=package_manager)
        result = await self._runner.run(command, cwd=self.working_directory(inputs))
        parsed = self._parse_result(result, command)

        pattern = inputs.skip_pattern
        if pattern is not None:
            resolved = parsed.without_keys_matching(pattern)
        else:
            resolved = parsed
        kept = resolved.nodes
        skipped = [
            key
            for key, node in parsed.nodes.items()
            if key not in kept or node.export_value is None
        ]
        if skipped:
            logger.info("keys_skipped", keys=skipped)

        self._transition(RunState.PUBLISHING)
        output, exported = self._publish(resolved, inputs)

        self._transition(RunState.DONE)
        logger.info(
            "resolve_completed",
            exported=len(exported),
            skipped=len(skipped),
            output=output is not None,
        )
        return ActionOutcome(
            state=RunState.DONE,
            exported=tuple(exported),
            skipped=tuple(skipped),
            output=output,
        )

    def _parse_result(
        self, result: CommandResult, command: list[str]
    ) -> ResolvedConfig:
        # stdout carries unmasked secrets; only its size is logged
        logger.debug(
            "resolve_output_received",
            stdout_bytes=len(result.stdout),
            duration_ms=result.duration_ms,
        )
        stderr = result.stderr.strip()
        if stderr:
            raise SubprocessStderrError(f"{DMNO_TOOL} resolve failed: {stderr}", stderr)
        if not result.success:
            raise ResolveCommandError(
                f"{DMNO_TOOL} resolve exited with code {result.returncode}",
                returncode=result.returncode,
                command=command,
            )
        if not result.stdout.strip():
            raise EmptyResolutionError()

        resolved = ResolvedConfig.from_output(result.stdout)
        if resolved.is_empty():
            raise EmptyResolutionError()
        return resolved

    def _publish(
        self, resolved: ResolvedConfig, inputs: ActionInputs
    ) -> tuple[str | None, list[str]]:
        nodes = resolved.nodes

        # Masks go first so no later write can reveal a sensitive value.
        for node in nodes.values():
            value = node.export_value
            if node.is_sensitive and value is not None:
                self._host.set_secret(value)
                # The step output carries the value as a JSON string
                escaped = json.dumps(value, ensure_ascii=False)[1:-1]
                if escaped != value:
                    self._host.set_secret(escaped)

        output: str | None = None
        if inputs.output_vars:
            output = json.dumps(
                resolved.to_output_mapping(), separators=(",", ":"), ensure_ascii=False
            )
            self._host.set_output(OUTPUT_NAME, output)

        exported: list[str] = []
        if inputs.emit_env_vars:
            for key, node in nodes.items():
                value = node.export_value
                if value is None:
                    continue
                self._host.export_variable(key, value)
                exported.append(key)
        return output, exported
