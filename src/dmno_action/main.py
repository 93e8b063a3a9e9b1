"""CLI entry point for dmno-action.

This module defines the Click-based command the action's composite step
runs. It loads the runner context, configures logging and runs a single
ResolveAction; the exit code mirrors the step status.
"""

from __future__ import annotations

import logging

import click

from dmno_action import __version__
from dmno_action.action import ActionOutcome, ResolveAction
from dmno_action.cli.context import ExitCode, async_command
from dmno_action.config import RunnerEnvironment, load_runner_environment
from dmno_action.exceptions import ConfigError
from dmno_action.host import ActionsHost, format_command
from dmno_action.logging import configure_logging


def _log_level(verbose: int, quiet: bool, runner_debug: bool) -> int | None:
    """Pick the log level.

    Priority: quiet > verbose > runner debug > DMNO_ACTION_LOG_LEVEL.
    """
    if quiet:
        return logging.ERROR
    if verbose > 0:
        return logging.INFO if verbose == 1 else logging.DEBUG
    if runner_debug:
        return logging.DEBUG
    return None


@async_command
async def _resolve(
    environment: RunnerEnvironment, host: ActionsHost
) -> ActionOutcome:
    return await ResolveAction(environment, host).run()


@click.command()
@click.version_option(version=__version__, prog_name="dmno-action")
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v for INFO, -vv for DEBUG).",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    default=False,
    help="Only log errors.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds to wait for each dmno invocation (default: no limit).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: int,
    quiet: bool,
    timeout: float | None,
) -> None:
    """Resolve dmno configuration and publish it to the workflow."""
    overrides = {"timeout": timeout} if timeout is not None else {}
    try:
        environment = load_runner_environment(**overrides)
    except ConfigError as e:
        # Logging isn't configured yet; report straight to the runner
        click.echo(format_command("error", message=e.message))
        ctx.exit(ExitCode.FAILURE)

    configure_logging(level=_log_level(verbose, quiet, environment.debug))

    host = ActionsHost(environment)
    try:
        outcome = _resolve(environment, host)
    except KeyboardInterrupt:
        host.set_failed("Interrupted")
        ctx.exit(ExitCode.INTERRUPTED)

    ctx.exit(ExitCode.SUCCESS if outcome.success else ExitCode.FAILURE)


if __name__ == "__main__":
    cli()
