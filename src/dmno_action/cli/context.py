"""CLI exit codes and the click/asyncio bridge."""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Callable
from enum import IntEnum
from typing import Any, TypeVar

__all__ = [
    "ExitCode",
    "async_command",
]


class ExitCode(IntEnum):
    """Process exit codes.

    The runner marks a step failed on any non-zero exit, so the action
    only distinguishes success from failure:
    - 0 for success
    - 1 for failure
    - 130 for keyboard interrupt (128 + SIGINT=2)
    """

    SUCCESS = 0
    FAILURE = 1
    INTERRUPTED = 130


F = TypeVar("F", bound=Callable[..., Any])


def async_command(f: F) -> F:
    """Decorator to run async Click commands with asyncio.run().

    Args:
        f: Async function to wrap.

    Returns:
        Wrapped synchronous function suitable for Click commands.
    """

    @functools.wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return asyncio.run(f(*args, **kwargs))

    return wrapper  # type: ignore[return-value]
