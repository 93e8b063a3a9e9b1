"""Shared test fixtures for the dmno-action test suite.

Runner Mocks (from tests/fixtures/runners.py)
----------------------------------------------

Fixtures:
    command_result: Factory for CommandResult instances.
        Defaults to a successful, empty run.

    mock_command_runner: Mock CommandRunner whose async run() answers the
        ``--version`` probe successfully and returns a configurable
        result for ``dmno resolve``.

Example:
    >>> @pytest.mark.asyncio
    ... async def test_resolve(mock_command_runner, command_result):
    ...     mock_command_runner.resolve_result = command_result(
    ...         stdout='{"configNodes": {}}'
    ...     )
"""

from __future__ import annotations

from tests.fixtures.runners import command_result, mock_command_runner

__all__ = [
    "command_result",
    "mock_command_runner",
]
