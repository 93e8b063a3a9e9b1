from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable, Generator
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

if TYPE_CHECKING:
    from click.testing import CliRunner

    from dmno_action.config import RunnerEnvironment

# Register fixture plugins from tests/fixtures/
pytest_plugins = [
    "tests.fixtures.runners",
]

# Variables the action reads; cleared so the outer CI job can't leak in
_ACTION_ENV_PREFIXES = ("INPUT_", "GITHUB_", "RUNNER_", "DMNO_ACTION_")


@pytest.fixture(autouse=True)
def configure_test_logging() -> Generator[None, None, None]:
    """Configure structlog for the test environment.

    Runs automatically for all tests so log output goes to stderr at
    WARNING level and never mixes with captured workflow commands.
    """
    from dmno_action.logging import configure_logging

    configure_logging(level=logging.WARNING)
    yield


@pytest.fixture(autouse=True)
def clean_env() -> Generator[None, None, None]:
    """Remove runner and action variables for the duration of a test."""
    original_env = os.environ.copy()
    for key in list(os.environ.keys()):
        if key.startswith(_ACTION_ENV_PREFIXES):
            del os.environ[key]
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def write_manifest(tmp_path: Path) -> Callable[[Any], Path]:
    """Factory writing package.json into the test workspace.

    Accepts a dict (serialized as JSON) or raw text.
    """

    def _write(content: Any) -> Path:
        path = tmp_path / "package.json"
        text = content if isinstance(content, str) else json.dumps(content)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def workspace(tmp_path: Path, write_manifest: Callable[[Any], Path]) -> Path:
    """A workspace that passes the dependency check (pnpm declared)."""
    write_manifest({"name": "app", "packageManager": "pnpm@9.1.0"})
    (tmp_path / "node_modules").mkdir()
    return tmp_path


@pytest.fixture
def runner_env(workspace: Path) -> RunnerEnvironment:
    """RunnerEnvironment for the test workspace on Linux, with file commands."""
    from dmno_action.config import load_runner_environment

    env_file = workspace / "github_env"
    output_file = workspace / "github_output"
    env_file.touch()
    output_file.touch()
    return load_runner_environment(
        workspace=workspace,
        env_file=env_file,
        output_file=output_file,
        platform="linux",
    )


@pytest.fixture
def set_inputs(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    """Factory setting step inputs the way the runner does (INPUT_* vars).

    Example:
        >>> def test_inputs(set_inputs):
        ...     set_inputs(**{"service-name": "api", "output-vars": "true"})
    """
    from dmno_action.config import input_env_var

    def _set(**inputs: str) -> None:
        for name, value in inputs.items():
            monkeypatch.setenv(input_env_var(name), value)

    return _set


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
