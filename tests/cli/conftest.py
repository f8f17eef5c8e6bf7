"""Shared fixtures for CLI tests.

Every command runs against the fixture registry written to disk and a
project directory whose manifest each test writes itself.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest
from click.testing import CliRunner, Result

from lockwright.cli.main import cli
from tests.helpers import write_manifest

Invoke = Callable[..., Result]


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def invoke(runner: CliRunner, project_dir: Path, registry_file: Path) -> Invoke:
    """Run ``lockwright <command>`` against the fixture project and registry."""

    def _invoke(command: str, *args: str) -> Result:
        return runner.invoke(
            cli,
            [command, *args, "--project", str(project_dir), "--registry-file", str(registry_file)],
            env={"LOCKWRIGHT_REGISTRY_FILE": None, "LOCKWRIGHT_REGISTRY_URL": None},
        )

    return _invoke


@pytest.fixture
def manifest(project_dir: Path) -> Callable[[dict[str, Any]], Path]:
    """Write the project manifest with the given deps."""

    def _write(deps: dict[str, Any]) -> Path:
        return write_manifest(project_dir, deps, name="my_app")

    return _write

