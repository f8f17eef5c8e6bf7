"""Shared fixtures for lockwright tests."""

from __future__ import annotations

import json
import pathlib
from typing import Any

import pytest

from lockwright.registry import InMemoryRegistry
from tests.helpers import build_index, write_manifest


@pytest.fixture
def index() -> dict[str, dict[str, Any]]:
    """The fixture registry index."""
    return build_index()


@pytest.fixture
def registry(index: dict[str, dict[str, Any]]) -> InMemoryRegistry:
    """An in-memory registry over the fixture index."""
    return InMemoryRegistry(index, name="fixture")


@pytest.fixture
def registry_file(tmp_path: pathlib.Path, index: dict[str, dict[str, Any]]) -> pathlib.Path:
    """The fixture index written to a JSON file."""
    path = tmp_path / "registry.json"
    path.write_text(json.dumps(index))
    return path


@pytest.fixture
def project_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """An empty project directory."""
    path = tmp_path / "my_app"
    path.mkdir()
    return path


@pytest.fixture
def ex_doc_path(project_dir: pathlib.Path) -> pathlib.Path:
    """A path-sourced ex_doc checkout at ``<project>/deps/ex_doc``."""
    return write_manifest(project_dir / "deps" / "ex_doc", {}, name="ex_doc", version="0.1.0")
