"""Shared test helpers: the fixture registry index and project builders.

The registry index mirrors a small slice of a real package ecosystem:

- ``ecto`` 0.2.0 requires ``postgrex ~> 0.2.0`` and ``ex_doc ~> 0.0.1``;
  0.2.1 requires ``postgrex ~> 0.2.1`` and ``ex_doc 0.1.0``.
- ``postgrex`` 0.2.0 requires ``ex_doc 0.0.1``; 0.2.1 requires
  ``ex_doc ~> 0.1.0``.
- ``phoenix`` 0.0.1 requires ``postgrex ~> 0.2``.
- ``only_doc`` 0.1.0 optionally requires ``ex_doc >= 0.0.0``.
- ``depend_name`` 0.2.0 requires ``package_name`` under the local name
  ``app_name``.
"""

from __future__ import annotations

import asyncio
import copy
import hashlib
import json
import pathlib
from typing import Any

import yaml

from lockwright.core.dependency import (
    ROOT,
    RawRequirement,
    Requirement,
    Resolution,
    ResolvedPackage,
    Source,
    normalize,
)
from lockwright.registry import RegistryLookup

_BASE_INDEX: dict[str, dict[str, Any]] = {
    "ecto": {
        "0.2.0": {"requirements": {"postgrex": "~> 0.2.0", "ex_doc": "~> 0.0.1"}},
        "0.2.1": {"requirements": {"postgrex": "~> 0.2.1", "ex_doc": "0.1.0"}},
    },
    "postgrex": {
        "0.2.0": {"requirements": {"ex_doc": "0.0.1"}},
        "0.2.1": {"requirements": {"ex_doc": "~> 0.1.0"}},
    },
    "phoenix": {
        "0.0.1": {"requirements": {"postgrex": "~> 0.2"}},
    },
    "only_doc": {
        "0.1.0": {
            "requirements": {"ex_doc": {"requirement": ">= 0.0.0", "optional": True}}
        },
    },
    "ex_doc": {
        "0.0.1": {},
        "0.1.0": {},
    },
    "package_name": {
        "0.1.0": {},
    },
    "depend_name": {
        "0.2.0": {
            "requirements": {
                "package_name": {"requirement": ">= 0.0.0", "app": "app_name"}
            }
        },
    },
}


def release_checksum(name: str, version: str) -> str:
    """Deterministic checksum used for every fixture release."""
    digest = hashlib.sha256(f"{name}-{version}".encode()).hexdigest()
    return f"sha256:{digest}"


def build_index() -> dict[str, dict[str, Any]]:
    """Return a fresh copy of the fixture index with checksums filled in."""
    index = copy.deepcopy(_BASE_INDEX)
    for name, releases in index.items():
        for version, data in releases.items():
            data["checksum"] = release_checksum(name, version)
    return index


def run(coro: Any) -> Any:
    """Drive a coroutine to completion."""
    return asyncio.run(coro)


def root_reqs(*raws: RawRequirement, base_dir: pathlib.Path | None = None) -> list[Requirement]:
    """Normalize declarations as if the root project declared them."""
    return [normalize(raw, ROOT, base_dir) for raw in raws]


def write_manifest(
    directory: pathlib.Path,
    deps: dict[str, Any] | None = None,
    name: str | None = None,
    version: str = "0.1.0",
) -> pathlib.Path:
    """Write a ``lockwright.yaml`` into *directory* and return the directory."""
    directory.mkdir(parents=True, exist_ok=True)
    data: dict[str, Any] = {"name": name or directory.name, "version": version}
    if deps is not None:
        data["deps"] = deps
    (directory / "lockwright.yaml").write_text(yaml.safe_dump(data, sort_keys=False))
    return directory


class RecordingRegistry(RegistryLookup):
    """Registry wrapper that records every lookup it serves."""

    def __init__(self, inner: RegistryLookup) -> None:
        self.inner = inner
        self.version_calls: list[str] = []
        self.requirement_calls: list[tuple[str, str]] = []

    @property
    def registry_name(self) -> str:
        return self.inner.registry_name

    async def get_versions(self, name: str) -> list[str]:
        self.version_calls.append(name)
        return await self.inner.get_versions(name)

    async def get_requirements(self, name: str, version: str) -> list[RawRequirement]:
        self.requirement_calls.append((name, version))
        return await self.inner.get_requirements(name, version)

    async def get_checksum(self, name: str, version: str) -> str:
        return await self.inner.get_checksum(name, version)

    @property
    def fetched(self) -> set[str]:
        """Package names whose versions or releases were looked up."""
        return set(self.version_calls) | {name for name, _ in self.requirement_calls}


def registry_package(name: str, version: str, registry_name: str | None = None) -> ResolvedPackage:
    """A resolved registry package carrying the fixture checksum."""
    return ResolvedPackage(
        name=name,
        version=version,
        source=Source.registry(),
        registry_name=registry_name or name,
        checksum=release_checksum(registry_name or name, version),
    )


def path_package(name: str, version: str, location: pathlib.Path) -> ResolvedPackage:
    """A resolved path package at *location*."""
    return ResolvedPackage(
        name=name, version=version, source=Source.path(location), registry_name=name
    )


def make_resolution(*packages: ResolvedPackage) -> Resolution:
    """Build a ``Resolution`` directly from resolved packages."""
    return Resolution({pkg.name: pkg for pkg in packages})


def read_lock(project_dir: pathlib.Path) -> dict[str, Any]:
    """Load the ``packages`` table of a project's lockfile."""
    data = json.loads((project_dir / "lockwright.lock").read_text())
    return data["packages"]
