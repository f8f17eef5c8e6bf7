"""In-memory registry backed by a static index.

The index maps package names to releases::

    ecto:
      "0.2.0":
        requirements:
          postgrex: "~> 0.2.0"
          ex_doc: "0.0.1"
      "0.2.1":
        requirements:
          postgrex: "~> 0.2.1"
        checksum: "sha256:..."

Useful for offline resolution, mirrors exported to disk, and tests.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from lockwright.core.dependency.constraints import is_valid_version
from lockwright.core.dependency.requirements import RawRequirement
from lockwright.exceptions import MalformedMetadata, NotFound
from lockwright.registry.base import RegistryLookup
from lockwright.registry.metadata import parse_release


class InMemoryRegistry(RegistryLookup):
    """Registry lookup over a ``{name: {version: metadata}}`` index.

    The index is parsed eagerly, so malformed metadata is reported when the
    registry is built rather than halfway through a resolution.

    Args:
        index: The package index.
        name: Human-readable registry name.

    Raises:
        MalformedMetadata: If the index has the wrong shape or an invalid
            version.
    """

    def __init__(self, index: dict[str, Any], name: str = "memory") -> None:
        self._name = name
        self._releases: dict[str, dict[str, tuple[list[RawRequirement], str]]] = {}
        if not isinstance(index, dict):
            raise MalformedMetadata("Registry index must be a mapping")
        for package, releases in index.items():
            if not isinstance(releases, dict):
                raise MalformedMetadata(f"{package}: releases must be a mapping")
            parsed: dict[str, tuple[list[RawRequirement], str]] = {}
            for version, data in releases.items():
                version = str(version)
                if not is_valid_version(version):
                    raise MalformedMetadata(f"{package}: invalid version {version!r}")
                parsed[version] = parse_release(data, f"{package} {version}")
            self._releases[str(package)] = parsed

    @classmethod
    def from_file(cls, path: Path | str) -> InMemoryRegistry:
        """Load an index from a JSON or YAML file.

        Files ending in ``.json`` are read as JSON; anything else as YAML.

        Raises:
            MalformedMetadata: If the file cannot be read or parsed.
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise MalformedMetadata(f"Cannot read registry index {path}: {exc}") from exc
        try:
            if path.suffix == ".json":
                data = json.loads(text)
            else:
                data = yaml.safe_load(text)
        except (ValueError, yaml.YAMLError) as exc:
            raise MalformedMetadata(f"Cannot parse registry index {path}: {exc}") from exc
        return cls(data or {}, name=path.name)

    @property
    def registry_name(self) -> str:
        return self._name

    @property
    def packages(self) -> list[str]:
        """Sorted list of package names in the index."""
        return sorted(self._releases)

    def _release(self, name: str, version: str) -> tuple[list[RawRequirement], str]:
        try:
            return self._releases[name][version]
        except KeyError:
            raise NotFound(f"{name} {version} is not in {self._name}") from None

    async def get_versions(self, name: str) -> list[str]:
        if name not in self._releases:
            raise NotFound(f"{name} is not in {self._name}")
        return list(self._releases[name])

    async def get_requirements(self, name: str, version: str) -> list[RawRequirement]:
        return list(self._release(name, version)[0])

    async def get_checksum(self, name: str, version: str) -> str:
        return self._release(name, version)[1]
