"""Project manifest (``lockwright.yaml``) reader.

The same format describes the root project and every path dependency::

    name: my_app
    version: 0.1.0
    deps:
      ecto: "0.2.0"
      ex_doc:
        requirement: "~> 0.1.0"
        override: true
      local_lib:
        path: ../local_lib
      app_name:
        requirement: ">= 0.0.0"
        package: package_name

``deps`` may also be a list of mappings carrying a ``name`` key. A bare
string value is shorthand for ``{requirement: <string>}``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from lockwright.core.dependency.constraints import is_valid_version
from lockwright.core.dependency.requirements import (
    ROOT,
    RawRequirement,
    Requirement,
    normalize,
)
from lockwright.exceptions import InvalidManifest, PathNotFound

logger = logging.getLogger(__name__)

MANIFEST_NAME = "lockwright.yaml"

_DEP_KEYS = {"name", "requirement", "path", "package", "optional", "override"}


@dataclass(frozen=True)
class Manifest:
    """A parsed project manifest.

    Attributes:
        name: Project name.
        version: Project version (``"0.0.0"`` when not declared).
        deps: Dependency declarations in declared order.
        path: The manifest file the data was read from.
    """

    name: str
    version: str = "0.0.0"
    deps: tuple[RawRequirement, ...] = ()
    path: Path = field(default_factory=Path)

    @property
    def directory(self) -> Path:
        """Directory that relative dependency paths are resolved against."""
        return self.path.parent

    def requirements(self, requestor: str = ROOT) -> list[Requirement]:
        """Normalize every declaration with *requestor* as the declaring package."""
        return [normalize(raw, requestor, self.directory) for raw in self.deps]


def _manifest_file(path: Path) -> Path:
    return path / MANIFEST_NAME if path.is_dir() else path


def _scalar(value: Any, what: str, name: str, source: Path) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise InvalidManifest(f"{source}: dependency {name!r} {what} must be a string")
    return str(value)


def _flag(decl: dict, key: str, name: str, source: Path) -> bool:
    value = decl.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise InvalidManifest(
            f"{source}: dependency {name!r} {key} must be true or false, got {value!r}"
        )
    return value


def _parse_dep(name: str, decl: Any, source: Path) -> RawRequirement:
    if decl is None or (isinstance(decl, (str, int, float)) and not isinstance(decl, bool)):
        return RawRequirement(name=name, requirement=_scalar(decl, "requirement", name, source))
    if not isinstance(decl, dict):
        raise InvalidManifest(f"{source}: dependency {name!r} must be a string or mapping")
    unknown = set(decl) - _DEP_KEYS
    if unknown:
        raise InvalidManifest(
            f"{source}: dependency {name!r} has unknown keys: {', '.join(sorted(unknown))}"
        )
    return RawRequirement(
        name=name,
        requirement=_scalar(decl.get("requirement"), "requirement", name, source),
        path=_scalar(decl.get("path"), "path", name, source),
        package=_scalar(decl.get("package"), "package", name, source),
        optional=_flag(decl, "optional", name, source),
        override=_flag(decl, "override", name, source),
    )


def _parse_deps(data: Any, source: Path) -> tuple[RawRequirement, ...]:
    if data is None:
        return ()
    if isinstance(data, dict):
        return tuple(_parse_dep(str(name), decl, source) for name, decl in data.items())
    if isinstance(data, list):
        deps = []
        for item in data:
            if not isinstance(item, dict) or "name" not in item:
                raise InvalidManifest(f"{source}: list dependencies need a 'name' key")
            deps.append(_parse_dep(str(item["name"]), item, source))
        return tuple(deps)
    raise InvalidManifest(f"{source}: 'deps' must be a mapping or a list")


def parse_manifest(text: str, source: Path) -> Manifest:
    """Parse manifest YAML text.

    Args:
        text: YAML document.
        source: File the text came from; used for relative paths and
            error messages.

    Raises:
        InvalidManifest: If the YAML is malformed or has the wrong shape.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise InvalidManifest(f"{source}: invalid YAML: {exc}") from exc

    if not isinstance(data, dict):
        raise InvalidManifest(f"{source}: manifest must be a mapping")

    name = data.get("name") or source.parent.name
    version = str(data.get("version", "0.0.0"))
    if not is_valid_version(version):
        raise InvalidManifest(f"{source}: invalid version {version!r}")

    return Manifest(
        name=str(name),
        version=version,
        deps=_parse_deps(data.get("deps"), source),
        path=source,
    )


def read_manifest(path: Path | str) -> Manifest:
    """Read the manifest of a project or path dependency.

    Args:
        path: A manifest file, or a directory containing ``lockwright.yaml``.

    Returns:
        The parsed ``Manifest``.

    Raises:
        PathNotFound: If the path or its manifest does not exist.
        InvalidManifest: If the manifest cannot be parsed.
    """
    path = Path(path)
    if not path.exists():
        raise PathNotFound(f"Path does not exist: {path}")
    manifest_file = _manifest_file(path)
    if not manifest_file.is_file():
        raise PathNotFound(f"No {MANIFEST_NAME} found in {path}")
    try:
        text = manifest_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InvalidManifest(f"Cannot read {manifest_file}: {exc}") from exc
    logger.debug("Read manifest %s", manifest_file)
    return parse_manifest(text, manifest_file)
