"""Requirement records and declaration normalization.

A dependency may be declared by the root project manifest, by a path
dependency's manifest, or by a registry release. Each origin produces a
``RawRequirement``; ``normalize`` turns it into the canonical
``Requirement`` record the override engine and resolver work with.

Package identity is the declared local name. The registry name is the
"published as" name when the declaration gives one (``package:`` in a
manifest, ``app`` in registry metadata), otherwise the local name.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from lockwright.core.dependency.constraints import VersionConstraint
from lockwright.exceptions import InvalidDeclaration

# Requestor used for requirements declared by the root project.
ROOT = "root"

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_\-.]*$")

REGISTRY = "registry"
PATH = "path"


# ---------------------------------------------------------------------------
# Source: where a package comes from
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Source:
    """Where a requirement is fetched from.

    Attributes:
        kind: ``"registry"`` or ``"path"``.
        location: Filesystem location for path sources, ``""`` otherwise.
    """

    kind: str = REGISTRY
    location: str = ""

    @classmethod
    def registry(cls) -> Source:
        return cls(REGISTRY, "")

    @classmethod
    def path(cls, location: str | Path) -> Source:
        return cls(PATH, Path(os.path.normpath(location)).as_posix())

    @property
    def is_path(self) -> bool:
        return self.kind == PATH

    def __str__(self) -> str:
        if self.is_path:
            return f"path {self.location}"
        return self.kind


# ---------------------------------------------------------------------------
# RawRequirement & Requirement
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RawRequirement:
    """A dependency declaration exactly as an origin wrote it.

    Attributes:
        name: Local dependency name (becomes the package identity).
        requirement: Version constraint expression, or None.
        path: Filesystem path for path dependencies, or None.
        package: Name the package is published under, if it differs.
        optional: Whether the dependency is only needed when something else
            requires it.
        override: Whether this declaration overrides every other requirement
            on the same package.
    """

    name: str
    requirement: str | None = None
    path: str | None = None
    package: str | None = None
    optional: bool = False
    override: bool = False


@dataclass(frozen=True)
class Requirement:
    """A canonical constraint on one package, tagged with its origin.

    Requirements are never mutated. The resolver merges them by package
    identity; the constraint of the merged set is the intersection of the
    individual constraints.

    Attributes:
        requestor: Identity of the declaring package, or ``ROOT``.
        package: Package identity (local alias).
        registry_name: Name used to query the registry.
        constraint: Version constraint on the package.
        source: Registry or path source.
        optional: True if this edge alone does not pull the package in.
        override: True if this requirement overrides all others.
    """

    requestor: str
    package: str
    registry_name: str
    constraint: VersionConstraint
    source: Source = Source()
    optional: bool = False
    override: bool = False

    @property
    def is_path(self) -> bool:
        return self.source.is_path

    def describe(self) -> str:
        """Short human-readable form, e.g. ``"~> 0.1.0 (override)"``."""
        text = str(self.source) if self.is_path else str(self.constraint)
        flags = [f for f, on in (("override", self.override), ("optional", self.optional)) if on]
        if self.registry_name != self.package:
            flags.append(f"package: {self.registry_name}")
        if flags:
            text += f" ({', '.join(flags)})"
        return text


def normalize(
    raw: RawRequirement,
    requestor: str,
    base_dir: Path | None = None,
) -> Requirement:
    """Normalize a raw declaration into a ``Requirement``.

    Args:
        raw: The declaration to normalize.
        requestor: Identity of the declaring package, or ``ROOT``.
        base_dir: Directory relative paths are resolved against (the
            declaring manifest's directory). Defaults to the current
            directory.

    Returns:
        The canonical ``Requirement``.

    Raises:
        InvalidDeclaration: If the name or constraint is malformed, an
            override names no resolvable source, or a path dependency also
            names a registry package.
    """
    name = (raw.name or "").strip()
    if not _NAME_RE.match(name):
        raise InvalidDeclaration(
            f"Invalid dependency name {raw.name!r} declared by {requestor!r}"
        )

    if raw.path is not None:
        if raw.package:
            raise InvalidDeclaration(
                f"Dependency {name!r} declared by {requestor!r} sets both a "
                f"path and a registry package name ({raw.package!r})"
            )
        location = Path(raw.path)
        if not location.is_absolute() and base_dir is not None:
            location = base_dir / location
        source = Source.path(location)
    else:
        if raw.override and raw.requirement is None:
            raise InvalidDeclaration(
                f"Override for {name!r} declared by {requestor!r} names no "
                "version requirement and no path"
            )
        source = Source.registry()

    try:
        constraint = VersionConstraint(raw.requirement or "*")
    except ValueError as exc:
        raise InvalidDeclaration(
            f"Dependency {name!r} declared by {requestor!r}: {exc}"
        ) from exc

    registry_name = (raw.package or name).strip()
    if not _NAME_RE.match(registry_name):
        raise InvalidDeclaration(
            f"Invalid package name {raw.package!r} for dependency {name!r}"
        )

    return Requirement(
        requestor=requestor,
        package=name,
        registry_name=registry_name,
        constraint=constraint,
        source=source,
        optional=bool(raw.optional),
        override=bool(raw.override),
    )
