"""Lockfile factory --- constructing lockfiles from resolution results.

The ``from_resolution`` function constructs a ``Lockfile`` directly from a
``Resolution`` produced by the resolver. This is the primary entry point in
the normal workflow::

    resolution = await Resolver(registry, lock=store.read().packages).resolve(roots)
    lockfile = Lockfile.from_resolution(resolution, base_dir=project_dir)
    lockfile.write(project_dir / "lockwright.lock")
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from lockwright.core.lockfile.models import LockEntry, normalize_checksum


def _relative_location(location: str, base_dir: Path | None) -> str:
    if base_dir is None:
        return location
    try:
        rel = os.path.relpath(location, base_dir)
    except ValueError:
        # Different drive on Windows; keep the absolute location.
        return location
    return Path(rel).as_posix()


def _from_resolution(
    cls: type,
    resolution: Any,
    base_dir: Path | None = None,
) -> Any:
    """Create a lockfile from a resolver ``Resolution``.

    Registry packages are recorded with their registry name and checksum.
    Path packages are recorded with their manifest version and a path
    relative to *base_dir* (the lockfile directory) when one is given.

    Args:
        resolution: A ``Resolution`` from ``lockwright.core.dependency``.
        base_dir: Directory that recorded paths are made relative to.

    Returns:
        A new ``Lockfile`` populated from the resolution.
    """
    lf = cls()

    for name, pkg in resolution.packages.items():
        if pkg.source.is_path:
            entry = LockEntry(
                name=name,
                version=pkg.version,
                source="path",
                path=_relative_location(pkg.source.location, base_dir),
            )
        else:
            entry = LockEntry(
                name=name,
                version=pkg.version,
                source="registry",
                registry_name=pkg.registry_name,
                checksum=normalize_checksum(pkg.checksum),
            )
        lf.add(entry)

    return lf
