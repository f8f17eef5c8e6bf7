"""Read-only comparison of a resolution against the lock."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lockwright.core.dependency.resolver import Resolution
    from lockwright.core.lockfile.models import LockEntry


@dataclass(frozen=True)
class ReportEntry:
    """Status of one resolved package.

    Attributes:
        name: Package identity.
        version: Version selected by the resolution.
        source: ``"registry"`` or ``"path"``.
        registry_name: Registry package name (the identity for path sources).
        locked: True if the lock records exactly this version and source.
        locked_version: Version recorded in the lock, ``None`` if absent.
    """

    name: str
    version: str
    source: str
    registry_name: str
    locked: bool
    locked_version: str | None = None

    @property
    def status(self) -> str:
        if self.locked_version is None:
            return "not locked"
        if self.locked:
            return f"locked at {self.locked_version} ({self.registry_name})"
        return f"lock outdated (locked at {self.locked_version})"


def report(
    resolution: Resolution, lock: Mapping[str, LockEntry] | None = None
) -> list[ReportEntry]:
    """Describe every resolved package and whether the lock agrees with it.

    Args:
        resolution: A successful resolution.
        lock: Lock entries keyed by package identity.

    Returns:
        One ``ReportEntry`` per resolved package, sorted by name.
    """
    lock = lock or {}
    entries = []
    for name in sorted(resolution.packages):
        pkg = resolution.packages[name]
        kind = pkg.source.kind
        locked_entry = lock.get(name)
        locked = (
            locked_entry is not None
            and locked_entry.source == kind
            and locked_entry.version == pkg.version
            and (kind != "registry" or locked_entry.registry_name == pkg.registry_name)
        )
        entries.append(
            ReportEntry(
                name=name,
                version=pkg.version,
                source=kind,
                registry_name=pkg.registry_name,
                locked=locked,
                locked_version=None if locked_entry is None else locked_entry.version,
            )
        )
    return entries
