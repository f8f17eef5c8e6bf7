"""Lockfile core class --- entry management and serialization.

The ``Lockfile`` class is the central data structure representing a
``lockwright.lock`` file. It provides:

- **Entry management:** add, get, remove, and list locked packages.
- **Serialization:** deterministic ``to_dict``, ``to_json``, and an atomic
  ``write``.

Determinism guarantee: ``to_json()`` produces byte-identical output for
equal content --- entries are sorted by name, all keys are sorted, and no
timestamps are recorded. Re-resolving an unchanged project therefore leaves
the file untouched.

References
----------
.. [npm-lock] npm documentation. "package-lock.json." File format
   guaranteeing deterministic installs across environments.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from lockwright.core.lockfile.models import LockEntry

logger = logging.getLogger(__name__)


class Lockfile:
    """Persisted mapping of package identity to ``LockEntry``.

    Example::

        lf = Lockfile()
        lf.add(LockEntry(name="ecto", version="0.2.0", registry_name="ecto"))
        lf.write(Path("lockwright.lock"))
    """

    LOCKFILE_VERSION: str = "1.0"

    def __init__(self) -> None:
        self._entries: dict[str, LockEntry] = {}

    # -- Entry management ---------------------------------------------------

    def add(self, entry: LockEntry) -> None:
        """Add a locked entry, replacing any entry with the same name."""
        self._entries[entry.name] = entry

    def get(self, name: str) -> LockEntry | None:
        """Retrieve a locked entry by package identity."""
        return self._entries.get(name)

    def remove(self, name: str) -> None:
        self._entries.pop(name, None)

    @property
    def packages(self) -> Mapping[str, LockEntry]:
        """Read-only view of all entries keyed by package identity."""
        return dict(self._entries)

    @property
    def names(self) -> list[str]:
        """Sorted list of all locked package identities."""
        return sorted(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    # -- Serialization ------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize the lockfile to a dict matching the schema.

        Only the fields relevant to each source kind are emitted.
        """
        packages: dict[str, Any] = {}
        for name in sorted(self._entries):
            entry = self._entries[name]
            item: dict[str, Any] = {"source": entry.source, "version": entry.version}
            if entry.registry_name:
                item["registry_name"] = entry.registry_name
            if entry.checksum:
                item["checksum"] = entry.checksum
            if entry.path:
                item["path"] = entry.path
            packages[name] = item

        return {
            "lockfile_version": self.LOCKFILE_VERSION,
            "generated_by": "lockwright",
            "packages": packages,
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to a deterministic JSON string ending in a newline."""
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True) + "\n"

    def write(self, path: Path) -> None:
        """Write the lockfile to disk atomically.

        The content goes to a temporary file in the target directory which
        then replaces *path* in one step, so readers see either the old
        lockfile or the new one, never a partial write. Parent directories
        are created if needed.

        Args:
            path: Filesystem path to write (e.g., Path("lockwright.lock")).
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(self.to_json())
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %d lock entries to %s", len(self._entries), path)
