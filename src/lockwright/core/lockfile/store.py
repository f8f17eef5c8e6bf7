"""Lock store --- the on-disk lockfile of one project.

``LockStore`` wraps the ``Lockfile`` of a project with the read/merge/write
cycle used after every resolution:

- a missing lockfile reads as empty;
- entries for packages absent from a new resolution are kept unless the
  caller asks to prune them, so a package that comes back later is tried at
  its previously locked version first;
- the file is rewritten only when its content actually changes.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from lockwright.core.lockfile.lockfile import Lockfile
from lockwright.exceptions import LockfileError

logger = logging.getLogger(__name__)

LOCKFILE_NAME = "lockwright.lock"


def _check(lockfile: Lockfile, path: Path) -> None:
    errors = lockfile.validate()
    if errors:
        raise LockfileError(f"{path}: " + "; ".join(errors))


class LockStore:
    """Read and persist the lockfile at *path*."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    @property
    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> Lockfile:
        """Return the stored lockfile, or an empty one if there is none.

        Raises:
            LockfileError: If the file exists but cannot be parsed, or its
                entries fail ``Lockfile.validate``.
        """
        if not self.exists:
            logger.debug("No lockfile at %s", self.path)
            return Lockfile()
        lockfile = Lockfile.read(self.path)
        _check(lockfile, self.path)
        return lockfile

    def merge(self, resolution: Any, prune: bool = False) -> Lockfile:
        """Build the lockfile that *resolution* would leave on disk."""
        current = self.read()
        updated = Lockfile.from_resolution(resolution, base_dir=self.path.parent)
        if not prune:
            for name, entry in current.packages.items():
                if name not in updated:
                    updated.add(entry)
        return updated

    def write(self, resolution: Any, prune: bool = False) -> bool:
        """Persist *resolution*, returning whether the file changed.

        Args:
            resolution: A successful ``Resolution``.
            prune: Drop entries for packages the resolution no longer needs.

        Returns:
            True if the lockfile was (re)written, False if it was already
            up to date.

        Raises:
            LockfileError: If the new entries would not pass validation.
        """
        updated = self.merge(resolution, prune=prune)
        _check(updated, self.path)
        if self.exists:
            if self.path.read_text(encoding="utf-8") == updated.to_json():
                logger.debug("Lockfile %s is up to date", self.path)
                return False
        updated.write(self.path)
        logger.info("Updated %s (%d packages)", self.path, len(updated))
        return True
