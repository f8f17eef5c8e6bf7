"""Project lockfile --- reproducible resolutions.

This package implements the ``lockwright.lock`` format. The lockfile
captures the resolved state of a project: every package at its selected
version, with its source, registry name and release checksum.

The package is split into focused submodules:

- ``models``: The ``LockEntry`` data class and checksum helpers.
- ``lockfile``: The ``Lockfile`` class with entry management and deterministic
  serialization.
- ``operations``: Deserialization (``from_dict``, ``from_json``, ``read``),
  validation, and diffing.
- ``factory``: The ``from_resolution`` factory method.
- ``store``: ``LockStore``, the read/merge/write cycle for one project.

All public names are re-exported here so callers can write
``from lockwright.core.lockfile import Lockfile``.
"""

from lockwright.core.lockfile.models import (
    LockEntry,
    _CHECKSUM_RE,
    normalize_checksum,
)

from lockwright.core.lockfile.lockfile import Lockfile

# Attach operations to Lockfile as methods/classmethods
from lockwright.core.lockfile import operations as _ops
from lockwright.core.lockfile import factory as _factory

Lockfile.from_dict = classmethod(_ops._from_dict)
Lockfile.from_json = classmethod(_ops._from_json)
Lockfile.read = classmethod(_ops._read)
Lockfile.validate = _ops._validate
Lockfile.diff = _ops._diff
Lockfile.from_resolution = classmethod(_factory._from_resolution)

from lockwright.core.lockfile.store import LOCKFILE_NAME, LockStore  # noqa: E402

__all__ = [
    "LOCKFILE_NAME",
    "LockEntry",
    "LockStore",
    "Lockfile",
    "normalize_checksum",
    "_CHECKSUM_RE",
]
