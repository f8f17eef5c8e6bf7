"""Lockfile operations --- deserialization, validation, and diffing.

This module extends the ``Lockfile`` class (defined in ``lockfile.py``) with
classmethods and instance methods for:

- **Deserialization:** ``from_dict``, ``from_json``, ``read`` (disk).
- **Validation:** internal consistency checks (sources, versions, checksums).
- **Diffing:** structured comparison of two lockfiles.

These are attached to the ``Lockfile`` class at import time (in
``__init__.py``) to keep each source file focused while presenting a single
unified API to callers.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from lockwright.core.dependency.constraints import is_valid_version
from lockwright.core.lockfile.models import SOURCE_KINDS, LockEntry, _CHECKSUM_RE
from lockwright.exceptions import LockfileError


def _from_dict(cls: type, data: dict[str, Any]) -> Any:
    """Deserialize a lockfile from a dict (parsed JSON).

    Accepts the dict format produced by ``to_dict()``. Fields not present in
    an entry use default values.

    Args:
        data: Dictionary matching the lockfile schema.

    Returns:
        A new ``Lockfile`` instance populated from the dict.

    Raises:
        LockfileError: If the document does not have the lockfile shape.
    """
    if not isinstance(data, dict):
        raise LockfileError("Lockfile must be a JSON object")
    packages = data.get("packages", {})
    if not isinstance(packages, dict):
        raise LockfileError("Lockfile 'packages' must be an object")

    lf = cls()
    for name, entry in packages.items():
        if not isinstance(entry, dict):
            raise LockfileError(f"Lock entry for {name!r} must be an object")
        lf.add(
            LockEntry(
                name=name,
                version=str(entry.get("version", "")),
                source=str(entry.get("source", "registry")),
                registry_name=str(entry.get("registry_name", "")),
                checksum=str(entry.get("checksum", "")),
                path=str(entry.get("path", "")),
            )
        )
    return lf


def _from_json(cls: type, json_str: str) -> Any:
    """Deserialize from a JSON string.

    Raises:
        LockfileError: If the string is not valid JSON or not a lockfile.
    """
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as exc:
        raise LockfileError(f"Lockfile is not valid JSON: {exc}") from exc
    return cls.from_dict(data)


def _read(cls: type, path: Path) -> Any:
    """Read a lockfile from disk.

    Args:
        path: Filesystem path to the lockfile.

    Returns:
        A new ``Lockfile`` instance.

    Raises:
        FileNotFoundError: If the file does not exist.
        LockfileError: If the file cannot be read or parsed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except (OSError, UnicodeDecodeError) as exc:
        raise LockfileError(f"Cannot read {path}: {exc}") from exc
    try:
        return cls.from_json(text)
    except LockfileError as exc:
        raise LockfileError(f"{path}: {exc}") from exc


def _validate(self: Any) -> list[str]:
    """Validate the lockfile for internal consistency.

    Performs the following checks:

    1. **Known source:** every entry's source is registry, path or git.
    2. **Version:** every entry has a version; registry and path versions
       must be valid semantic versions.
    3. **Source fields:** registry entries carry a registry name, path
       entries carry a path.
    4. **Checksum format:** every checksum must match the pattern
       ``sha256:<64-hex-chars>``.

    Returns:
        List of validation error messages. Empty means the lockfile is
        valid.
    """
    errors: list[str] = []

    for name in sorted(self._entries):
        entry = self._entries[name]
        if entry.source not in SOURCE_KINDS:
            errors.append(f"Package {name!r} has unknown source {entry.source!r}")
            continue

        if not entry.version:
            errors.append(f"Package {name!r} has empty version string")
        elif entry.source != "git" and not is_valid_version(entry.version):
            errors.append(f"Package {name!r} has invalid version {entry.version!r}")

        if entry.source == "registry" and not entry.registry_name:
            errors.append(f"Registry package {name!r} has no registry name")
        if entry.source == "path" and not entry.path:
            errors.append(f"Path package {name!r} has no path")

        if entry.checksum and not _CHECKSUM_RE.match(entry.checksum):
            errors.append(
                f"Package {name!r} has invalid checksum format: {entry.checksum!r}"
            )

    return errors


def _diff(self: Any, other: Any) -> dict[str, Any]:
    """Compare two lockfiles and return differences.

    - **added**: Packages present in ``other`` but not in ``self``.
    - **removed**: Packages present in ``self`` but not in ``other``.
    - **changed**: Packages present in both with a different version,
      source, registry name or checksum.

    Args:
        other: The lockfile to compare against (typically the newer one).

    Returns:
        Dict with keys 'added', 'removed', 'changed'.
    """
    self_names = set(self._entries)
    other_names = set(other._entries)

    changes: list[dict[str, Any]] = []
    for name in sorted(self_names & other_names):
        old = self._entries[name]
        new = other._entries[name]
        for attr in ("version", "source", "registry_name", "checksum"):
            if getattr(old, attr) != getattr(new, attr):
                changes.append({
                    "name": name,
                    "field": attr,
                    "old": getattr(old, attr),
                    "new": getattr(new, attr),
                })

    return {
        "added": sorted(other_names - self_names),
        "removed": sorted(self_names - other_names),
        "changed": changes,
    }
