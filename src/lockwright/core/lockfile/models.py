"""Lockfile data models.

Defines the entry type stored in ``lockwright.lock``. These are pure data
holders with no business logic, so they can be imported anywhere without
circular-dependency concerns.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Checksum format: "sha256:<64-hex-characters>"
# ---------------------------------------------------------------------------

_CHECKSUM_RE = re.compile(r"^sha256:[0-9a-f]{64}$")

SOURCE_KINDS = ("registry", "path", "git")


# ---------------------------------------------------------------------------
# LockEntry: A single entry in the lockfile
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LockEntry:
    """The locked state of one package.

    Attributes:
        name: Package identity.
        version: Resolved version (or ref, for git sources).
        source: ``"registry"``, ``"path"`` or ``"git"``.
        registry_name: Registry package name, for registry sources.
        checksum: Release checksum in "sha256:<hex>" format, for registry
            sources. Empty when the registry does not publish one.
        path: Location relative to the lockfile directory, for path sources.
    """

    name: str
    version: str
    source: str = "registry"
    registry_name: str = ""
    checksum: str = ""
    path: str = ""

    @property
    def constrains_resolution(self) -> bool:
        """Only registry entries bias future resolutions."""
        return self.source == "registry"


_BARE_HEX_RE = re.compile(r"^[0-9a-fA-F]{64}$")


def normalize_checksum(checksum: str) -> str:
    """Bring a registry-published checksum into "sha256:<hex>" form.

    Registries commonly publish a bare hex digest; those gain the algorithm
    prefix and are lowercased. Anything else is returned unchanged and left
    for ``Lockfile.validate`` to report.
    """
    checksum = checksum.strip()
    if _BARE_HEX_RE.match(checksum):
        return f"sha256:{checksum.lower()}"
    return checksum
