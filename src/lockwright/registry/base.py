"""Registry lookup interface and the per-run lookup cache.

Defines the ``RegistryLookup`` abstract base class that every registry
adapter (in-memory index, HTTP) implements. For resolution purposes a
registry is a pure function from a package name to its releases; real
fetching lives in the adapters.

Failure modes surfaced to the resolver:

- ``NotFound`` -- the package or release definitely does not exist.
- ``NetworkError`` -- the registry could not be reached (retryable by the
  caller, never by the resolver).
- ``MalformedMetadata`` -- the registry answered with garbage.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lockwright.core.dependency.requirements import RawRequirement

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Abstract lookup
# ---------------------------------------------------------------------------


class RegistryLookup(ABC):
    """Abstract base class for package registries.

    Subclasses must implement ``get_versions`` and ``get_requirements``.
    Both must be idempotent and free of side effects visible to the
    resolver: repeated calls for the same arguments return equal values.
    """

    @property
    @abstractmethod
    def registry_name(self) -> str:
        """Human-readable name of this registry."""

    @abstractmethod
    async def get_versions(self, name: str) -> list[str]:
        """Return every published version of a package.

        Args:
            name: Registry package name.

        Returns:
            Version strings in any order.

        Raises:
            NotFound: If the registry has no package called *name*.
        """

    @abstractmethod
    async def get_requirements(self, name: str, version: str) -> list[RawRequirement]:
        """Return the dependency declarations of one release.

        Args:
            name: Registry package name.
            version: Release version.

        Returns:
            The release's declarations, in declared order.

        Raises:
            NotFound: If the release does not exist.
        """

    async def get_checksum(self, name: str, version: str) -> str:
        """Return the integrity checksum of a release, ``""`` if unknown."""
        return ""


# ---------------------------------------------------------------------------
# Per-run cache
# ---------------------------------------------------------------------------


class CachedLookup(RegistryLookup):
    """Memoizing wrapper used for the duration of one resolution.

    Backtracking revisits the same releases many times; the cache makes
    those repeat visits free. Concurrent requests for the same key share
    one in-flight task. Errors are not cached.
    """

    def __init__(self, inner: RegistryLookup) -> None:
        self._inner = inner
        self._versions: dict[str, asyncio.Task[list[str]]] = {}
        self._requirements: dict[tuple[str, str], asyncio.Task[list[RawRequirement]]] = {}
        self._checksums: dict[tuple[str, str], str] = {}

    @property
    def registry_name(self) -> str:
        return self._inner.registry_name

    async def _shared(self, table: dict, key: object, factory) -> object:
        task = table.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            table[key] = task
        try:
            return await asyncio.shield(task)
        except Exception:
            table.pop(key, None)
            raise

    async def get_versions(self, name: str) -> list[str]:
        versions = await self._shared(
            self._versions, name, lambda: self._inner.get_versions(name)
        )
        return list(versions)  # type: ignore[arg-type]

    async def get_requirements(self, name: str, version: str) -> list[RawRequirement]:
        reqs = await self._shared(
            self._requirements,
            (name, version),
            lambda: self._inner.get_requirements(name, version),
        )
        return list(reqs)  # type: ignore[arg-type]

    async def get_checksum(self, name: str, version: str) -> str:
        key = (name, version)
        if key not in self._checksums:
            self._checksums[key] = await self._inner.get_checksum(name, version)
        return self._checksums[key]

    async def prefetch(self, name: str, versions: Iterable[str]) -> None:
        """Fetch the requirement lists of several releases concurrently.

        Prefetching is an optimization; failures are left for the resolver
        to hit again when it actually visits the release.
        """
        pending = [v for v in versions if (name, v) not in self._requirements]
        if not pending:
            return
        results = await asyncio.gather(
            *(self.get_requirements(name, v) for v in pending),
            return_exceptions=True,
        )
        for version, result in zip(pending, results):
            if isinstance(result, Exception):
                logger.debug("Prefetch of %s %s failed: %s", name, version, result)
