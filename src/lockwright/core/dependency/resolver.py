"""Dependency resolver built on resolvelib.

``Resolver`` hands the root requirements to ``resolvelib.Resolver`` together
with a ``RequirementProvider`` that knows the registry, the lock and path
manifests. resolvelib performs the backtracking search:

1. every requirement collected for a package is run through the override
   engine before its candidates are listed, so an override declared at the
   root reaches packages that are only required three levels down;
2. packages reached only through optional edges get an absent candidate
   and contribute nothing;
3. an override that shows up after its package was pinned invalidates that
   pin; resolvelib re-pins the package under the override and withdraws the
   superseded pin's requirements.

The search runs in a worker thread while registry lookups stay on the
event loop, memoized for the run. The result is checked once more against
the override engine before it is turned into a ``Resolution``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Collection, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import resolvelib

from lockwright.core.dependency.overrides import (
    active_packages,
    apply_overrides,
    group_by_package,
)
from lockwright.core.dependency.provider import (
    Candidate,
    LoggingReporter,
    RequirementProvider,
    accepts,
    requestor_chain,
)
from lockwright.core.dependency.requirements import Requirement, Source
from lockwright.exceptions import Unsatisfiable
from lockwright.registry.base import CachedLookup, RegistryLookup

if TYPE_CHECKING:
    from lockwright.core.lockfile.models import LockEntry
    from lockwright.project.manifest import Manifest

logger = logging.getLogger(__name__)

DEFAULT_PREFETCH = 2
DEFAULT_MAX_ROUNDS = 10_000


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ResolvedPackage:
    """A package in a successful resolution.

    Attributes:
        name: Package identity.
        version: Selected version.
        source: Registry or path source.
        registry_name: Registry package name.
        checksum: Registry checksum of the release, ``""`` if unknown.
        requestors: Packages (or ``"root"``) whose requirements it satisfies.
        dependencies: Selected packages this one requires.
    """

    name: str
    version: str
    source: Source
    registry_name: str
    checksum: str = ""
    requestors: tuple[str, ...] = ()
    dependencies: tuple[str, ...] = ()


@dataclass
class Resolution:
    """Result of a successful resolution: one version per package identity.

    Every mandatory requirement reachable from the root is satisfied by
    exactly one entry. Packages reachable only through optional requirements
    are absent.
    """

    packages: dict[str, ResolvedPackage] = field(default_factory=dict)

    @property
    def installed(self) -> dict[str, str]:
        """Mapping of package identity to selected version."""
        return {name: pkg.version for name, pkg in self.packages.items()}

    def get(self, name: str) -> ResolvedPackage | None:
        return self.packages.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.packages

    def __len__(self) -> int:
        return len(self.packages)


def _mandatory_closure(
    roots: Iterable[Requirement], pinned: Mapping[str, Candidate]
) -> dict[str, Candidate]:
    reached: dict[str, Candidate] = {}
    frontier = [r.package for r in roots]
    while frontier:
        package = frontier.pop()
        candidate = pinned.get(package)
        if package in reached or candidate is None or candidate.absent:
            continue
        reached[package] = candidate
        frontier.extend(r.package for r in candidate.requirements if not r.optional)
    return {name: c for name, c in pinned.items() if name in reached}


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class Resolver:
    """Backtracking resolver over a registry, a lock and path manifests.

    Args:
        registry: Registry lookup used for registry-sourced packages.
        lock: Previously locked entries keyed by package identity. Locked
            registry versions are tried first while they still fit.
        unlock: Package identities whose lock entries are ignored.
        read_manifest: Path source; defaults to
            ``lockwright.project.read_manifest``.
        prefetch: How many top candidates per package to prefetch
            concurrently. 0 disables prefetching.
        max_rounds: Upper bound on resolvelib pinning rounds.
    """

    def __init__(
        self,
        registry: RegistryLookup,
        lock: Mapping[str, LockEntry] | None = None,
        unlock: Collection[str] = (),
        read_manifest: Callable[[Path], Manifest] | None = None,
        prefetch: int = DEFAULT_PREFETCH,
        max_rounds: int = DEFAULT_MAX_ROUNDS,
    ) -> None:
        if read_manifest is None:
            from lockwright.project.manifest import read_manifest
        self._registry = registry
        self._lock = dict(lock or {})
        self._unlock = set(unlock)
        self._read_manifest = read_manifest
        self._prefetch = prefetch
        self._max_rounds = max_rounds

    async def resolve(self, root_requirements: Iterable[Requirement]) -> Resolution:
        """Resolve the root requirements into one version per package.

        Args:
            root_requirements: Normalized requirements of the root project.

        Returns:
            The ``Resolution``.

        Raises:
            Unsatisfiable: If no assignment satisfies every requirement.
            NameConflict: If one package refers to two registry packages.
            ConflictingOverride: If one package has contradictory overrides.
            ManifestError: If a path dependency cannot be read.
            RegistryError: On registry failures other than ``NotFound``.
        """
        roots = list(root_requirements)
        lookup = CachedLookup(self._registry)
        provider = RequirementProvider(
            lookup,
            asyncio.get_running_loop(),
            read_manifest=self._read_manifest,
            lock=self._lock,
            unlock=self._unlock,
            prefetch=self._prefetch,
        )
        provider.observe(roots)
        pinned = await asyncio.to_thread(self._search, provider, roots)
        return await self._build(lookup, roots, pinned)

    def _search(
        self, provider: RequirementProvider, roots: list[Requirement]
    ) -> dict[str, Candidate]:
        resolver = resolvelib.Resolver(provider, LoggingReporter())
        try:
            result = resolver.resolve(roots, max_rounds=self._max_rounds)
        except resolvelib.ResolutionImpossible as exc:
            raise provider.explain(exc.causes) from None
        except resolvelib.ResolutionTooDeep as exc:
            raise Unsatisfiable(
                roots[0].package if roots else "root",
                [],
                reason=f"search gave up after {exc.round_count} rounds",
            ) from None
        return dict(result.mapping)

    async def _build(
        self,
        lookup: CachedLookup,
        roots: list[Requirement],
        pinned: Mapping[str, Candidate],
    ) -> Resolution:
        selection = _mandatory_closure(roots, pinned)
        collected = list(roots)
        for candidate in selection.values():
            collected.extend(candidate.requirements)
        effective = apply_overrides(collected)
        active = active_packages(collected)
        grouped = group_by_package(r for r in effective if r.package in active)

        for package, reqs in grouped.items():
            candidate = selection.get(package)
            if candidate is None or not all(accepts(candidate, r) for r in reqs):
                found = "nothing" if candidate is None else candidate.version
                raise Unsatisfiable(
                    package,
                    [(requestor_chain(collected, r.requestor), r.describe()) for r in reqs],
                    reason=f"selected {found}, which no longer fits",
                )

        packages: dict[str, ResolvedPackage] = {}
        for candidate in selection.values():
            checksum = ""
            if not candidate.source.is_path:
                checksum = await lookup.get_checksum(candidate.registry_name, candidate.version)
            requestors = sorted({r.requestor for r in grouped.get(candidate.package, [])})
            dependencies = sorted(
                {r.package for r in candidate.requirements if r.package in selection}
            )
            packages[candidate.package] = ResolvedPackage(
                name=candidate.package,
                version=candidate.version,
                source=candidate.source,
                registry_name=candidate.registry_name,
                checksum=checksum,
                requestors=tuple(requestors),
                dependencies=tuple(dependencies),
            )
            logger.debug("Resolved %s %s (%s)", candidate.package, candidate.version, candidate.source)
        return Resolution(packages=packages)


async def resolve(
    root_requirements: Iterable[Requirement],
    registry: RegistryLookup,
    lock: Mapping[str, LockEntry] | None = None,
    unlock: Collection[str] = (),
) -> Resolution:
    """Resolve *root_requirements* against *registry*, preferring *lock*.

    Convenience wrapper around ``Resolver(...).resolve(...)``.
    """
    return await Resolver(registry, lock=lock, unlock=unlock).resolve(root_requirements)
