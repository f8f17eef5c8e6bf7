"""resolvelib provider: candidate discovery for the resolver.

``RequirementProvider`` implements resolvelib's ``AbstractProvider`` with
package identities (local names) as identifiers, ``Requirement`` records as
requirements and ``Candidate`` records as candidates.

resolvelib drives the search and the provider answers its questions:

- ``find_matches`` runs the override engine over every requirement
  collected for one package and returns the candidates that satisfy the
  survivors. A path winner yields exactly one candidate read from its
  manifest. A registry package yields its locked version first (when it
  still fits), then the remaining versions newest first. A package reached
  only through optional edges yields a single *absent* candidate.
- ``is_satisfied_by`` applies the same rules to one requirement, so that a
  candidate produced under an override ignores the requirements that the
  override supersedes.
- ``get_preference`` decides path packages first, then first-declared order.

resolvelib is synchronous and the registry is asynchronous. The provider
runs on a worker thread and hands every lookup to the event loop that owns
the ``CachedLookup``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Collection, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from resolvelib import AbstractProvider, BaseReporter
from resolvelib.structs import RequirementInformation

from lockwright.core.dependency.constraints import satisfies_all, sort_versions
from lockwright.core.dependency.overrides import (
    active_packages,
    apply_overrides,
    collect_overrides,
)
from lockwright.core.dependency.requirements import ROOT, Requirement, Source, normalize
from lockwright.exceptions import NameConflict, NotFound, ResolutionError, Unsatisfiable
from lockwright.registry.base import CachedLookup

if TYPE_CHECKING:
    from lockwright.core.lockfile.models import LockEntry
    from lockwright.project.manifest import Manifest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """One concrete version of a package that resolution may select.

    Attributes:
        package: Package identity.
        version: Candidate version, ``""`` for an absent candidate.
        source: Registry or path source.
        registry_name: Registry package name (the identity for path sources).
        requirements: Requirements contributed by this version's manifest.
        override: The requirement that won this package's override
            reduction when the candidate was produced, if any.
        absent: True for the placeholder that leaves an optional-only
            package out of the resolution.
    """

    package: str
    version: str
    source: Source
    registry_name: str
    requirements: tuple[Requirement, ...] = ()
    override: Requirement | None = None
    absent: bool = False

    @classmethod
    def left_out(cls, package: str) -> Candidate:
        return cls(package=package, version="", source=Source.registry(),
                   registry_name=package, absent=True)

    @property
    def key(self) -> tuple[str, Source, bool]:
        return (self.version, self.source, self.absent)


def accepts(candidate: Candidate, requirement: Requirement) -> bool:
    """Whether *candidate* satisfies *requirement* taken on its own."""
    if candidate.absent:
        return requirement.optional and requirement.requestor != ROOT
    if requirement.is_path:
        return candidate.source == requirement.source
    return (
        not candidate.source.is_path
        and candidate.registry_name == requirement.registry_name
        and requirement.constraint.satisfies(candidate.version)
    )


def _competes(requirement: Requirement, winner: Requirement) -> bool:
    # An explicit override only competes with other explicit overrides; a
    # path winner only with other path requirements.
    return requirement.override if winner.override else requirement.is_path


def requestor_chain(requirements: Iterable[Requirement], package: str) -> tuple[str, ...]:
    """Return the requestor path from the root down to *package*.

    Mandatory edges are preferred over optional ones. The result starts with
    ``"root"`` and ends with *package*.
    """
    reqs = list(requirements)
    parents: dict[str, str] = {}
    for req in reqs:
        if not req.optional:
            parents.setdefault(req.package, req.requestor)
    for req in reqs:
        parents.setdefault(req.package, req.requestor)
    chain = [package]
    seen = {package}
    current = package
    while current != ROOT:
        parent = parents.get(current, ROOT)
        if parent in seen:
            break
        chain.append(parent)
        seen.add(parent)
        current = parent
    return tuple(reversed(chain))


class RequirementProvider(AbstractProvider):
    """resolvelib provider over a registry lookup, a lock and path manifests.

    Args:
        lookup: Per-run registry cache.
        loop: Event loop that owns *lookup*.
        read_manifest: Path source.
        lock: Previously locked entries keyed by package identity.
        unlock: Package identities whose lock entries are ignored.
        prefetch: How many top candidates per package to prefetch.
    """

    def __init__(
        self,
        lookup: CachedLookup,
        loop: asyncio.AbstractEventLoop,
        read_manifest: Callable[[Path], Manifest],
        lock: Mapping[str, LockEntry] | None = None,
        unlock: Collection[str] = (),
        prefetch: int = 0,
    ) -> None:
        self._lookup = lookup
        self._loop = loop
        self._read_manifest = read_manifest
        self._lock = dict(lock or {})
        self._unlock = set(unlock)
        self._prefetch = prefetch
        self._order: dict[str, int] = {}
        self._seen: list[Requirement] = []
        self._missing: set[str] = set()
        self._name_conflicts: dict[str, NameConflict] = {}

    def _await(self, coro: Any) -> Any:
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result()

    def observe(self, requirements: Iterable[Requirement]) -> None:
        """Record requirements for declaration order and requestor chains."""
        for req in requirements:
            self._order.setdefault(req.package, len(self._order))
            self._seen.append(req)

    # -- AbstractProvider ---------------------------------------------------

    def identify(self, requirement_or_candidate: Requirement | Candidate) -> str:
        return requirement_or_candidate.package

    def get_preference(
        self,
        identifier: str,
        resolutions: Mapping[str, Candidate],
        candidates: Mapping[str, Iterator[Candidate]],
        information: Mapping[str, Iterator[RequirementInformation]],
        backtrack_causes: Sequence[RequirementInformation],
    ) -> tuple[int, int]:
        from_path = any(info.requirement.is_path for info in information[identifier])
        return (0 if from_path else 1, self._order.get(identifier, len(self._order)))

    def find_matches(
        self,
        identifier: str,
        requirements: Mapping[str, Iterator[Requirement]],
        incompatibilities: Mapping[str, Iterator[Candidate]],
    ) -> Any:
        reqs = list(requirements[identifier])
        excluded = {c.key for c in incompatibilities[identifier]}
        winner = collect_overrides(reqs).get(identifier)
        effective = apply_overrides(reqs)

        if identifier not in active_packages(reqs):
            absent = Candidate.left_out(identifier)
            return [] if absent.key in excluded else [absent]

        names = {r.registry_name for r in effective}
        if len(names) > 1:
            logger.debug("Registry names disagree for %s: %s", identifier, sorted(names))
            self._name_conflicts[identifier] = NameConflict(
                identifier,
                [(requestor_chain(self._seen, r.requestor), r.registry_name)
                 for r in effective],
            )
            return []

        if winner is not None and winner.is_path:
            candidate = self._path_candidate(identifier, winner)
            return [] if candidate.key in excluded else [candidate]

        registry_name = effective[0].registry_name
        try:
            versions = self._await(self._lookup.get_versions(registry_name))
        except NotFound:
            logger.debug("%s not found in %s", registry_name, self._lookup.registry_name)
            self._missing.add(registry_name)
            return []

        constraints = [r.constraint for r in effective]
        source = Source.registry()
        fitting = [
            v for v in sort_versions(versions)
            if satisfies_all(constraints, v) and (v, source, False) not in excluded
        ]

        locked = self._lock.get(identifier)
        if (
            locked is not None
            and identifier not in self._unlock
            and locked.constrains_resolution
            and locked.registry_name == registry_name
            and locked.version in fitting
        ):
            fitting.remove(locked.version)
            fitting.insert(0, locked.version)

        if self._prefetch and fitting:
            self._await(self._lookup.prefetch(registry_name, fitting[: self._prefetch]))

        def materialized() -> Iterator[Candidate]:
            for version in fitting:
                candidate = self._registry_candidate(
                    identifier, registry_name, version, winner
                )
                if candidate is not None:
                    yield candidate

        return materialized

    def is_satisfied_by(self, requirement: Requirement, candidate: Candidate) -> bool:
        winner = candidate.override
        if winner is not None and not _competes(requirement, winner):
            return True
        return accepts(candidate, requirement)

    def get_dependencies(self, candidate: Candidate) -> list[Requirement]:
        self.observe(candidate.requirements)
        return list(candidate.requirements)

    # -- Candidates ---------------------------------------------------------

    def _path_candidate(self, package: str, winner: Requirement) -> Candidate:
        manifest = self._read_manifest(Path(winner.source.location))
        return Candidate(
            package=package,
            version=manifest.version,
            source=winner.source,
            registry_name=package,
            requirements=tuple(manifest.requirements(requestor=package)),
            override=winner,
        )

    def _registry_candidate(
        self, package: str, registry_name: str, version: str, winner: Requirement | None
    ) -> Candidate | None:
        try:
            raws = self._await(self._lookup.get_requirements(registry_name, version))
        except NotFound:
            logger.debug("Release %s %s vanished from registry; skipping", registry_name, version)
            return None
        return Candidate(
            package=package,
            version=version,
            source=Source.registry(),
            registry_name=registry_name,
            requirements=tuple(normalize(raw, package) for raw in raws),
            override=winner,
        )

    # -- Failures -----------------------------------------------------------

    def explain(self, causes: Sequence[RequirementInformation]) -> ResolutionError:
        """Turn resolvelib's failure causes into a lockwright error."""
        if not causes:
            return Unsatisfiable(ROOT, [], reason="no assignment satisfies every requirement")
        first = causes[0].requirement
        package = first.package
        conflict = self._name_conflicts.get(package)
        if conflict is not None:
            return conflict
        requestors: list[tuple[tuple[str, ...], str]] = []
        for info in causes:
            req = info.requirement
            if req.package != package:
                continue
            entry = (requestor_chain(self._seen, req.requestor), req.describe())
            if entry not in requestors:
                requestors.append(entry)
        reason = "no version satisfies all requirements"
        if first.registry_name in self._missing:
            reason = "package not found in registry"
        return Unsatisfiable(package, requestors, reason=reason)


class LoggingReporter(BaseReporter):
    """Reports resolvelib progress to the debug log."""

    def pinning(self, candidate: Candidate) -> None:
        if candidate.absent:
            logger.debug("Leaving out %s (only optional requirements)", candidate.package)
        else:
            logger.debug("Trying %s %s", candidate.package, candidate.version)

    def rejecting_candidate(self, criterion: Any, candidate: Candidate) -> None:
        logger.debug("Rejected %s %s", candidate.package, candidate.version)

    def resolving_conflicts(self, causes: Sequence[RequirementInformation]) -> None:
        logger.debug("Backtracking over %d conflicting requirement(s)", len(causes))
