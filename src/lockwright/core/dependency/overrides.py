"""Override engine: filters the requirement set before resolution.

The engine is a flat, order-independent reduction over every requirement
collected so far. It runs in two passes: the first pass collects the
overrides for each package identity, the second drops every requirement
that an override supersedes. Because the resolver re-runs it over the whole
collected set each time a package contributes new requirements, an override
declared at the root reaches packages that are only required three levels
down.

Path requirements are implicit overrides: a package that comes from a path
never takes part in version negotiation.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from lockwright.core.dependency.requirements import ROOT, Requirement
from lockwright.exceptions import ConflictingOverride

logger = logging.getLogger(__name__)


def group_by_package(
    requirements: Iterable[Requirement],
) -> dict[str, list[Requirement]]:
    """Partition requirements by package identity, in first-declared order."""
    grouped: dict[str, list[Requirement]] = {}
    for req in requirements:
        grouped.setdefault(req.package, []).append(req)
    return grouped


def _same_target(a: Requirement, b: Requirement) -> bool:
    return (
        a.source == b.source
        and a.registry_name == b.registry_name
        and (a.source.is_path or str(a.constraint) == str(b.constraint))
    )


def collect_overrides(requirements: Iterable[Requirement]) -> dict[str, Requirement]:
    """First pass: find the winning requirement for each overridden package.

    Explicit overrides win first. A package without an explicit override
    but with a path requirement is won by that path requirement.

    Args:
        requirements: Every requirement collected so far.

    Returns:
        Mapping of package identity to its winning requirement.

    Raises:
        ConflictingOverride: If two explicit overrides, or two path
            requirements with no explicit override, disagree on one package.
    """
    explicit: dict[str, Requirement] = {}
    paths: dict[str, list[Requirement]] = {}

    for req in requirements:
        if req.override:
            current = explicit.get(req.package)
            if current is None:
                explicit[req.package] = req
            elif not _same_target(current, req):
                raise ConflictingOverride(req.package, [current.requestor, req.requestor])
        elif req.is_path:
            paths.setdefault(req.package, []).append(req)

    winners: dict[str, Requirement] = {}
    for package, group in paths.items():
        if package in explicit:
            continue
        first = group[0]
        for other in group[1:]:
            if other.source != first.source:
                raise ConflictingOverride(package, [first.requestor, other.requestor])
        winners[package] = first
    winners.update(explicit)
    return winners


def apply_overrides(requirements: Iterable[Requirement]) -> list[Requirement]:
    """Filter a requirement set through the overrides it contains.

    For each package with an override (explicit or path) only the winning
    requirement survives; the constraints of the discarded requirements are
    not checked. Every other requirement passes through unchanged. Output
    order follows the first declaration of each package.

    Args:
        requirements: Every requirement collected so far.

    Returns:
        The filtered requirement list.

    Raises:
        ConflictingOverride: If one package carries contradictory overrides.
    """
    reqs = list(requirements)
    winners = collect_overrides(reqs)
    result: list[Requirement] = []
    for package, group in group_by_package(reqs).items():
        winner = winners.get(package)
        if winner is None:
            result.extend(group)
            continue
        dropped = [r for r in group if not _same_target(r, winner)]
        if dropped:
            logger.debug(
                "Override of %s by %s supersedes %d requirement(s)",
                package, winner.requestor, len(dropped),
            )
        result.append(winner)
    return result


def active_packages(requirements: Iterable[Requirement]) -> set[str]:
    """Return the packages reached by at least one mandatory edge.

    Root requirements always count as mandatory. A package required only
    through optional edges is left out of resolution entirely.
    """
    return {
        req.package
        for req in requirements
        if not req.optional or req.requestor == ROOT
    }
