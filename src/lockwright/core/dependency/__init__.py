"""Dependency declarations, the override engine and the resolver.

All public names are re-exported here so callers can write
``from lockwright.core.dependency import Resolver``.

Model
-----
A resolution problem is a set of root requirements plus a registry that
maps each package name to its published versions and, per version, a list
of further requirements. The resolver picks exactly one version per
package identity such that:

- every mandatory requirement reachable from the root is satisfied;
- packages reachable only through optional requirements are left out;
- overrides (explicit or implied by path dependencies) replace every other
  requirement on the same package.
"""

from lockwright.core.dependency.constraints import (
    VersionConstraint,
    is_prerelease,
    is_valid_version,
    parse_version,
    satisfies_all,
    sort_versions,
    version_key,
)
from lockwright.core.dependency.requirements import (
    ROOT,
    RawRequirement,
    Requirement,
    Source,
    normalize,
)
from lockwright.core.dependency.overrides import (
    active_packages,
    apply_overrides,
    collect_overrides,
)
from lockwright.core.dependency.provider import (
    Candidate,
    RequirementProvider,
    requestor_chain,
)
from lockwright.core.dependency.resolver import (
    Resolution,
    ResolvedPackage,
    Resolver,
    resolve,
)
from lockwright.core.dependency.report import ReportEntry, report

__all__ = [
    "ROOT",
    "Candidate",
    "RawRequirement",
    "ReportEntry",
    "RequirementProvider",
    "Requirement",
    "Resolution",
    "ResolvedPackage",
    "Resolver",
    "Source",
    "VersionConstraint",
    "active_packages",
    "apply_overrides",
    "collect_overrides",
    "is_prerelease",
    "is_valid_version",
    "normalize",
    "parse_version",
    "report",
    "requestor_chain",
    "resolve",
    "satisfies_all",
    "sort_versions",
    "version_key",
]
