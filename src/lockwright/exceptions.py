"""lockwright exception hierarchy.

All public exceptions inherit from LockwrightError, giving callers a single
base class to catch when they want to handle any lockwright-specific failure
without swallowing unrelated errors.
"""

from __future__ import annotations

from collections.abc import Sequence


class LockwrightError(Exception):
    """Base exception for all lockwright errors."""


class InvalidDeclaration(LockwrightError):
    """Raised when a dependency declaration cannot be normalized.

    Covers malformed names, unparseable version constraints, and
    overrides that name no resolvable source. Never recoverable by the
    resolver; surfaced to the caller immediately.
    """


class ConflictingOverride(LockwrightError):
    """Raised when one package carries two contradictory overrides.

    Attributes:
        package: The package identity that was overridden twice.
        requestors: Identities of the packages that declared the overrides.
    """

    def __init__(self, package: str, requestors: Sequence[str]) -> None:
        self.package = package
        self.requestors = list(requestors)
        super().__init__(
            f"Conflicting overrides for {package!r} declared by "
            f"{', '.join(self.requestors)}"
        )


class ResolutionError(LockwrightError):
    """Raised when dependency resolution fails.

    Every resolution failure carries the requestor chains that produced the
    offending constraints, so the user can see which path in the graph
    introduced them.
    """

    def __init__(self, package: str, message: str) -> None:
        self.package = package
        super().__init__(message)


def _format_chains(requestors: Sequence[tuple[tuple[str, ...], str]]) -> str:
    lines = []
    for chain, constraint in requestors:
        lines.append(f"  {' -> '.join(chain)} requires {constraint}")
    return "\n".join(lines)


class Unsatisfiable(ResolutionError):
    """No version of a package satisfies every constraint placed on it.

    Attributes:
        package: The package identity that could not be resolved.
        requestors: ``(chain, constraint)`` pairs, where *chain* is the
            requestor path from the root down to the declaring package.
        reason: Short description of why no candidate was acceptable.
    """

    def __init__(
        self,
        package: str,
        requestors: Sequence[tuple[tuple[str, ...], str]],
        reason: str = "no version satisfies all requirements",
    ) -> None:
        self.requestors = list(requestors)
        self.reason = reason
        message = f"Unable to resolve {package!r}: {reason}"
        if self.requestors:
            message += "\n" + _format_chains(self.requestors)
        super().__init__(package, message)


class NameConflict(ResolutionError):
    """Two requirements for one package point at different registry packages.

    Attributes:
        package: The local package identity.
        requestors: ``(chain, registry_name)`` pairs, one per disagreeing
            requirement.
    """

    def __init__(
        self,
        package: str,
        requestors: Sequence[tuple[tuple[str, ...], str]],
    ) -> None:
        self.requestors = list(requestors)
        message = (
            f"Dependency {package!r} refers to different registry packages"
            "\n" + _format_chains(self.requestors)
        )
        super().__init__(package, message)


class ManifestError(LockwrightError):
    """Raised when a project manifest cannot be loaded."""


class PathNotFound(ManifestError):
    """The path of a path-sourced dependency does not exist."""


class InvalidManifest(ManifestError):
    """A manifest exists but is not valid YAML or has the wrong shape."""


class RegistryError(LockwrightError):
    """Raised by registry lookups.

    The resolver never retries these; it only tells "definitely absent"
    (``NotFound``) apart from "could not determine" (the others).
    """


class NotFound(RegistryError):
    """The registry has no package or release with the requested name."""


class NetworkError(RegistryError):
    """The registry could not be reached. Retryable by the caller."""


class MalformedMetadata(RegistryError):
    """The registry answered with data that does not match its schema."""


class LockfileError(LockwrightError):
    """Raised when a lock file is unreadable or structurally corrupt."""
