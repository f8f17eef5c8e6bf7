"""Release metadata parsing shared by the registry adapters.

A release's metadata is a mapping::

    {
        "requirements": {
            "postgrex": {"requirement": "~> 0.2.0", "optional": false},
            "package_name": {"requirement": ">= 0.0.0", "app": "app_name"}
        },
        "checksum": "sha256:..."
    }

Requirement keys are registry package names. ``app`` is the local name the
releasing package knows the dependency by, when it differs. A bare string
value is shorthand for ``{"requirement": <string>}``.
"""

from __future__ import annotations

from typing import Any

from lockwright.core.dependency.requirements import RawRequirement
from lockwright.exceptions import MalformedMetadata


def parse_requirements(data: Any, release: str) -> list[RawRequirement]:
    """Turn a release's ``requirements`` mapping into raw declarations.

    Args:
        data: The ``requirements`` value (mapping, or None for no deps).
        release: ``"name version"`` label used in error messages.

    Raises:
        MalformedMetadata: If the mapping has the wrong shape.
    """
    if data is None:
        return []
    if not isinstance(data, dict):
        raise MalformedMetadata(f"{release}: 'requirements' must be a mapping")

    raws: list[RawRequirement] = []
    for registry_name, decl in data.items():
        if decl is None or isinstance(decl, str):
            decl = {"requirement": decl}
        if not isinstance(decl, dict):
            raise MalformedMetadata(
                f"{release}: requirement {registry_name!r} must be a mapping"
            )
        app = decl.get("app") or registry_name
        requirement = decl.get("requirement")
        optional = decl.get("optional")
        if optional is None:
            optional = False
        elif not isinstance(optional, bool):
            raise MalformedMetadata(
                f"{release}: requirement {registry_name!r} optional must be a boolean"
            )
        raws.append(
            RawRequirement(
                name=str(app),
                requirement=None if requirement is None else str(requirement),
                package=None if app == registry_name else str(registry_name),
                optional=optional,
            )
        )
    return raws


def parse_release(data: Any, release: str) -> tuple[list[RawRequirement], str]:
    """Parse one release's metadata into ``(requirements, checksum)``."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MalformedMetadata(f"{release}: release metadata must be a mapping")
    checksum = data.get("checksum") or ""
    return parse_requirements(data.get("requirements"), release), str(checksum)
