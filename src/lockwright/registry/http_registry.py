"""HTTP registry adapter.

Talks to a registry exposing two JSON endpoints::

    GET {base}/packages/{name}
        {"releases": [{"version": "0.2.0"}, {"version": "0.2.1"}]}

    GET {base}/packages/{name}/releases/{version}
        {"requirements": {"postgrex": {"requirement": "~> 0.2.0"}},
         "checksum": "sha256:..."}

Usage::

    registry = HttpRegistry("https://registry.example.org/api")
    versions = await registry.get_versions("ecto")
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from lockwright import DEFAULT_TIMEOUT
from lockwright.core.dependency.requirements import RawRequirement
from lockwright.exceptions import MalformedMetadata
from lockwright.registry.base import RegistryLookup
from lockwright.registry.http_client import fetch_json
from lockwright.registry.metadata import parse_release

logger = logging.getLogger(__name__)


class HttpRegistry(RegistryLookup):
    """Registry lookup over HTTP.

    Release metadata is immutable once published, so each release is fetched
    at most once per ``HttpRegistry`` instance. Version lists are fetched on
    every call; the resolver's per-run cache makes that once per resolution.

    Args:
        base_url: Registry API root, without a trailing slash.
        timeout: Request timeout in seconds.
        transport: Optional ``httpx`` transport, used by tests.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Any = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._releases: dict[tuple[str, str], tuple[list[RawRequirement], str]] = {}

    @property
    def registry_name(self) -> str:
        return self.base_url

    async def _get(self, path: str) -> Any:
        return await fetch_json(
            f"{self.base_url}{path}",
            timeout=self.timeout,
            transport=self._transport,
        )

    async def get_versions(self, name: str) -> list[str]:
        data = await self._get(f"/packages/{quote(name, safe='')}")
        releases = data.get("releases") if isinstance(data, dict) else None
        if not isinstance(releases, list):
            raise MalformedMetadata(f"{name}: response has no 'releases' list")
        versions = []
        for release in releases:
            if not isinstance(release, dict) or "version" not in release:
                raise MalformedMetadata(f"{name}: release entry without a version")
            versions.append(str(release["version"]))
        logger.debug("%s has %d releases on %s", name, len(versions), self.base_url)
        return versions

    async def _release(self, name: str, version: str) -> tuple[list[RawRequirement], str]:
        key = (name, version)
        if key not in self._releases:
            data = await self._get(
                f"/packages/{quote(name, safe='')}/releases/{quote(version, safe='')}"
            )
            self._releases[key] = parse_release(data, f"{name} {version}")
        return self._releases[key]

    async def get_requirements(self, name: str, version: str) -> list[RawRequirement]:
        return list((await self._release(name, version))[0])

    async def get_checksum(self, name: str, version: str) -> str:
        return (await self._release(name, version))[1]
