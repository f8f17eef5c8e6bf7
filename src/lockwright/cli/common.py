"""Options and helpers shared by the ``get``, ``update`` and ``deps`` commands.

Exit Codes:
    0: Resolution succeeded.
    1: Resolution failed (unsatisfiable, conflicting overrides, registry
        unreachable).
    2: Project manifest, dependency manifest, registry index or lockfile
        missing or invalid.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Callable, Collection
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click

from lockwright.core.dependency import Resolution, Resolver
from lockwright.core.lockfile import LOCKFILE_NAME, LockStore
from lockwright.exceptions import (
    ConflictingOverride,
    InvalidDeclaration,
    LockfileError,
    ManifestError,
    MalformedMetadata,
    RegistryError,
    ResolutionError,
)
from lockwright.project import Manifest, read_manifest
from lockwright.registry import HttpRegistry, InMemoryRegistry, RegistryLookup

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_RESOLUTION_FAILED = 1
EXIT_BAD_INPUT = 2


def _run_async(coro: object) -> object:
    """Run an async coroutine in a synchronous context.

    Args:
        coro: Awaitable coroutine to execute.

    Returns:
        The coroutine's return value.
    """
    return asyncio.run(coro)  # type: ignore[arg-type]


@dataclass(frozen=True)
class ProjectSettings:
    """Resolved command-line configuration for one project."""

    project: Path
    registry_file: str | None = None
    registry_url: str | None = None
    lockfile: str | None = None

    @property
    def lock_path(self) -> Path:
        if self.lockfile:
            return Path(self.lockfile)
        return self.project / LOCKFILE_NAME


def project_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the project, registry and lockfile options to a command."""
    options = [
        click.option(
            "--project", "-p",
            type=click.Path(file_okay=False),
            default=".",
            show_default=True,
            help="Project directory containing lockwright.yaml.",
        ),
        click.option(
            "--registry-file",
            type=click.Path(dir_okay=False),
            envvar="LOCKWRIGHT_REGISTRY_FILE",
            default=None,
            help="JSON or YAML registry index to resolve against.",
        ),
        click.option(
            "--registry-url",
            envvar="LOCKWRIGHT_REGISTRY_URL",
            default=None,
            help="Base URL of an HTTP registry.",
        ),
        click.option(
            "--lockfile",
            type=click.Path(dir_okay=False),
            default=None,
            help="Lockfile path (default: <project>/lockwright.lock).",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_registry(settings: ProjectSettings) -> RegistryLookup:
    """Create the registry lookup selected on the command line.

    Raises:
        click.UsageError: If no registry, or more than one, is configured.
        MalformedMetadata: If the registry index file is invalid.
    """
    if settings.registry_file and settings.registry_url:
        raise click.UsageError("Use either --registry-file or --registry-url, not both.")
    if settings.registry_file:
        return InMemoryRegistry.from_file(settings.registry_file)
    if settings.registry_url:
        return HttpRegistry(settings.registry_url)
    raise click.UsageError(
        "No registry configured. Pass --registry-file or --registry-url "
        "(or set LOCKWRIGHT_REGISTRY_FILE / LOCKWRIGHT_REGISTRY_URL)."
    )


def _fail(message: str, code: int) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(code)


def resolve_project(
    settings: ProjectSettings,
    unlock: Collection[str] = (),
    ignore_lock: bool = False,
) -> tuple[Manifest, LockStore, Resolution]:
    """Load the project and resolve it against the configured registry.

    Prints the failure and exits with the matching exit code when anything
    goes wrong.

    Args:
        settings: Command-line configuration.
        unlock: Package identities whose lock entries are ignored.
        ignore_lock: Ignore every lock entry.

    Returns:
        The root manifest, its lock store, and the resolution.
    """
    from lockwright.cli.output import print_resolution_failure

    store = LockStore(settings.lock_path)
    try:
        manifest = read_manifest(settings.project)
        roots = manifest.requirements()
        registry = build_registry(settings)
        lock = store.read()
    except (ManifestError, InvalidDeclaration, LockfileError, MalformedMetadata) as exc:
        _fail(str(exc), EXIT_BAD_INPUT)

    if ignore_lock:
        unlock = set(lock.names)
    logger.debug("Resolving %s with %d locked packages", manifest.name, len(lock))

    resolver = Resolver(registry, lock=lock.packages, unlock=unlock)
    try:
        resolution = _run_async(resolver.resolve(roots))
    except (ResolutionError, ConflictingOverride) as exc:
        print_resolution_failure(exc)
        sys.exit(EXIT_RESOLUTION_FAILED)
    except (ManifestError, InvalidDeclaration) as exc:
        _fail(str(exc), EXIT_BAD_INPUT)
    except RegistryError as exc:
        _fail(str(exc), EXIT_RESOLUTION_FAILED)

    return manifest, store, resolution  # type: ignore[return-value]


def sync_lock(
    settings: ProjectSettings,
    unlock: Collection[str] = (),
    ignore_lock: bool = False,
    prune: bool = False,
) -> None:
    """Resolve the project, report what changed and write the lockfile."""
    from lockwright.cli.output import print_change, print_lock_summary

    _, store, resolution = resolve_project(settings, unlock=unlock, ignore_lock=ignore_lock)
    try:
        previous = store.read()
        diff = previous.diff(store.merge(resolution, prune=prune))
    except LockfileError as exc:
        _fail(str(exc), EXIT_BAD_INPUT)

    moved = {c["name"] for c in diff["changed"] if c["field"] in ("version", "source")}
    changed = sorted(set(diff["added"]) | moved)
    for name in changed:
        print_change(resolution.packages[name], previous.get(name))

    try:
        written = store.write(resolution, prune=prune)
    except (OSError, LockfileError) as exc:
        _fail(f"Cannot write {store.path}: {exc}", EXIT_RESOLUTION_FAILED)
    print_lock_summary(written, str(store.path), len(changed))
    sys.exit(EXIT_OK)
