"""``lockwright get``: Resolve the project and write lockwright.lock.

Locked versions are kept whenever they still satisfy the manifest, so
``get`` only changes the lock for new or newly incompatible dependencies.

Exit Codes:
    0: Dependencies resolved; lockfile up to date.
    1: Dependency resolution failed.
    2: Manifest missing or invalid.
"""

from __future__ import annotations

from pathlib import Path

import click

from lockwright.cli.common import ProjectSettings, project_options, sync_lock


@click.command("get")
@project_options
@click.option(
    "--prune",
    is_flag=True,
    default=False,
    help="Drop lock entries for packages no longer required.",
)
def get_command(
    project: str,
    registry_file: str | None,
    registry_url: str | None,
    lockfile: str | None,
    prune: bool,
) -> None:
    """Resolve all dependencies and record them in the lockfile.

    Exit code 0 on success, 1 on resolution failure, 2 if the manifest is
    missing or invalid.
    """
    settings = ProjectSettings(
        project=Path(project),
        registry_file=registry_file,
        registry_url=registry_url,
        lockfile=lockfile,
    )
    sync_lock(settings, prune=prune)
