"""``lockwright update``: Re-resolve packages ignoring their lock entries.

Usage::

    lockwright update ecto              # Unlock ecto only
    lockwright update ecto postgrex     # Unlock several packages
    lockwright update --all             # Ignore the whole lock
"""

from __future__ import annotations

from pathlib import Path

import click

from lockwright.cli.common import ProjectSettings, project_options, sync_lock


@click.command("update")
@click.argument("names", nargs=-1)
@click.option("--all", "update_all", is_flag=True, default=False,
              help="Ignore every lock entry.")
@project_options
@click.option(
    "--prune",
    is_flag=True,
    default=False,
    help="Drop lock entries for packages no longer required.",
)
def update_command(
    names: tuple[str, ...],
    update_all: bool,
    project: str,
    registry_file: str | None,
    registry_url: str | None,
    lockfile: str | None,
    prune: bool,
) -> None:
    """Update NAMES (or --all) to the newest versions the manifest allows.

    Packages not named keep their locked versions whenever those still fit.
    """
    if not names and not update_all:
        raise click.UsageError("Name the packages to update, or pass --all.")
    if names and update_all:
        raise click.UsageError("Pass either package names or --all, not both.")

    settings = ProjectSettings(
        project=Path(project),
        registry_file=registry_file,
        registry_url=registry_url,
        lockfile=lockfile,
    )
    sync_lock(settings, unlock=set(names), ignore_lock=update_all, prune=prune)
