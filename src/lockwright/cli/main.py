"""Lockwright CLI: dependency resolution and lockfiles.

Entry point for the ``lockwright`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    get:    Resolve dependencies and write lockwright.lock.
    update: Re-resolve named (or all) packages ignoring their lock entries.
    deps:   Show resolved dependencies and their lock status.

Usage::

    lockwright get --registry-file registry.yaml
    lockwright update ecto --registry-url https://registry.example.org/api
    lockwright deps --project ./my_app
"""

from __future__ import annotations

import logging

import click

from lockwright import __version__
from lockwright.cli.deps_cmd import deps_command
from lockwright.cli.get_cmd import get_command
from lockwright.cli.update_cmd import update_command


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, default=False,
              help="Log resolver decisions to stderr.")
def cli(verbose: bool) -> None:
    """Lockwright: resolve package dependencies into a reproducible lock.

    Reads lockwright.yaml, resolves every dependency against a registry
    (honouring overrides, optional and path dependencies), and records the
    result in lockwright.lock.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


# Register all subcommands
cli.add_command(get_command)
cli.add_command(update_command)
cli.add_command(deps_command)
