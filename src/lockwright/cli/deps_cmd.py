"""``lockwright deps``: Show every resolved dependency and its lock status.

Resolves the project the same way ``get`` does but never writes the
lockfile.

Exit Codes:
    0: Report printed.
    1: Dependency resolution failed.
    2: Manifest missing or invalid.
"""

from __future__ import annotations

import json
import sys
from dataclasses import asdict
from pathlib import Path

import click

from lockwright.cli.common import EXIT_OK, ProjectSettings, project_options, resolve_project
from lockwright.core.dependency import report


@click.command("deps")
@project_options
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def deps_command(
    project: str,
    registry_file: str | None,
    registry_url: str | None,
    lockfile: str | None,
    output_format: str,
) -> None:
    """List resolved dependencies and whether the lockfile matches them."""
    settings = ProjectSettings(
        project=Path(project),
        registry_file=registry_file,
        registry_url=registry_url,
        lockfile=lockfile,
    )
    _, store, resolution = resolve_project(settings)
    entries = report(resolution, store.read().packages)

    if output_format == "json":
        output = [dict(asdict(e), status=e.status) for e in entries]
        click.echo(json.dumps(output, indent=2))
    else:
        from lockwright.cli.output import print_report
        print_report(entries)
    sys.exit(EXIT_OK)
