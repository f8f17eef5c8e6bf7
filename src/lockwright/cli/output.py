"""Rich output formatting helpers for the lockwright CLI.

Provides consistent terminal output for lock changes, resolution failures
and dependency reports.

Status Color Mapping:
    locked = green, outdated = yellow, not locked = cyan, errors = bold red
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from lockwright.core.dependency import ReportEntry, ResolvedPackage
from lockwright.core.lockfile import LockEntry
from lockwright.exceptions import LockwrightError, ResolutionError

console = Console()


def status_style(entry: ReportEntry) -> str:
    """Return the Rich style string for a report entry's lock status."""
    if entry.locked_version is None:
        return "cyan"
    return "green" if entry.locked else "yellow"


def print_change(package: ResolvedPackage, previous: LockEntry | None) -> None:
    """Print one ``* Getting`` / ``* Updating`` line.

    Args:
        package: The newly resolved package.
        previous: Its lock entry before this run, if any.
    """
    name = escape(package.name)
    kind = package.source.kind
    if previous is None:
        console.print(f"* Getting [bold]{name}[/bold] ({kind} package)")
    else:
        console.print(
            f"* Updating [bold]{name}[/bold] "
            f"{escape(previous.version)} -> {escape(package.version)} ({kind} package)"
        )


def print_lock_summary(written: bool, path: str, changed: int) -> None:
    """Print the closing line of a ``get`` or ``update`` run."""
    if changed == 0:
        console.print("[dim]All dependencies are up to date.[/dim]")
    if written:
        console.print(f"Lockfile written to: {escape(path)}")


def print_resolution_failure(exc: LockwrightError) -> None:
    """Print a failed resolution with every requestor chain involved.

    Args:
        exc: The resolution or override error.
    """
    title = "Dependency Resolution"
    console.print(Panel("[bold red]Resolution failed[/bold red]", title=title))
    if isinstance(exc, ResolutionError):
        lines = str(exc).splitlines()
        console.print(f"[red]{escape(lines[0])}[/red]")
        for line in lines[1:]:
            console.print(f"  [red]- {escape(line.strip())}[/red]")
    else:
        console.print(f"[red]{escape(str(exc))}[/red]")


def print_report(entries: list[ReportEntry]) -> None:
    """Print the dependency report as a table.

    Args:
        entries: Report entries from ``lockwright.core.dependency.report``.
    """
    if not entries:
        console.print("[dim]No dependencies.[/dim]")
        return

    table = Table(title="Dependencies", show_header=True, header_style="bold")
    table.add_column("Package", style="bold")
    table.add_column("Version")
    table.add_column("Source", style="dim")
    table.add_column("Lock")

    for entry in entries:
        table.add_row(
            entry.name,
            entry.version,
            entry.source,
            Text(entry.status, style=status_style(entry)),
        )

    console.print(table)
    outdated = sum(1 for e in entries if not e.locked)
    parts = [f"[bold]{len(entries)}[/bold] packages"]
    if outdated:
        parts.append(f"[yellow]{outdated} not matching the lock[/yellow]")
    console.print(" | ".join(parts))
