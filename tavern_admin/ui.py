"""Terminal presentation: banner, headers, status lines, batch reports.

All output goes through the module-level ``console`` so tests can swap it
for a recording console.
"""

from __future__ import annotations

import math

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from tavern_admin import __version__
from tavern_admin.models import BatchReport

console = Console()


def print_banner() -> None:
    console.print(Panel.fit(
        f"[bold white]TAVERN ADMIN[/bold white] [dim]v{__version__}[/dim]\n"
        "[dim]SillyTavern instance manager[/dim]",
        style="cyan",
    ))


def print_header(title: str) -> None:
    console.print(f"\n[bold cyan]─── {escape(title)} ───[/bold cyan]\n")


def success(msg: str) -> None:
    console.print(f"  [OK] {msg}", style="green", highlight=False, markup=False)


def warn(msg: str) -> None:
    console.print(f"  [WARN] {msg}", style="yellow", highlight=False, markup=False)


def error(msg: str) -> None:
    console.print(f"  [ERR] {msg}", style="red", highlight=False, markup=False)


def info(msg: str) -> None:
    console.print(f"  {msg}", style="dim", highlight=False, markup=False)


def print_batch_report(report: BatchReport) -> None:
    """Render counts plus one line per skipped or failed user."""
    print_header(f"{report.label}: Results" if report.label else "Results")
    console.print(f"  [green]Success:[/green] {len(report.succeeded)} users")

    if report.skipped:
        console.print(f"  [yellow]Skipped:[/yellow] {len(report.skipped)} users")
        for item in report.skipped:
            console.print(f"    - {item.handle}: {item.reason}", style="dim", markup=False)

    if report.failed:
        console.print(f"  [red]Failed:[/red]  {len(report.failed)} users")
        for item in report.failed:
            console.print(f"    - {item.handle}: {item.error}", style="red", markup=False)

    if report.cancelled:
        console.print("  [yellow]Cancelled before all users were processed.[/yellow]")
    console.print()


def format_bytes(size: int) -> str:
    """Format a byte count: 0 → "0 B", 1536 → "1.5 KB"."""
    if size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    i = min(int(math.log(size, 1024)), len(units) - 1)
    return f"{size / 1024 ** i:.1f} {units[i]}"
